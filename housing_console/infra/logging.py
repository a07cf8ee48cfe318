"""
Infrastructure layer - logging.

One place that configures the root logger for the console and hands out
named loggers.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Dict


_LEVEL_MAP = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}


class LoggerManager:
    """Unified logger manager"""

    _loggers: Dict[str, logging.Logger] = {}
    _configured: bool = False
    _log_file: Optional[Path] = None

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get (or create) a configured logger.

        Args:
            name: logger name, usually ``__name__``

        Returns:
            the logger instance
        """
        if not cls._configured:
            cls._configure_logging()

        if name not in cls._loggers:
            cls._loggers[name] = logging.getLogger(name)

        return cls._loggers[name]

    @classmethod
    def _configure_logging(cls):
        if cls._configured:
            return

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.INFO)

        # streamlit and pytest install their own handlers; don't stack ours on top
        if root_logger.handlers:
            cls._configured = True
            return

        console_handler = logging.StreamHandler(sys.stdout)
        console_formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

        if cls._log_file:
            cls._add_file_handler_internal(cls._log_file, root_logger)

        cls._configured = True

    @classmethod
    def _add_file_handler_internal(cls, log_file: Path, logger: logging.Logger) -> None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] [%(name)s:%(lineno)d] %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"File logging disabled: {e}")

    @classmethod
    def set_log_file(cls, log_file: Path) -> None:
        """Set the log file path (applied immediately if already configured)."""
        if cls._log_file == log_file:
            return
        cls._log_file = log_file
        if cls._configured:
            cls._add_file_handler_internal(log_file, logging.getLogger())

    @classmethod
    def set_level(cls, level: str) -> None:
        """Set the global log level; unknown names are ignored."""
        if level and level.upper() in _LEVEL_MAP:
            logging.getLogger().setLevel(_LEVEL_MAP[level.upper()])

    @classmethod
    def reset(cls) -> None:
        """Reset configuration (tests)."""
        cls._loggers.clear()
        cls._configured = False
        cls._log_file = None


def get_logger(name: str) -> logging.Logger:
    return LoggerManager.get_logger(name)


def set_log_level(level: str) -> None:
    LoggerManager.set_level(level)
