"""
Unit tests: logger manager
"""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from housing_console.infra.logging import LoggerManager, get_logger, set_log_level


class TestLoggerManager:

    def setup_method(self):
        self._root_level = logging.getLogger().level
        self._root_handlers = list(logging.getLogger().handlers)
        LoggerManager.reset()

    def teardown_method(self):
        root = logging.getLogger()
        for handler in list(root.handlers):
            if handler not in self._root_handlers:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(self._root_level)
        LoggerManager.reset()

    def test_same_logger_for_same_name(self):
        assert get_logger("housing_console.x") is get_logger("housing_console.x")

    def test_set_level(self):
        set_log_level("debug")
        assert logging.getLogger().level == logging.DEBUG
        set_log_level("nonsense")
        assert logging.getLogger().level == logging.DEBUG

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "console.log"
        logger = get_logger("housing_console.test")
        LoggerManager.set_log_file(log_file)
        logger.warning("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "written to file" in log_file.read_text(encoding="utf-8")
