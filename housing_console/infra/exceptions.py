"""
Infrastructure layer - exceptions.

Standard exception classes for the console. The session store and the query
layer convert these into result objects at their boundary; pages only ever see
results, except for configuration problems at startup.
"""

from typing import Any, Dict, Optional


class HousingConsoleError(Exception):
    """Base exception for the housing console"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "UNKNOWN_ERROR"
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ConfigError(HousingConsoleError):
    """Configuration could not be loaded or is invalid"""
    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, "CONFIG_ERROR", {"config_key": config_key, **kwargs})


class StorageError(HousingConsoleError):
    """Persisted session storage could not be read or written"""
    def __init__(self, message: str, key: Optional[str] = None, operation: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, "STORAGE_ERROR", {"key": key, "operation": operation, **kwargs})


class ProtocolError(HousingConsoleError):
    """Remote answered but the payload is missing something we need"""
    def __init__(self, message: str, field: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, "PROTOCOL_ERROR", {"field": field, **kwargs})


class ErrorHandler:
    """Turns exceptions into the error dicts pages show."""

    def __init__(self, logger=None):
        if logger is None:
            from .logging import get_logger
            logger = get_logger(__name__)
        self.logger = logger

    def handle_and_log(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        context = context or {}

        if isinstance(error, HousingConsoleError):
            self.logger.error(f"[{error.error_code}] {error.message} {context or ''}".rstrip())
        else:
            self.logger.error(f"System error: {error} {context or ''}".rstrip(), exc_info=True)

    def create_error_response(self, error: Exception) -> Dict[str, Any]:
        if isinstance(error, HousingConsoleError):
            return {
                "success": False,
                "error": error.to_dict()
            }
        return {
            "success": False,
            "error": {
                "error_code": "SYSTEM_ERROR",
                "message": "Internal error",
                "details": {"original_error": str(error)}
            }
        }
