from typing import Optional


class CswitchError(Exception):
    """Base class for all cswitch errors."""


class ConfigError(CswitchError):
    """The configuration file could not be read, parsed or written."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message)
        self.file_path = file_path

    def __str__(self) -> str:
        message = super().__str__()
        if self.file_path:
            return f"{message} ({self.file_path})"
        return message


class ValidationError(CswitchError, ValueError):
    """A field-level or whole-configuration invariant was violated."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class OperationError(CswitchError):
    """A store operation was refused."""
