"""
Structured error system for Yoke.

Every failure the orchestrator reports is either one of the errors defined
here or an unexpected exception. The error kinds are siblings: a missing
field is never reported as a format problem and vice versa.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Normalized error categories."""
    CONFIGURATION = "configuration"
    FORMAT = "format"
    VALIDATION = "validation"
    COMMAND = "command"
    USAGE = "usage"
    UNEXPECTED = "unexpected"


class YokeError(Exception):
    """Base exception for all Yoke errors."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "message": self.message,
            "kind": self.kind.value,
            "details": self.details,
            "type": self.__class__.__name__
        }

    def __str__(self) -> str:
        return self.message


class ConfigurationError(YokeError):
    """A required file is missing, or a required field is missing from it."""

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        if path:
            self.details["path"] = path


class FormatError(YokeError):
    """A file exists but does not parse as the expected structure."""

    kind = ErrorKind.FORMAT

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        if path:
            self.details["path"] = path


class ValidationError(YokeError):
    """A value could be read but fails a precondition (e.g. no appId)."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        if field:
            self.details["field"] = field


class CommandError(YokeError):
    """Raised by a command implementation while it runs."""

    kind = ErrorKind.COMMAND

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        if command:
            self.details["command"] = command


class UsageError(YokeError):
    """The command line named a command that does not exist."""

    kind = ErrorKind.USAGE
