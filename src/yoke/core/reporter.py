"""
Error normalization and reporting.

Failures reach the top of the orchestrator in several shapes: Yoke errors
raised by resolvers, plain strings handed to a completion callback, and
arbitrary exceptions escaping a command implementation. They are all
normalized into a :class:`Failure` before being shown to the user.
"""

import logging
import traceback
from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.markup import escape

from .errors import ErrorKind, YokeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Failure:
    """Normalized failure: an error kind plus the text shown to the user."""
    kind: ErrorKind
    message: str

    @classmethod
    def from_error(cls, error: object, debug: bool = False) -> "Failure":
        """Normalize any failure value.

        Yoke errors carry a complete message and are shown as-is, except
        command errors wrapping another exception, which show that
        exception's stack trace. In debug mode a raised Yoke error shows
        its own stack trace. Any other exception is shown with its stack
        trace.
        """
        if isinstance(error, Failure):
            return error

        if isinstance(error, YokeError):
            if error.kind is ErrorKind.COMMAND and error.original_error is not None:
                return cls(kind=error.kind, message=_format_trace(error.original_error))
            if debug and error.__traceback__ is not None:
                return cls(kind=error.kind, message=_format_trace(error))
            return cls(kind=error.kind, message=error.message)

        if isinstance(error, BaseException):
            return cls(kind=ErrorKind.UNEXPECTED, message=_format_trace(error))

        if isinstance(error, str):
            return cls(kind=ErrorKind.UNEXPECTED, message=error)

        return cls(kind=ErrorKind.UNEXPECTED, message=f"Unexpected failure: {error!r}")


class ErrorReporter:
    """Writes one error entry per failing invocation."""

    def __init__(self, console: Optional[Console] = None, debug: bool = False):
        self.console = console or Console(stderr=True)
        self.debug = debug

    def report(self, error: object) -> Failure:
        """Normalize and print a failure. Returns the normalized failure."""
        failure = Failure.from_error(error, debug=self.debug)
        logger.debug(f"Reporting {failure.kind.value} failure")
        self.console.print(
            f"[red]Error:[/red] {escape(failure.message)}",
            soft_wrap=True,
        )
        return failure


def _format_trace(error: BaseException) -> str:
    return "".join(
        traceback.format_exception(type(error), error, error.__traceback__)
    ).rstrip()
