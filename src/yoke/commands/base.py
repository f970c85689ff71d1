"""
Helpers shared by command implementations.

Command implementations are async callables ``(context, settings)``. The
:func:`callback_command` decorator adapts implementations written in the
completion-callback style, where the command calls ``done(error)`` on
failure or ``done(None, cleanup)`` on success.
"""

import asyncio
import functools
import logging
from typing import Any, Callable, Optional

from ..config.settings import YokeSettings
from ..core.context import Context
from ..core.errors import CommandError
from ..core.invoker import Cleanup, CommandHandler, CommandResult

logger = logging.getLogger(__name__)

Done = Callable[..., None]
CallbackImplementation = Callable[[Context, YokeSettings, Done], Any]


def callback_command(func: CallbackImplementation) -> CommandHandler:
    """Turn a ``func(context, settings, done)`` implementation into a handler."""

    @functools.wraps(func)
    async def handler(context: Context, settings: YokeSettings) -> CommandResult:
        loop = asyncio.get_running_loop()
        completion: asyncio.Future = loop.create_future()

        def done(error: Any = None, cleanup: Optional[Cleanup] = None) -> None:
            if completion.done():
                logger.warning(f"{func.__name__} signalled completion more than once")
                return
            if error is None:
                completion.set_result(CommandResult(cleanup=cleanup))
            elif isinstance(error, CommandError):
                completion.set_exception(error)
            elif isinstance(error, BaseException):
                completion.set_exception(CommandError(str(error), original_error=error))
            else:
                completion.set_exception(CommandError(str(error)))

        func(context, settings, done)
        return await completion

    return handler


def require_credentials(context: Context, command: str):
    """Return the context's credentials or fail the command."""
    if context.credentials is None:
        raise CommandError(f"'{command}' needs credentials. Run 'yoke login' first.", command=command)
    return context.credentials


def require_project_config(context: Context, command: str):
    """Return the context's project configuration or fail the command."""
    if context.project_config is None:
        raise CommandError(f"'{command}' needs a bound project. Run 'yoke bind-app' first.", command=command)
    return context.project_config
