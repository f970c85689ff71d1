"""
Command invocation.

A command implementation is an async callable taking the resolved
:class:`~yoke.core.context.Context` and the runtime settings. It either
raises, or returns a :class:`CommandResult` telling the lifecycle manager
whether to exit now or to keep the process alive until interrupted.
"""

import importlib
import inspect
import logging
import os
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, MutableMapping, Optional, Union

from ..config.settings import YokeSettings
from ..utils.logging import configure_logging
from .context import Context
from .errors import CommandError, YokeError

logger = logging.getLogger(__name__)

DEBUG_ENV_VAR = "YOKE_DEBUG"
ENVIRONMENT_ENV_VAR = "AEROBATIC_ENV"

Cleanup = Callable[[], Optional[Awaitable[None]]]


@dataclass(frozen=True)
class CommandResult:
    """Successful completion of a command.

    ``cleanup`` is a keep-alive handle: when set, the process stays open
    until interrupted and the handle is called once on the way out.
    """
    cleanup: Optional[Cleanup] = None

    @property
    def keep_alive(self) -> bool:
        return self.cleanup is not None


CommandHandler = Callable[[Context, YokeSettings], Awaitable[Union[CommandResult, Cleanup, None]]]


def as_command_result(value: Any) -> CommandResult:
    """Normalize what a command implementation returned."""
    if isinstance(value, CommandResult):
        return value
    if value is None:
        return CommandResult()
    if callable(value):
        return CommandResult(cleanup=value)
    raise CommandError(f"Command returned an unsupported value: {value!r}")


def load_handler(path: str) -> CommandHandler:
    """Import a handler given as ``package.module:function``."""
    module_name, _, attribute = path.partition(":")
    module = importlib.import_module(module_name)
    handler = getattr(module, attribute or "run", None)
    if handler is None or not callable(handler):
        raise CommandError(f"Command implementation '{path}' not found")
    return handler


class CommandInvoker:
    """Applies process-wide defaults and dispatches to a command."""

    def __init__(
        self,
        settings: YokeSettings,
        environ: Optional[MutableMapping[str, str]] = None
    ):
        self.settings = settings
        self.environ = os.environ if environ is None else environ

    def apply_global_defaults(self, context: Context) -> None:
        """Apply the debug and dev flags for the rest of the process.

        The settings object is the source of truth; the environment
        variables are exported for child processes and never read back.
        """
        if context.debug:
            self.settings.debug = True
            self.environ[DEBUG_ENV_VAR] = "1"
            configure_logging(self.settings)
        if context.dev:
            self.settings.environment = "dev"
            self.environ[ENVIRONMENT_ENV_VAR] = "dev"

    async def invoke(self, handler_path: str, context: Context) -> CommandResult:
        """Dispatch to the implementation and wait for it to complete.

        Raises:
            CommandError: The implementation failed; exceptions that are
                not Yoke errors are wrapped and kept as ``original_error``
        """
        self.apply_global_defaults(context)

        handler = load_handler(handler_path)
        logger.debug(f"Invoking {handler_path}")

        try:
            value = handler(context, self.settings)
            if inspect.isawaitable(value):
                value = await value
        except YokeError:
            raise
        except Exception as e:
            raise CommandError(str(e) or type(e).__name__, original_error=e) from e
        return as_command_result(value)
