"""
Command orchestration.

Ties the lifecycle together for a single invocation:

    required init tasks -> concurrent resolution -> context merge
    -> command dispatch -> process lifecycle -> exit code
"""

import logging
from pathlib import Path
from typing import Optional

from ..commands.registry import CommandSpec
from ..config.settings import YokeSettings
from .context import Context, Credentials
from .init_tasks import InitTaskRunner, required_init_tasks
from .invoker import CommandInvoker
from .lifecycle import ProcessLifecycle
from .reporter import ErrorReporter

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs one command from a freshly parsed context to an exit code."""

    def __init__(
        self,
        settings: YokeSettings,
        reporter: Optional[ErrorReporter] = None,
        runner: Optional[InitTaskRunner] = None,
        invoker: Optional[CommandInvoker] = None,
        lifecycle: Optional[ProcessLifecycle] = None,
        working_directory: Optional[Path] = None
    ):
        self.settings = settings
        self.reporter = reporter or ErrorReporter()
        self.runner = runner or InitTaskRunner(settings, working_directory)
        self.invoker = invoker or CommandInvoker(settings)
        self.lifecycle = lifecycle or ProcessLifecycle(self.reporter)

    async def run(self, spec: CommandSpec, context: Context) -> int:
        """Initialize, dispatch and finalize a command.

        Args:
            spec: Command table entry for the requested command
            context: Context built from the command line

        Returns:
            Process exit code
        """
        for name, value in spec.defaults.items():
            context.options.setdefault(name, value)

        if spec.require_credentials and context.has_explicit_credentials:
            context.credentials = Credentials(
                user_id=context.user_id,
                secret_key=context.secret_key
            )

        tasks = required_init_tasks(
            context,
            require_credentials=spec.require_credentials,
            load_project_config=spec.load_project_config
        )

        try:
            results = await self.runner.resolve(tasks, context)
        except Exception as e:
            return self.lifecycle.fail(e)

        context.merge(results)
        logger.debug(f"Context ready for '{spec.name}'")

        return await self.lifecycle.finalize(self.invoker.invoke(spec.handler, context))
