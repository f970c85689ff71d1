"""Initialization tasks and their concurrent runner."""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Mapping, Optional

from ..config.settings import YokeSettings
from .context import Context
from .resolvers import load_credentials, load_project_config

logger = logging.getLogger(__name__)


class InitTask(Enum):
    """Prerequisites a command can declare. Values name Context fields."""
    CREDENTIALS = "credentials"
    PROJECT_CONFIG = "project_config"


InitTaskSpec = FrozenSet[InitTask]
TaskLoader = Callable[[], Awaitable[Any]]


def required_init_tasks(
    context: Context,
    require_credentials: bool = True,
    load_project_config: bool = True
) -> InitTaskSpec:
    """Determine which initialization tasks a command needs.

    Credentials are skipped when both userId and secretKey were already
    given on the command line.
    """
    tasks = set()
    if require_credentials and not context.has_explicit_credentials:
        tasks.add(InitTask.CREDENTIALS)
    if load_project_config:
        tasks.add(InitTask.PROJECT_CONFIG)
    return frozenset(tasks)


class InitTaskRunner:
    """Runs initialization tasks concurrently and joins on the first failure."""

    def __init__(self, settings: YokeSettings, working_directory: Optional[Path] = None):
        self.settings = settings
        self.working_directory = Path(working_directory or Path.cwd())

    def loaders_for(self, tasks: InitTaskSpec, context: Context) -> Dict[InitTask, TaskLoader]:
        """Bind each declared task to the resolver that produces it."""
        loaders: Dict[InitTask, TaskLoader] = {}
        if InitTask.CREDENTIALS in tasks:
            loaders[InitTask.CREDENTIALS] = lambda: load_credentials(
                self.settings.credentials_file
            )
        if InitTask.PROJECT_CONFIG in tasks:
            loaders[InitTask.PROJECT_CONFIG] = lambda: load_project_config(
                self.settings.manifest_path(self.working_directory),
                app_id_override=context.app_id
            )
        return loaders

    async def run(self, loaders: Mapping[InitTask, TaskLoader]) -> Dict[InitTask, Any]:
        """Run all loaders concurrently.

        Returns a mapping from task to resolved value. The first failure
        observed propagates; results of the other tasks are discarded.
        """
        if not loaders:
            return {}

        names = list(loaders)
        logger.debug(f"Running init tasks: {', '.join(n.value for n in names)}")

        # Exceptions from tasks that fail after the first are retrieved by gather.
        values = await asyncio.gather(*(loaders[name]() for name in names))
        return dict(zip(names, values))

    async def resolve(self, tasks: InitTaskSpec, context: Context) -> Dict[InitTask, Any]:
        """Run the declared tasks for a context."""
        return await self.run(self.loaders_for(tasks, context))
