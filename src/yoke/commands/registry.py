"""
Command table for Yoke.

Each entry names the implementation to dispatch to and the initialization
tasks the command needs before it can run.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from ..core.errors import UsageError

INVALID_COMMAND_MESSAGE = "Not a valid command. Type 'yoke -h' for help."


@dataclass(frozen=True)
class CommandSpec:
    """A command and its prerequisites."""
    name: str
    handler: str  # "package.module:function"
    description: str
    require_credentials: bool = True
    load_project_config: bool = True
    defaults: Mapping[str, Any] = field(default_factory=dict)


class CommandRegistry:
    """Registry of the commands the CLI can dispatch."""

    def __init__(self):
        self._commands: Dict[str, CommandSpec] = {}

    def register(self, spec: CommandSpec) -> CommandSpec:
        """Register a command. Names are unique."""
        if spec.name in self._commands:
            raise ValueError(f"Command '{spec.name}' already registered")
        self._commands[spec.name] = spec
        return spec

    def get(self, name: str) -> CommandSpec:
        """Look up a command.

        Raises:
            UsageError: No command has that name
        """
        spec = self._commands.get(name)
        if spec is None:
            raise UsageError(INVALID_COMMAND_MESSAGE)
        return spec

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def names(self) -> List[str]:
        return list(self._commands)


def _builtin_registry() -> CommandRegistry:
    registry = CommandRegistry()
    registry.register(CommandSpec(
        name="login",
        handler="yoke.commands.login:run",
        description="Write the login credentials",
        require_credentials=False,
        load_project_config=False,
    ))
    registry.register(CommandSpec(
        name="create-app",
        handler="yoke.commands.create_app:run",
        description="Create a new Aerobatic app",
        load_project_config=False,
    ))
    registry.register(CommandSpec(
        name="bind-app",
        handler="yoke.commands.bind_app:run",
        description="Bind the current directory to an existing Aerobatic app",
        load_project_config=False,
    ))
    registry.register(CommandSpec(
        name="serve",
        handler="yoke.commands.serve:run",
        description="Run a localhost instance of the app",
    ))
    registry.register(CommandSpec(
        name="sim",
        handler="yoke.commands.serve:run",
        description="Run the simulator server",
        defaults={"simulator": True},
    ))
    registry.register(CommandSpec(
        name="deploy",
        handler="yoke.commands.deploy:run",
        description="Deploy a new version of the app",
    ))
    return registry


COMMANDS = _builtin_registry()


def get_command(name: str) -> CommandSpec:
    """Look up a built-in command by name."""
    return COMMANDS.get(name)
