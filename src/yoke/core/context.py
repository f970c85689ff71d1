"""
Execution context passed to command implementations.

The context is created fresh for every invocation from the parsed command
line, enriched exactly once with the results of the initialization tasks
and then handed to a single command implementation.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """Cached user credentials."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: str = Field(alias="userId", min_length=1)
    secret_key: str = Field(alias="secretKey", min_length=1)


class ProjectConfig(BaseModel):
    """
    Deployment configuration from the ``_aerobatic`` manifest section.

    Keys of the section that are not modelled here are kept as extra
    attributes so command implementations can still read them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    app_id: str = Field(alias="appId", min_length=1)
    app_version: Optional[str] = Field(default=None, alias="appVersion")
    npm_scripts: Dict[str, str] = Field(default_factory=dict, alias="npmScripts")


@dataclass
class Context:
    """Resolved options, flags, credentials and project configuration."""
    debug: bool = False
    dev: bool = False
    offline: bool = False
    port: Optional[int] = None
    user_id: Optional[str] = None
    secret_key: Optional[str] = None
    app_id: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)
    credentials: Optional[Credentials] = None
    project_config: Optional[ProjectConfig] = None

    @property
    def has_explicit_credentials(self) -> bool:
        """Whether both userId and secretKey were given on the command line."""
        return bool(self.user_id and self.secret_key)

    def merge(self, results: Mapping[Any, Any]) -> None:
        """Assign each initialization result to the field of the same name.

        Keys are either task names or members of an Enum whose values are
        field names. Assignment is keyed, so the order in which results
        arrived does not matter.
        """
        for key, value in results.items():
            name = getattr(key, "value", key)
            if name not in ("credentials", "project_config"):
                raise KeyError(f"Unknown initialization result '{name}'")
            setattr(self, name, value)

    def option(self, name: str, default: Any = None) -> Any:
        """Get a per-command flag."""
        return self.options.get(name, default)
