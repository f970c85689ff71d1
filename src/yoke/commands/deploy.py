"""Deploy command."""

from ..config.settings import YokeSettings
from ..core.context import Context
from ..core.errors import CommandError
from .base import require_credentials, require_project_config


async def run(context: Context, settings: YokeSettings) -> None:
    require_credentials(context, "deploy")
    project_config = require_project_config(context, "deploy")
    raise CommandError(
        f"Deploying {project_config.app_id} needs the Aerobatic {settings.environment} API, "
        "which this client build does not include.",
        command="deploy"
    )
