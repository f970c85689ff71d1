"""Create-app command."""

from ..config.settings import YokeSettings
from ..core.context import Context
from ..core.errors import CommandError
from .base import require_credentials


async def run(context: Context, settings: YokeSettings) -> None:
    require_credentials(context, "create-app")
    raise CommandError(
        f"create-app talks to the Aerobatic {settings.environment} API, "
        "which this client build does not include.",
        command="create-app"
    )
