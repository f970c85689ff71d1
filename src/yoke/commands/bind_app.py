"""Bind-app command: records the appId in the project manifest."""

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console

from ..config.settings import YokeSettings
from ..core.context import Context
from ..core.errors import CommandError
from ..core.resolvers import AEROBATIC_SECTION
from .base import require_credentials

console = Console()
logger = logging.getLogger(__name__)


def bind_manifest(manifest_path: Path, app_id: str) -> None:
    """Set ``_aerobatic.appId`` in the manifest, keeping every other key."""
    if not manifest_path.exists():
        raise CommandError(
            f"File {manifest_path} does not exist. Run 'npm init' to create it.",
            command="bind-app"
        )
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise CommandError(f"File {manifest_path} is not valid JSON", command="bind-app") from e
    if not isinstance(manifest, dict):
        raise CommandError(f"File {manifest_path} is not a JSON object", command="bind-app")

    section = manifest.get(AEROBATIC_SECTION)
    if not isinstance(section, dict):
        section = {}
    section["appId"] = app_id
    manifest[AEROBATIC_SECTION] = section

    manifest_path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


async def run(context: Context, settings: YokeSettings) -> None:
    """Bind the current directory to an app."""
    credentials = require_credentials(context, "bind-app")
    app_id = context.app_id or await asyncio.to_thread(typer.prompt, "App id")
    app_id = app_id.strip()
    if not app_id:
        raise CommandError("An app id is required", command="bind-app")

    manifest_path = settings.manifest_path()
    await asyncio.to_thread(bind_manifest, manifest_path, app_id)

    logger.debug(f"Bound {manifest_path} to {app_id} for user {credentials.user_id}")
    console.print(f"[green]✓[/green] Bound {manifest_path.parent} to app [cyan]{app_id}[/cyan]")
