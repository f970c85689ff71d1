"""Login command: writes the per-user credentials file."""

import asyncio
import json
import logging
import os
from pathlib import Path

import typer
from rich.console import Console

from ..config.settings import YokeSettings
from ..core.context import Context, Credentials
from ..core.errors import CommandError

console = Console()
logger = logging.getLogger(__name__)


def write_credentials(path: Path, credentials: Credentials) -> None:
    """Write credentials readable only by the current user."""
    payload = json.dumps(credentials.model_dump(by_alias=True), indent=2)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(payload + "\n")


async def run(context: Context, settings: YokeSettings) -> None:
    """Prompt for any credential not given on the command line and save it."""
    user_id = context.user_id or await asyncio.to_thread(typer.prompt, "User id")
    secret_key = context.secret_key or await asyncio.to_thread(
        typer.prompt, "Secret key", hide_input=True
    )

    if not user_id or not secret_key:
        raise CommandError("Both a user id and a secret key are required", command="login")

    credentials = Credentials(user_id=user_id.strip(), secret_key=secret_key.strip())
    await asyncio.to_thread(write_credentials, settings.credentials_file, credentials)

    logger.debug(f"Wrote credentials to {settings.credentials_file}")
    console.print(f"[green]✓[/green] Credentials saved to {settings.credentials_file}")
