"""
Serve command: runs a local static server for the app.

The server keeps running after the command returns; the returned cleanup
handle shuts it down when the process is interrupted.
"""

import logging
import webbrowser
from pathlib import Path
from typing import Awaitable, Callable

from aiohttp import web
from rich.console import Console

from ..config.settings import YokeSettings
from ..core.context import Context
from ..core.invoker import CommandResult
from .base import require_project_config

console = Console()
logger = logging.getLogger(__name__)

INDEX_DOCUMENT = "index.html"
SIMULATOR_HEADER = "X-Aerobatic-Simulator"


def create_app(root: Path, simulator: bool = False) -> web.Application:
    """Build the aiohttp application serving ``root``."""
    app = web.Application()

    async def index(request: web.Request) -> web.StreamResponse:
        index_file = root / INDEX_DOCUMENT
        if not index_file.is_file():
            raise web.HTTPNotFound(text=f"No {INDEX_DOCUMENT} in {root}")
        return web.FileResponse(index_file)

    app.router.add_get("/", index)
    app.router.add_static("/", root, show_index=True)

    if simulator:
        @web.middleware
        async def simulator_header(request: web.Request, handler):
            response = await handler(request)
            response.headers[SIMULATOR_HEADER] = "1"
            return response

        app.middlewares.append(simulator_header)

    return app


async def run(context: Context, settings: YokeSettings) -> CommandResult:
    """Start the server and keep the process alive until interrupted."""
    project_config = require_project_config(context, "serve")
    simulator = bool(context.option("simulator"))
    release = bool(context.option("release"))

    root = Path.cwd()
    port = settings.default_port if context.port is None else context.port

    runner = web.AppRunner(create_app(root, simulator=simulator))
    await runner.setup()
    site = web.TCPSite(runner, settings.host, port)
    try:
        await site.start()
    except Exception:
        await runner.cleanup()
        raise

    url = f"http://{settings.host}:{port}/"
    mode = "simulator" if simulator else ("release" if release else "debug")
    console.print(
        f"[bold green]Serving[/bold green] {project_config.app_id} at [cyan]{url}[/cyan] "
        f"[dim]({mode} mode, Ctrl+C to stop)[/dim]"
    )

    if context.option("open"):
        webbrowser.open(url)

    return CommandResult(cleanup=_shutdown(runner))


def _shutdown(runner: web.AppRunner) -> Callable[[], Awaitable[None]]:
    async def cleanup() -> None:
        logger.debug("Stopping local server")
        await runner.cleanup()
        console.print("[dim]Server stopped[/dim]")

    return cleanup
