"""
Main CLI application entry point.

This module contains the Typer application, the global options shared by
every command, and the top-level error boundary. Commands do no work here:
each one builds a :class:`~yoke.core.context.Context` from its flags and
hands it to the orchestrator.
"""

from dataclasses import dataclass
from typing import Any, List, Optional
import asyncio
import sys

import click
import typer
from typer.core import TyperGroup
from rich.console import Console

from yoke import VERSION
from yoke.commands.registry import COMMANDS, INVALID_COMMAND_MESSAGE, get_command
from yoke.config.settings import YokeSettings, get_settings
from yoke.core import exit_codes
from yoke.core.context import Context
from yoke.core.errors import UsageError, YokeError
from yoke.core.lifecycle import exit_code_for
from yoke.core.orchestrator import Orchestrator
from yoke.core.reporter import ErrorReporter
from yoke.utils.logging import configure_logging


class YokeGroup(TyperGroup):
    """Command group reporting unknown commands as usage errors."""

    def resolve_command(self, ctx: click.Context, args: List[str]):
        if args and not args[0].startswith("-") and self.get_command(ctx, args[0]) is None:
            raise UsageError(INVALID_COMMAND_MESSAGE)
        return super().resolve_command(ctx, args)


# Create the main Typer application
app = typer.Typer(
    name="yoke",
    cls=YokeGroup,
    help="Yoke - command-line client for Aerobatic",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Rich console for output
console = Console()
error_console = Console(stderr=True)


@dataclass
class CliState:
    """Global options and settings shared with every command."""
    settings: YokeSettings
    debug: bool = False
    dev: bool = False
    offline: bool = False
    port: Optional[int] = None
    user_id: Optional[str] = None
    secret_key: Optional[str] = None


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"[bold blue]Yoke[/bold blue] version [green]{VERSION}[/green]")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Emit debug messages"),
    user_id: Optional[str] = typer.Option(
        None, "--userId", "-u",
        help="User id. If not provided the credentials in the .aerobatic file are used",
    ),
    secret_key: Optional[str] = typer.Option(None, "--secretKey", "-k", help="User secret key"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port number to listen on"),
    dev: bool = typer.Option(False, "--dev", help="Run yoke against the development environment"),
    offline: bool = typer.Option(False, "--offline", help="Indicate that you are offline"),
) -> None:
    """
    Yoke - command-line client for Aerobatic.

    Create, bind, serve and deploy Aerobatic apps.
    """
    settings = get_settings()
    if debug:
        settings.debug = True
    configure_logging(settings)

    ctx.obj = CliState(
        settings=settings,
        debug=debug,
        dev=dev,
        offline=offline,
        port=port,
        user_id=user_id,
        secret_key=secret_key,
    )


def _run_command(ctx: typer.Context, name: str, app_id: Optional[str] = None, **options: Any) -> None:
    """Build the context for a command and run it through the orchestrator."""
    state: CliState = ctx.obj
    spec = get_command(name)
    context = Context(
        debug=state.debug,
        dev=state.dev,
        offline=state.offline,
        port=state.port,
        user_id=state.user_id,
        secret_key=state.secret_key,
        app_id=app_id,
        options=options,
    )

    reporter = ErrorReporter(error_console, debug=state.settings.debug)
    orchestrator = Orchestrator(state.settings, reporter=reporter)
    code = asyncio.run(orchestrator.run(spec, context))
    if code != exit_codes.SUCCESS:
        raise typer.Exit(code)


@app.command("login", help=COMMANDS.get("login").description)
def login_command(ctx: typer.Context) -> None:
    _run_command(ctx, "login")


@app.command("create-app", help=COMMANDS.get("create-app").description)
def create_app_command(
    ctx: typer.Context,
    github_repo: Optional[str] = typer.Option(
        None, "--github-repo",
        help="GitHub repo to scaffold a new app from. Specify owner/repoName",
    ),
    github_branch: Optional[str] = typer.Option(
        None, "--github-branch",
        help="GitHub branch (only relevant if github-repo specified)",
    ),
) -> None:
    _run_command(ctx, "create-app", github_repo=github_repo, github_branch=github_branch)


@app.command("bind-app", help=COMMANDS.get("bind-app").description)
def bind_app_command(ctx: typer.Context) -> None:
    _run_command(ctx, "bind-app")


@app.command("serve", help=COMMANDS.get("serve").description)
def serve_command(
    ctx: typer.Context,
    open_browser: bool = typer.Option(False, "--open", "-o", help="Open a browser to the local server"),
    release: bool = typer.Option(False, "--release", help="Run in release mode"),
) -> None:
    _run_command(ctx, "serve", open=open_browser, release=release)


@app.command("sim", help=COMMANDS.get("sim").description)
def sim_command(ctx: typer.Context) -> None:
    _run_command(ctx, "sim")


@app.command("deploy", help=COMMANDS.get("deploy").description)
def deploy_command(
    ctx: typer.Context,
    unattended: bool = typer.Option(False, "--unattended", "-x", help="Run in unattended mode"),
    version_name: Optional[str] = typer.Option(None, "--version-name", help="Version name"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Version message"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Force all production traffic to the new version"
    ),
    app_id: Optional[str] = typer.Option(
        None, "--appId", help="Set appId (in place of the one defined in package.json)"
    ),
) -> None:
    _run_command(
        ctx,
        "deploy",
        app_id=app_id,
        unattended=unattended,
        version_name=version_name,
        message=message,
        force=force,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI application.

    Errors raised before a command is dispatched (an unknown command name)
    are reported here; everything after dispatch is reported by the
    orchestrator.
    """
    try:
        app(args=argv, prog_name="yoke")
    except YokeError as e:
        failure = ErrorReporter(error_console).report(e)
        sys.exit(exit_code_for(failure))
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)


if __name__ == "__main__":
    main()
