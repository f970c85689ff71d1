"""Tests for the command table and the bundled command implementations."""

import asyncio
import json
import socket
import stat
import sys

import aiohttp
import pytest

from yoke.commands import bind_app, create_app, deploy, login, serve
from yoke.commands.base import callback_command, require_credentials
from yoke.commands.registry import COMMANDS, CommandRegistry, CommandSpec, get_command
from yoke.core.context import Context, Credentials, ProjectConfig
from yoke.core.errors import CommandError, UsageError
from yoke.core.invoker import CommandResult
from yoke.core.resolvers import load_credentials, load_project_config

CREDENTIALS = Credentials(user_id="user-1", secret_key="s3cret")


class TestCommandRegistry:
    """Test cases for the command table."""

    def test_builtin_commands(self):
        assert COMMANDS.names() == ["login", "create-app", "bind-app", "serve", "sim", "deploy"]

    @pytest.mark.parametrize("name,credentials,project_config", [
        ("login", False, False),
        ("create-app", True, False),
        ("bind-app", True, False),
        ("serve", True, True),
        ("sim", True, True),
        ("deploy", True, True),
    ])
    def test_init_requirements(self, name, credentials, project_config):
        spec = get_command(name)
        assert spec.require_credentials is credentials
        assert spec.load_project_config is project_config

    def test_sim_is_serve_in_simulator_mode(self):
        assert get_command("sim").handler == get_command("serve").handler
        assert get_command("sim").defaults == {"simulator": True}

    def test_unknown_command(self):
        with pytest.raises(UsageError, match="Not a valid command"):
            get_command("publish")

    def test_duplicate_registration(self):
        registry = CommandRegistry()
        registry.register(CommandSpec(name="x", handler="m:f", description="x"))
        with pytest.raises(ValueError):
            registry.register(CommandSpec(name="x", handler="m:g", description="x"))


class TestCallbackCommand:
    """Test cases for the completion-callback adapter."""

    @pytest.mark.asyncio
    async def test_success_without_handle(self, settings):
        @callback_command
        def run(context, settings, done):
            asyncio.get_running_loop().call_soon(done, None)

        assert await run(Context(), settings) == CommandResult()

    @pytest.mark.asyncio
    async def test_success_with_keep_alive_handle(self, settings):
        def cleanup():
            pass

        @callback_command
        def run(context, settings, done):
            done(None, cleanup)

        result = await run(Context(), settings)
        assert result.cleanup is cleanup

    @pytest.mark.asyncio
    async def test_string_error_becomes_command_error(self, settings):
        @callback_command
        def run(context, settings, done):
            done("Deploy rejected")

        with pytest.raises(CommandError, match="Deploy rejected"):
            await run(Context(), settings)

    @pytest.mark.asyncio
    async def test_exception_is_kept_as_original_error(self, settings):
        error = RuntimeError("upload failed")

        @callback_command
        def run(context, settings, done):
            done(error)

        with pytest.raises(CommandError) as exc_info:
            await run(Context(), settings)
        assert exc_info.value.original_error is error

    @pytest.mark.asyncio
    async def test_second_completion_is_ignored(self, settings):
        @callback_command
        def run(context, settings, done):
            done(None)
            done("too late")

        assert await run(Context(), settings) == CommandResult()

    def test_require_credentials(self):
        with pytest.raises(CommandError, match="yoke login"):
            require_credentials(Context(), "deploy")
        assert require_credentials(Context(credentials=CREDENTIALS), "deploy") is CREDENTIALS


class TestLogin:
    """Test cases for the login command."""

    @pytest.mark.asyncio
    async def test_writes_credentials_from_flags(self, settings):
        await login.run(Context(user_id="user-1", secret_key="s3cret"), settings)

        assert await load_credentials(settings.credentials_file) == CREDENTIALS

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    async def test_credentials_file_is_private(self, settings):
        await login.run(Context(user_id="user-1", secret_key="s3cret"), settings)

        mode = stat.S_IMODE(settings.credentials_file.stat().st_mode)
        assert mode == 0o600

    @pytest.mark.asyncio
    async def test_prompts_for_missing_values(self, settings, monkeypatch):
        answers = iter(["user-2", "other-key"])
        monkeypatch.setattr(login.typer, "prompt", lambda *args, **kwargs: next(answers))

        await login.run(Context(), settings)

        credentials = await load_credentials(settings.credentials_file)
        assert credentials.user_id == "user-2"
        assert credentials.secret_key == "other-key"


class TestBindApp:
    """Test cases for the bind-app command."""

    @pytest.mark.asyncio
    async def test_binds_manifest(self, settings, project_dir, write_manifest):
        path = write_manifest({"name": "my-site", "version": "1.0.0"})

        await bind_app.run(Context(app_id="app-9", credentials=CREDENTIALS), settings)

        manifest = json.loads(path.read_text())
        assert manifest["name"] == "my-site"
        assert manifest["_aerobatic"] == {"appId": "app-9"}
        assert (await load_project_config(path)).app_id == "app-9"

    @pytest.mark.asyncio
    async def test_keeps_other_section_keys(self, settings, write_manifest):
        path = write_manifest({"_aerobatic": {"appId": "old", "baseDir": "dist"}})

        await bind_app.run(Context(app_id="new", credentials=CREDENTIALS), settings)

        assert json.loads(path.read_text())["_aerobatic"] == {"appId": "new", "baseDir": "dist"}

    @pytest.mark.asyncio
    async def test_keeps_non_ascii_text(self, settings, write_manifest):
        path = write_manifest({"author": "Jos\u00e9"})

        await bind_app.run(Context(app_id="app-9", credentials=CREDENTIALS), settings)

        assert '"author": "José"' in path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_missing_manifest(self, settings):
        with pytest.raises(CommandError, match="npm init"):
            await bind_app.run(Context(app_id="app-9", credentials=CREDENTIALS), settings)


class TestRemoteCommands:
    """create-app and deploy need the platform API."""

    @pytest.mark.asyncio
    async def test_create_app(self, settings):
        with pytest.raises(CommandError, match="create-app"):
            await create_app.run(Context(credentials=CREDENTIALS), settings)

    @pytest.mark.asyncio
    async def test_deploy(self, settings):
        context = Context(credentials=CREDENTIALS, project_config=ProjectConfig(app_id="app-123"))
        with pytest.raises(CommandError, match="app-123"):
            await deploy.run(context, settings)


class TestServe:
    """Test cases for the serve command."""

    @pytest.mark.asyncio
    async def test_serves_until_cleanup(self, settings, project_dir, unused_tcp_port):
        (project_dir / "index.html").write_text("<h1>hello</h1>")
        context = Context(
            port=unused_tcp_port,
            options={"simulator": True},
            credentials=CREDENTIALS,
            project_config=ProjectConfig(app_id="app-123"),
        )

        result = await serve.run(context, settings)
        assert result.keep_alive

        url = f"http://{settings.host}:{unused_tcp_port}/"
        async with aiohttp.ClientSession() as session:
            async with session.get(url) as response:
                assert response.status == 200
                assert "hello" in await response.text()
                assert response.headers[serve.SIMULATOR_HEADER] == "1"

        await result.cleanup()

        async with aiohttp.ClientSession() as session:
            with pytest.raises(aiohttp.ClientConnectionError):
                await session.get(url)

    @pytest.mark.asyncio
    async def test_needs_project_config(self, settings):
        with pytest.raises(CommandError, match="bind-app"):
            await serve.run(Context(credentials=CREDENTIALS), settings)

    @pytest.mark.asyncio
    async def test_port_in_use_releases_runner(self, settings, unused_tcp_port, monkeypatch):
        cleanups = []
        original_cleanup = serve.web.AppRunner.cleanup

        async def cleanup(runner):
            cleanups.append(runner)
            await original_cleanup(runner)

        monkeypatch.setattr(serve.web.AppRunner, "cleanup", cleanup)
        context = Context(
            port=unused_tcp_port,
            credentials=CREDENTIALS,
            project_config=ProjectConfig(app_id="app-123"),
        )

        with socket.socket() as sock:
            sock.bind((settings.host, unused_tcp_port))
            sock.listen()
            with pytest.raises(OSError):
                await serve.run(context, settings)

        assert len(cleanups) == 1
