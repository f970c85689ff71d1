"""Tests for command dispatch."""

import logging
import sys
import types

import pytest

from yoke.core.context import Context
from yoke.core.errors import CommandError
from yoke.core.invoker import (
    DEBUG_ENV_VAR, ENVIRONMENT_ENV_VAR, CommandInvoker, CommandResult, as_command_result, load_handler,
)


@pytest.fixture
def handlers(monkeypatch):
    """A throwaway module holding command implementations."""
    module = types.ModuleType("yoke_test_handlers")
    monkeypatch.setitem(sys.modules, module.__name__, module)
    return module


class TestAsCommandResult:
    """Test cases for as_command_result."""

    def test_none_is_immediate(self):
        assert as_command_result(None) == CommandResult()
        assert not as_command_result(None).keep_alive

    def test_callable_is_keep_alive(self):
        def cleanup():
            pass

        result = as_command_result(cleanup)
        assert result.keep_alive
        assert result.cleanup is cleanup

    def test_result_passes_through(self):
        result = CommandResult()
        assert as_command_result(result) is result

    def test_unsupported_value(self):
        with pytest.raises(CommandError):
            as_command_result(42)


class TestLoadHandler:
    """Test cases for load_handler."""

    def test_loads_function(self, handlers):
        async def deploy(context, settings):
            return None

        handlers.deploy = deploy
        assert load_handler("yoke_test_handlers:deploy") is deploy

    def test_defaults_to_run(self, handlers):
        async def run(context, settings):
            return None

        handlers.run = run
        assert load_handler("yoke_test_handlers") is run

    def test_missing_function(self, handlers):
        with pytest.raises(CommandError, match="not found"):
            load_handler("yoke_test_handlers:nothing")


class TestCommandInvoker:
    """Test cases for CommandInvoker."""

    def test_global_defaults_are_applied(self, settings):
        environ = {}
        invoker = CommandInvoker(settings, environ=environ)

        invoker.apply_global_defaults(Context(debug=True, dev=True))

        assert settings.debug is True
        assert settings.environment == "dev"
        assert environ == {DEBUG_ENV_VAR: "1", ENVIRONMENT_ENV_VAR: "dev"}
        assert logging.getLogger("yoke").level == logging.DEBUG

    def test_no_flags_leave_settings_alone(self, settings):
        environ = {}
        invoker = CommandInvoker(settings, environ=environ)

        invoker.apply_global_defaults(Context())

        assert settings.debug is False
        assert settings.environment == "production"
        assert environ == {}

    @pytest.mark.asyncio
    async def test_invoke_passes_context_and_settings(self, settings, handlers):
        seen = {}

        async def run(context, settings):
            seen["context"] = context
            seen["settings"] = settings

        handlers.run = run
        context = Context(options={"force": True})

        result = await CommandInvoker(settings, environ={}).invoke("yoke_test_handlers:run", context)

        assert result == CommandResult()
        assert seen == {"context": context, "settings": settings}

    @pytest.mark.asyncio
    async def test_invoke_returns_keep_alive_handle(self, settings, handlers):
        def cleanup():
            pass

        async def run(context, settings):
            return cleanup

        handlers.run = run

        result = await CommandInvoker(settings, environ={}).invoke("yoke_test_handlers:run", Context())

        assert result.cleanup is cleanup

    @pytest.mark.asyncio
    async def test_command_errors_propagate_unchanged(self, settings, handlers):
        error = CommandError("deploy rejected")

        async def run(context, settings):
            raise error

        handlers.run = run

        with pytest.raises(CommandError) as exc_info:
            await CommandInvoker(settings, environ={}).invoke("yoke_test_handlers:run", Context())
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_other_exceptions_are_wrapped(self, settings, handlers):
        async def run(context, settings):
            raise RuntimeError("socket closed")

        handlers.run = run

        with pytest.raises(CommandError) as exc_info:
            await CommandInvoker(settings, environ={}).invoke("yoke_test_handlers:run", Context())
        assert isinstance(exc_info.value.original_error, RuntimeError)
        assert str(exc_info.value) == "socket closed"
