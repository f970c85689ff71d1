"""
Process lifecycle management.

After a command has been dispatched the lifecycle manager decides how the
process ends:

* the command failed: the error is reported and the process terminates;
* the command completed without a keep-alive handle: terminate now;
* the command returned a keep-alive handle (a local server, say): wait
  until SIGINT/SIGTERM arrives, call the handle once, then terminate.
"""

import asyncio
import inspect
import logging
import signal
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from . import exit_codes
from .errors import ErrorKind
from .invoker import Cleanup, CommandResult
from .reporter import ErrorReporter, Failure

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class LifecycleState(Enum):
    """States of a dispatched command."""
    INVOKING = "invoking"
    FAILED = "failed"
    COMPLETED = "completed"
    KEPT_ALIVE = "kept_alive"
    TERMINATING = "terminating"
    INTERRUPTED = "interrupted"


def exit_code_for(failure: Failure) -> int:
    """Map a reported failure to a process exit code."""
    if failure.kind is ErrorKind.USAGE:
        return exit_codes.USAGE_ERROR
    return exit_codes.GENERAL_ERROR


StateChangeHandler = Callable[[LifecycleState], None]


class ProcessLifecycle:
    """Drives a dispatched command to process termination."""

    def __init__(
        self,
        reporter: ErrorReporter,
        signals: Sequence[signal.Signals] = DEFAULT_SIGNALS,
        on_state_change: Optional[StateChangeHandler] = None
    ):
        self.reporter = reporter
        self.signals = tuple(signals)
        self.on_state_change = on_state_change
        self.state = LifecycleState.INVOKING
        self._shutdown = asyncio.Event()
        self._cleanup: Optional[Cleanup] = None
        self._cleanup_called = False
        self._cleanup_failed = False

    def _set_state(self, state: LifecycleState) -> None:
        logger.debug(f"Lifecycle {self.state.value} -> {state.value}")
        self.state = state
        if self.on_state_change:
            self.on_state_change(state)

    def request_shutdown(self) -> None:
        """Ask a kept-alive command to stop. Safe to call repeatedly."""
        self._shutdown.set()

    def fail(self, error: object) -> int:
        """Report a failure and terminate."""
        self._set_state(LifecycleState.FAILED)
        failure = self.reporter.report(error)
        self._set_state(LifecycleState.TERMINATING)
        return exit_code_for(failure)

    async def finalize(self, completion: Awaitable[CommandResult]) -> int:
        """Wait for the command to complete and return the exit code."""
        try:
            result = await completion
        except Exception as e:
            return self.fail(e)

        if not result.keep_alive:
            self._set_state(LifecycleState.COMPLETED)
            self._set_state(LifecycleState.TERMINATING)
            return exit_codes.SUCCESS

        self._cleanup = result.cleanup
        self._set_state(LifecycleState.KEPT_ALIVE)
        try:
            await self._wait_for_shutdown()
        finally:
            self._set_state(LifecycleState.INTERRUPTED)
            await self._run_cleanup()

        logger.debug("Exiting")
        return exit_codes.GENERAL_ERROR if self._cleanup_failed else exit_codes.SUCCESS

    async def _wait_for_shutdown(self) -> None:
        loop = asyncio.get_running_loop()
        restore = self._install_signal_handlers(loop)
        try:
            await self._shutdown.wait()
        finally:
            restore()

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> Callable[[], None]:
        """Route the interrupt signals to request_shutdown.

        Returns a callable restoring the previous handlers.
        """
        loop_signals = []
        previous: Dict[signal.Signals, Any] = {}

        for sig in self.signals:
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
                loop_signals.append(sig)
            except (NotImplementedError, RuntimeError):
                # Event loops without add_signal_handler (Windows)
                previous[sig] = signal.signal(
                    sig,
                    lambda signum, frame: loop.call_soon_threadsafe(self.request_shutdown)
                )

        def restore() -> None:
            for sig in loop_signals:
                loop.remove_signal_handler(sig)
            for sig, handler in previous.items():
                signal.signal(sig, handler)

        return restore

    async def _run_cleanup(self) -> None:
        """Call the keep-alive handle, at most once."""
        if self._cleanup is None or self._cleanup_called:
            return
        self._cleanup_called = True

        logger.debug("Running command cleanup")
        try:
            value = self._cleanup()
            if inspect.isawaitable(value):
                await value
        except Exception as e:
            self._cleanup_failed = True
            self.reporter.report(e)
