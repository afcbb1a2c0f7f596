"""
Actors run by the operator's Group.

Each actor exposes ``execute`` and ``interrupt`` for registration with
``Group.add``:
- SignalWatcher returns on SIGINT/SIGTERM or when interrupted
- ServingActor starts a server and keeps it running until interrupted
- ReconcilerActor runs the reconciliation loop until its stop flag is raised
"""

import asyncio
import logging
import signal
from collections.abc import Awaitable, Callable, Iterable
from contextlib import AbstractAsyncContextManager

logger = logging.getLogger(__name__)


class SignalWatcher:
    """Termination handler."""

    def __init__(
        self, signals: Iterable[signal.Signals] = (signal.SIGINT, signal.SIGTERM)
    ):
        self.signals = tuple(signals)
        self.received: signal.Signals | None = None
        self._stop = asyncio.Event()

    def _on_signal(self, sig: signal.Signals) -> None:
        self.received = sig
        self._stop.set()

    async def execute(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in self.signals:
            loop.add_signal_handler(sig, self._on_signal, sig)
        try:
            await self._stop.wait()
        finally:
            for sig in self.signals:
                loop.remove_signal_handler(sig)

        if self.received is not None:
            logger.info(f"Received {self.received.name}, exiting gracefully...")

    def interrupt(self, error: BaseException | None) -> None:
        self._stop.set()


class ServingActor:
    """
    Serves until interrupted.

    The factory builds the server when the actor starts, so bootstrap
    failures (missing certificates, ports in use) become the actor's error.
    """

    def __init__(
        self, factory: Callable[[], Awaitable[AbstractAsyncContextManager]]
    ):
        self.factory = factory
        self._stop = asyncio.Event()

    async def execute(self) -> None:
        server = await self.factory()
        async with server:
            await self._stop.wait()

    def interrupt(self, error: BaseException | None) -> None:
        self._stop.set()


class ReconcilerActor:
    """Runs the reconciliation loop until its stop flag is raised."""

    def __init__(self, run: Callable[[asyncio.Event], Awaitable[None]]):
        self.run = run
        self.stop_flag = asyncio.Event()

    async def execute(self) -> None:
        await self.run(self.stop_flag)

    def interrupt(self, error: BaseException | None) -> None:
        self.stop_flag.set()
