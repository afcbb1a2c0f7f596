"""
Shared-fate group of concurrently running actors.

An actor is a pair of an ``execute`` coroutine function, which runs until it
finishes or is told to stop, and an ``interrupt`` callable, which tells it to
stop. A Group starts every actor at once. As soon as one of them returns,
cleanly or with an error, all other actors are interrupted with that outcome
and the group waits for them to return. The first outcome is the group's
result; later outcomes are discarded.

Example:
    group = Group()
    group.add(watcher.execute, watcher.interrupt, name="signals")
    group.add(server.execute, server.interrupt, name="webhook")
    await group.run()  # raises the first actor's error, if any
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from monitoring_operator.observability.metrics import metrics_collector

Execute = Callable[[], Awaitable[None]]
Interrupt = Callable[[BaseException | None], None]


@dataclass
class Actor:
    """An execute/interrupt pair registered with a Group."""

    execute: Execute
    interrupt: Interrupt
    name: str


class Group:
    """Runs actors together and stops all of them when the first one returns."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)
        self.actors: list[Actor] = []

    def add(self, execute: Execute, interrupt: Interrupt, name: str | None = None) -> None:
        """
        Register an actor.

        Args:
            execute: Coroutine function that runs the actor; raising means failure
            interrupt: Called once with the triggering error to stop the actor
            name: Name used in logs and metrics
        """
        self.actors.append(
            Actor(execute=execute, interrupt=interrupt, name=name or f"actor-{len(self.actors)}")
        )

    async def run(self) -> None:
        """
        Run all actors until every one of them has returned.

        Raises:
            BaseException: The outcome of the first actor to return, if it failed
                or was cancelled on its own
        """
        if not self.actors:
            return

        completions: asyncio.Queue[tuple[Actor, BaseException | None]] = asyncio.Queue()
        tasks = [
            asyncio.create_task(self._run_actor(actor, completions), name=actor.name)
            for actor in self.actors
        ]

        try:
            first, error = await completions.get()
            self.logger.info(
                f"Actor {first.name} returned, interrupting remaining actors",
                extra={"actor": first.name},
            )
            for actor in self.actors:
                if actor is not first:
                    self._interrupt(actor, error)

            for _ in range(len(self.actors) - 1):
                await completions.get()
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        if error is not None:
            raise error

    async def _run_actor(
        self, actor: Actor, completions: asyncio.Queue[tuple[Actor, BaseException | None]]
    ) -> None:
        error: BaseException | None = None
        try:
            await actor.execute()
        except BaseException as e:
            # Cancellation of the group itself is not an actor outcome.
            if isinstance(e, asyncio.CancelledError) and asyncio.current_task().cancelling():
                raise
            error = e
            self.logger.error(
                f"Actor {actor.name} failed: {e!r}",
                extra={"actor": actor.name, "error_type": type(e).__name__},
            )
        finally:
            metrics_collector.record_actor_exit(actor.name, error)
            completions.put_nowait((actor, error))

    def _interrupt(self, actor: Actor, error: BaseException | None) -> None:
        try:
            actor.interrupt(error)
        except Exception as e:
            # The remaining actors still need their interrupts.
            self.logger.exception(
                f"Interrupting actor {actor.name} failed: {e}",
                extra={"actor": actor.name, "error_type": type(e).__name__},
            )
