"""Unit tests for the shared-fate actor Group."""

import asyncio
from unittest.mock import MagicMock

import pytest

from monitoring_operator.runtime import Group


class BlockingActor:
    """Blocks until interrupted and records every interrupt it receives."""

    def __init__(self):
        self.interrupts: list[Exception | None] = []
        self.finished = False
        self._stop = asyncio.Event()

    async def execute(self) -> None:
        await self._stop.wait()
        self.finished = True

    def interrupt(self, error: Exception | None) -> None:
        self.interrupts.append(error)
        self._stop.set()


class ReturningActor:
    """Returns straight away, optionally with an error."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.interrupts: list[Exception | None] = []
        self.finished = False

    async def execute(self) -> None:
        await asyncio.sleep(0)
        self.finished = True
        if self.error is not None:
            raise self.error

    def interrupt(self, error: Exception | None) -> None:
        self.interrupts.append(error)


class TestGroup:
    @pytest.mark.asyncio
    async def test_failure_interrupts_remaining_actors(self):
        """One failing actor stops all others and its error is the outcome."""
        error = RuntimeError("E")
        a = ReturningActor(error)
        b = BlockingActor()
        c = BlockingActor()
        group = Group(logger=MagicMock())
        group.add(a.execute, a.interrupt, name="a")
        group.add(b.execute, b.interrupt, name="b")
        group.add(c.execute, c.interrupt, name="c")

        with pytest.raises(RuntimeError) as exc_info:
            await asyncio.wait_for(group.run(), timeout=5)

        assert exc_info.value is error
        assert b.interrupts == [error]
        assert c.interrupts == [error]
        assert a.interrupts == []
        assert a.finished and b.finished and c.finished

    @pytest.mark.asyncio
    async def test_clean_exit_interrupts_with_none(self):
        a = ReturningActor()
        b = BlockingActor()
        group = Group(logger=MagicMock())
        group.add(a.execute, a.interrupt, name="a")
        group.add(b.execute, b.interrupt, name="b")

        result = await asyncio.wait_for(group.run(), timeout=5)

        assert result is None
        assert b.interrupts == [None]
        assert b.finished

    @pytest.mark.asyncio
    async def test_later_errors_are_discarded(self):
        """Errors of interrupted actors do not replace the first outcome."""

        class FailingOnInterrupt(BlockingActor):
            async def execute(self) -> None:
                await super().execute()
                raise ValueError("late")

        a = ReturningActor()
        b = FailingOnInterrupt()
        group = Group(logger=MagicMock())
        group.add(a.execute, a.interrupt, name="a")
        group.add(b.execute, b.interrupt, name="b")

        await asyncio.wait_for(group.run(), timeout=5)

        assert b.finished

    @pytest.mark.asyncio
    async def test_actor_cancelled_on_its_own_stops_group(self):
        """An actor ending with CancelledError is still the group's outcome."""
        cancelled = asyncio.CancelledError()

        async def cancelled_execute() -> None:
            await asyncio.sleep(0)
            raise cancelled

        b = BlockingActor()
        c = BlockingActor()
        group = Group(logger=MagicMock())
        group.add(cancelled_execute, lambda error: None, name="a")
        group.add(b.execute, b.interrupt, name="signals")
        group.add(c.execute, c.interrupt, name="c")

        with pytest.raises(asyncio.CancelledError) as exc_info:
            await asyncio.wait_for(group.run(), timeout=5)

        assert exc_info.value is cancelled
        assert b.interrupts == [cancelled]
        assert c.interrupts == [cancelled]
        assert b.finished and c.finished

    @pytest.mark.asyncio
    async def test_actor_cancelled_after_interrupt_does_not_hang(self):
        """Later actors ending with CancelledError still count as returned."""

        class CancelledOnInterrupt(BlockingActor):
            async def execute(self) -> None:
                await super().execute()
                raise asyncio.CancelledError()

        signals = BlockingActor()
        a = CancelledOnInterrupt()
        group = Group(logger=MagicMock())
        group.add(signals.execute, signals.interrupt, name="signals")
        group.add(a.execute, a.interrupt, name="a")

        task = asyncio.create_task(group.run())
        await asyncio.sleep(0.01)
        signals.interrupt(None)

        assert await asyncio.wait_for(task, timeout=5) is None
        assert a.interrupts == [None]

    @pytest.mark.asyncio
    async def test_empty_group_returns_immediately(self):
        assert await asyncio.wait_for(Group().run(), timeout=1) is None

    @pytest.mark.asyncio
    async def test_single_actor_outcome(self):
        error = ValueError("only")
        a = ReturningActor(error)
        group = Group(logger=MagicMock())
        group.add(a.execute, a.interrupt)

        with pytest.raises(ValueError):
            await group.run()
        assert a.interrupts == []

    @pytest.mark.asyncio
    async def test_raising_interrupt_does_not_skip_others(self):
        a = ReturningActor(RuntimeError("E"))
        b = BlockingActor()
        c = BlockingActor()

        def broken_interrupt(error):
            b.interrupt(error)
            raise OSError("interrupt failed")

        logger = MagicMock()
        group = Group(logger=logger)
        group.add(a.execute, a.interrupt, name="a")
        group.add(b.execute, broken_interrupt, name="b")
        group.add(c.execute, c.interrupt, name="c")

        with pytest.raises(RuntimeError):
            await asyncio.wait_for(group.run(), timeout=5)

        assert len(c.interrupts) == 1
        logger.exception.assert_called_once()

    @pytest.mark.asyncio
    async def test_cancellation_stops_all_actors(self):
        a = BlockingActor()
        b = BlockingActor()
        group = Group(logger=MagicMock())
        group.add(a.execute, a.interrupt, name="a")
        group.add(b.execute, b.interrupt, name="b")

        task = asyncio.create_task(group.run())
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert not a.finished and not b.finished

    def test_default_actor_names(self):
        group = Group()
        group.add(BlockingActor().execute, BlockingActor().interrupt)
        group.add(BlockingActor().execute, BlockingActor().interrupt, name="webhook")

        assert [actor.name for actor in group.actors] == ["actor-0", "webhook"]
