"""Completion handle returned to hosts for each signal run."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Generator

import anyio

from action_signals.action import Payload
from action_signals.errors import SignalPendingError

Runner = Callable[[], Awaitable[Payload]]

# Started runs are referenced here until they finish so the loop cannot drop them.
_running: set[asyncio.Task[None]] = set()


class SignalCompletion:
    """
    The eventual final payload (or failure) of one signal run.

    Handles for synchronous trees are created already finished. Handles made
    with ``started`` drive the rest of the tree in a background task, whether
    or not anyone awaits them. A handle built outside an event loop runs the
    tree the first time it is awaited; later or concurrent awaits share that
    single run.
    """

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner: Runner | None = runner
        self._payload: Payload | None = None
        self._error: BaseException | None = None
        self._done: bool = False
        self._finished: anyio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @classmethod
    def resolved(cls, payload: Payload) -> "SignalCompletion":
        completion = cls()
        completion._payload = payload
        completion._done = True
        return completion

    @classmethod
    def failed(cls, error: BaseException) -> "SignalCompletion":
        completion = cls()
        completion._error = error
        completion._done = True
        return completion

    @classmethod
    def started(cls, runner: Runner, loop: asyncio.AbstractEventLoop) -> "SignalCompletion":
        completion = cls(runner)
        task = loop.create_task(completion._drive())
        _running.add(task)
        task.add_done_callback(_running.discard)
        completion._task = task
        return completion

    @property
    def done(self) -> bool:
        return self._done

    def result(self) -> Payload:
        if not self._done:
            raise SignalPendingError("Signal run has not finished; await the completion handle first.")
        if self._error is not None:
            raise self._error
        return dict(self._payload or {})

    def exception(self) -> BaseException | None:
        if not self._done:
            raise SignalPendingError("Signal run has not finished; await the completion handle first.")
        return self._error

    def __await__(self) -> Generator[Any, None, Payload]:
        return self._wait().__await__()

    async def _wait(self) -> Payload:
        if not self._done:
            if self._task is not None:
                await asyncio.shield(self._task)
            elif self._finished is None:
                await self._drive()
            else:
                await self._finished.wait()
        return self.result()

    async def _drive(self) -> None:
        runner = self._runner
        if runner is None:
            raise SignalPendingError("Signal completion has nothing to run.")
        self._runner = None
        finished = anyio.Event()
        self._finished = finished
        try:
            self._payload = await runner()
        except Exception as exc:
            # Stored for result(); awaiting the handle re-raises it.
            self._error = exc
        except BaseException as exc:
            self._error = exc
            raise
        finally:
            self._done = True
            finished.set()
