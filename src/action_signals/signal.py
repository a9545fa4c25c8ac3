"""Signal facade: compile once, run many times."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Mapping, Sequence

import anyio

from action_signals.action import Dispatch, GetState, Payload
from action_signals.compiler import CompiledTree, compile_chain
from action_signals.completion import SignalCompletion
from action_signals.executor import TreeExecutor

logger = logging.getLogger(__name__)


class SignalRun:
    """A signal bound to one initial payload, waiting for the host's dispatcher."""

    def __init__(self, signal: "Signal", payload: Mapping[str, Any] | None) -> None:
        self.signal: Signal = signal
        self.payload: Payload = dict(payload or {})

    def __call__(self, dispatch: Dispatch | None = None, get_state: GetState | None = None) -> SignalCompletion:
        executor = TreeExecutor(dispatch=dispatch, get_state=get_state)
        tree = self.signal.tree
        if not tree.is_async:
            try:
                final_payload = executor.execute_sync(tree, self.payload)
            except Exception as exc:
                logger.debug("Signal %s failed: %s", self.signal.name, exc)
                return SignalCompletion.failed(exc)
            return SignalCompletion.resolved(final_payload)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to schedule on: the run starts when the handle is awaited.
            return SignalCompletion(functools.partial(executor.execute, tree, self.payload))
        try:
            current, rest = executor.execute_prefix(tree, self.payload)
        except Exception as exc:
            logger.debug("Signal %s failed: %s", self.signal.name, exc)
            return SignalCompletion.failed(exc)
        logger.debug("Signal %s continues in the background", self.signal.name)
        return SignalCompletion.started(functools.partial(executor.execute, rest, current), loop)

    def __repr__(self) -> str:
        return f"SignalRun(signal={self.signal.name!r}, payload={self.payload!r})"


class Signal:
    def __init__(self, chain: Sequence[Any], *, name: str | None = None) -> None:
        self.name: str = name or "signal"
        self.tree: CompiledTree = compile_chain(chain)

    def __call__(self, payload: Mapping[str, Any] | None = None) -> SignalRun:
        return SignalRun(self, payload)

    async def run(
        self,
        payload: Mapping[str, Any] | None = None,
        dispatch: Dispatch | None = None,
        get_state: GetState | None = None,
    ) -> Payload:
        return await self(payload)(dispatch, get_state)

    def run_sync(
        self,
        payload: Mapping[str, Any] | None = None,
        dispatch: Dispatch | None = None,
        get_state: GetState | None = None,
    ) -> Payload:
        if not self.tree.is_async:
            return self(payload)(dispatch, get_state).result()
        return anyio.run(self.run, payload, dispatch, get_state)

    def __repr__(self) -> str:
        return f"Signal(name={self.name!r}, steps={len(self.tree.steps)}, is_async={self.tree.is_async})"


def create_signal(chain: Sequence[Any], *, name: str | None = None) -> Signal:
    return Signal(chain, name=name)
