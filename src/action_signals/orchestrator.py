"""Helper for running registered signals."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from action_signals.action import Dispatch, GetState, Payload
from action_signals.completion import SignalCompletion
from action_signals.signal_registry import SignalRegistry


class Orchestrator:
    def __init__(self, signal_roots: list[Path] | None = None) -> None:
        self.registry: SignalRegistry = SignalRegistry(signal_roots or [])

    def trigger(
        self,
        signal_id: str,
        payload: Mapping[str, Any] | None = None,
        dispatch: Dispatch | None = None,
        get_state: GetState | None = None,
    ) -> SignalCompletion:
        signal = self.registry.get(signal_id).signal
        return signal(payload)(dispatch, get_state)

    async def run(
        self,
        signal_id: str,
        payload: Mapping[str, Any] | None = None,
        dispatch: Dispatch | None = None,
        get_state: GetState | None = None,
    ) -> Payload:
        return await self.trigger(signal_id, payload, dispatch, get_state)
