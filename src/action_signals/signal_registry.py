"""Signal registry: discovery of signal definition files."""

from __future__ import annotations

import logging
from pathlib import Path

from action_signals.errors import SignalNotFoundError
from action_signals.signal_file import LoadedSignalFile

logger = logging.getLogger(__name__)

SIGNAL_FILE_SUFFIXES = (".yaml", ".yml")


class SignalRegistry:
    def __init__(self, signal_roots: list[Path]):
        self.signal_roots = signal_roots
        self._cache: dict[str, LoadedSignalFile] = {}
        self._index: dict[str, Path] | None = None

    def _build_index(self) -> dict[str, Path]:
        index: dict[str, Path] = {}
        for root in self.signal_roots:
            if not root.exists():
                continue
            for path in sorted(root.rglob("*")):
                if path.suffix.lower() not in SIGNAL_FILE_SUFFIXES or not path.is_file():
                    continue
                signal_id = path.stem
                if signal_id in index:
                    logger.warning("Signal %s in %s is shadowed by %s", signal_id, path, index[signal_id])
                    continue
                index[signal_id] = path
        return index

    def _get_index(self) -> dict[str, Path]:
        if self._index is None:
            self._index = self._build_index()
        return self._index

    def list_signals(self) -> list[str]:
        index = self._get_index()
        return sorted(index.keys())

    def get(self, signal_id: str) -> LoadedSignalFile:
        if signal_id in self._cache:
            return self._cache[signal_id]
        index = self._get_index()
        path = index.get(signal_id)
        if path is None:
            raise SignalNotFoundError(f"Signal not found: {signal_id} (searched: {self.signal_roots})")
        loaded = LoadedSignalFile(path)
        self._cache[signal_id] = loaded
        return loaded
