"""Signal definition files: YAML loading, validation and compilation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from action_signals.chain_loader import build_chain
from action_signals.models.signal_spec import SignalSpec
from action_signals.signal import Signal


logger = logging.getLogger(__name__)


@dataclass
class LoadedSignalFile:
    spec: SignalSpec
    source: str
    chain: list[Any]
    signal: Signal

    def __init__(self, definition: Path | str) -> None:
        raw, source_label = load_signal_yaml(definition)
        if not isinstance(raw, dict):
            raise ValueError(f"Signal definition in {source_label} must be a YAML mapping.")
        spec = SignalSpec.model_validate(raw)
        chain = build_chain(spec.chain)
        self.spec = spec
        self.source = source_label
        self.chain = chain
        self.signal = Signal(chain, name=spec.name)
        logger.debug("Loaded signal %s from %s", spec.name, source_label)

    @classmethod
    def from_parts(cls, *, spec: SignalSpec, chain: list[Any], source: str = "<inline>") -> "LoadedSignalFile":
        obj = cls.__new__(cls)
        obj.spec = spec
        obj.source = source
        obj.chain = chain
        obj.signal = Signal(chain, name=spec.name)
        return obj


def load_signal_yaml(definition: Path | str) -> tuple[Any, str]:
    if isinstance(definition, Path):
        return yaml.safe_load(definition.read_text(encoding="utf-8")), str(definition)
    definition_path = Path(definition)
    if "\n" not in definition and definition_path.exists():
        return yaml.safe_load(definition_path.read_text(encoding="utf-8")), str(definition_path)
    return yaml.safe_load(definition), "<inline>"
