"""Input/output helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from action_signals.action import Payload


def parse_payload(text: str) -> Payload:
    return _ensure_mapping(json.loads(text), "<inline>")


def load_payload(path: Path) -> Payload:
    if not path.exists():
        raise FileNotFoundError(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        return _ensure_mapping(yaml.safe_load(text) or {}, str(path))
    return _ensure_mapping(json.loads(text), str(path))


def write_output(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _ensure_mapping(raw: Any, source: str) -> Payload:
    if not isinstance(raw, dict):
        raise ValueError(f"Payload from {source} must be a JSON/YAML object, got {type(raw).__name__}.")
    return raw
