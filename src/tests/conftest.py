import asyncio
import sys
import types
from pathlib import Path

import anyio
import pytest

from action_signals.action import ActionContext

ACTIONS_MODULE = "signal_test_actions"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def mark_seen(context: ActionContext) -> None:
    context.output({"seen": True})


def classify(context: ActionContext) -> None:
    if context.input.get("count", 0) > 10:
        context.output.big({"size": "big"})
    else:
        context.output.small({"size": "small"})


classify.outputs = ["big", "small"]  # type: ignore[attr-defined]


def tag(context: ActionContext) -> None:
    context.output({"tagged": context.input["size"]})


async def fetch(context: ActionContext) -> None:
    await anyio.sleep(0)
    context.output({"fetched": True})


def left(context: ActionContext) -> None:
    context.output({"left": True})


def right(context: ActionContext) -> None:
    context.output({"right": True})


def deferred(context: ActionContext) -> None:
    asyncio.get_running_loop().call_later(0, context.output, {"deferred": True})


@pytest.fixture
def actions_module(monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    module = types.ModuleType(ACTIONS_MODULE)
    for func in (mark_seen, classify, tag, fetch, left, right, deferred):
        setattr(module, func.__name__, func)
    monkeypatch.setitem(sys.modules, ACTIONS_MODULE, module)
    return module


@pytest.fixture
def signals_dir(tmp_path: Path, actions_module: types.ModuleType) -> Path:
    root = tmp_path / "signals"
    root.mkdir()
    (root / "greet.yaml").write_text(
        f"""
name: greet
description: Marks the payload and tells the host.
chain:
  - {ACTIONS_MODULE}:mark_seen
  - trigger: greeted
""",
        encoding="utf-8",
    )
    (root / "sort.yaml").write_text(
        f"""
name: sort
chain:
  - action: {ACTIONS_MODULE}:classify
    paths:
      big:
        - {ACTIONS_MODULE}:tag
      small: []
  - {ACTIONS_MODULE}:mark_seen
""",
        encoding="utf-8",
    )
    nested = root / "nested"
    nested.mkdir()
    (nested / "gather.yml").write_text(
        f"""
name: gather
chain:
  - {ACTIONS_MODULE}:fetch
  - parallel:
      - - {ACTIONS_MODULE}:left
      - - action: {ACTIONS_MODULE}:deferred
          async: true
        - {ACTIONS_MODULE}:right
""",
        encoding="utf-8",
    )
    return root
