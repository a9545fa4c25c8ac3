"""Turn validated signal file chains into chain descriptions."""

from __future__ import annotations

import importlib
from typing import Any

from action_signals.action import ActionStep
from action_signals.models.chain_item_spec import ActionSpec, ChainItemSpec, ParallelSpec, TriggerSpec
from action_signals.triggers import dispatch_action


def import_symbol(path: str) -> Any:
    """
    Imports a symbol given "package.module:SymbolName".
    """
    if ":" not in path:
        raise ValueError(f"Expected import path 'module:Symbol', got {path!r}")
    mod, sym = path.split(":", 1)
    module = importlib.import_module(mod)
    return getattr(module, sym)


def build_chain(items: list[ChainItemSpec]) -> list[Any]:
    chain: list[Any] = []
    for item in items:
        if isinstance(item, str):
            chain.append(ActionStep.from_callable(import_symbol(item)))
        elif isinstance(item, ActionSpec):
            chain.append(build_action(item))
            if item.paths:
                chain.append({name: build_chain(children) for name, children in item.paths.items()})
        elif isinstance(item, ParallelSpec):
            chain.append([build_chain(member) for member in item.parallel])
        elif isinstance(item, TriggerSpec):
            chain.append(dispatch_action(item.trigger))
        else:
            raise TypeError(f"Unsupported chain item: {item!r}")
    return chain


def build_action(spec: ActionSpec) -> ActionStep:
    # Settings in the file win over attributes declared on the function.
    base = ActionStep.from_callable(import_symbol(spec.action))
    is_async = base.is_async if spec.is_async is None else spec.is_async
    outputs = tuple(spec.outputs) if spec.outputs else base.outputs
    return ActionStep(func=base.func, is_async=is_async, outputs=outputs, name=base.name)
