"""Readable rendering of compiled trees."""

from __future__ import annotations

from typing import Any

import yaml

from action_signals.compiler import CompiledTree, ParallelNode


def tree_to_data(tree: CompiledTree) -> list[Any]:
    items: list[Any] = []
    for node in tree.steps:
        if isinstance(node, ParallelNode):
            items.append({"parallel": [tree_to_data(branch) for branch in node.branches]})
            continue
        entry: dict[str, Any] = {"action": node.action.name}
        if node.action.is_async:
            entry["async"] = True
        if node.action.outputs:
            entry["outputs"] = list(node.action.outputs)
        if node.paths:
            entry["paths"] = {name: tree_to_data(child) for name, child in node.paths.items()}
        items.append(entry)
    return items


def describe_tree(tree: CompiledTree, *, name: str | None = None) -> str:
    """
    Dumps a compiled tree as YAML, in execution order.
    """
    data: dict[str, Any] = {"async": tree.is_async, "chain": tree_to_data(tree)}
    if name is not None:
        data = {"name": name, **data}
    return yaml.safe_dump(
        data,
        allow_unicode=False,
        default_flow_style=False,
        sort_keys=False,
    )
