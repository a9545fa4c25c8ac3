"""Compile nested chain descriptions into immutable action trees."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping, Sequence, TypeAlias

from action_signals.action import ActionStep
from action_signals.errors import MalformedTreeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledTree:
    steps: tuple["Node", ...] = ()
    is_async: bool = False


@dataclass(frozen=True)
class ActionNode:
    action: ActionStep
    paths: Mapping[str, CompiledTree] = field(default_factory=lambda: MappingProxyType({}))
    is_async: bool = False


@dataclass(frozen=True)
class ParallelNode:
    branches: tuple[CompiledTree, ...] = ()
    is_async: bool = False


Node: TypeAlias = ActionNode | ParallelNode


def compile_chain(chain: Sequence[Any]) -> CompiledTree:
    """
    Compile a chain description depth-first, in source order.

    Items are callables (leaves), mappings of output name -> child chain that
    qualify the leaf right before them, and nested lists that run their members
    concurrently. Structural errors raise MalformedTreeError before any tree is
    returned.
    """
    if not _is_sequence(chain):
        raise MalformedTreeError(f"A chain must be a list of actions, got {type(chain).__name__}.")

    steps: list[Node] = []
    for index, item in enumerate(chain):
        if isinstance(item, Mapping):
            if not steps or not isinstance(steps[-1], ActionNode):
                raise MalformedTreeError(f"Output paths at position {index} must follow an action.")
            if steps[-1].paths:
                raise MalformedTreeError(
                    f"Action {steps[-1].action.name!r} already has output paths; got a second mapping at position {index}."
                )
            steps[-1] = _attach_paths(steps[-1], item)
        elif _is_sequence(item):
            steps.append(_compile_parallel(item))
        elif callable(item):
            step = ActionStep.from_callable(item)
            steps.append(ActionNode(action=step, is_async=step.is_async))
        else:
            raise MalformedTreeError(f"Unsupported chain item at position {index}: {item!r}")

    tree = CompiledTree(steps=tuple(steps), is_async=any(node.is_async for node in steps))
    logger.debug("Compiled sequence with %d step(s), async=%s", len(tree.steps), tree.is_async)
    return tree


def _attach_paths(node: ActionNode, path_map: Mapping[Any, Any]) -> ActionNode:
    paths: dict[str, CompiledTree] = {}
    for name, child in path_map.items():
        if not isinstance(name, str) or not name:
            raise MalformedTreeError(f"Output path names must be non-empty strings, got {name!r}.")
        if not _is_sequence(child):
            raise MalformedTreeError(
                f"Output path {name!r} of action {node.action.name!r} must be a list, got {type(child).__name__}."
            )
        if not node.action.accepts_output(name):
            raise MalformedTreeError(
                f"Action {node.action.name!r} declares outputs {list(node.action.outputs)}; "
                f"path {name!r} can never be selected."
            )
        paths[name] = compile_chain(child)
    is_async = node.action.is_async or any(tree.is_async for tree in paths.values())
    return replace(node, paths=MappingProxyType(paths), is_async=is_async)


def _compile_parallel(group: Sequence[Any]) -> ParallelNode:
    # Each leaf (plus its path mapping) is one member; nested lists are sequence members.
    members: list[list[Any]] = []
    leaf_member: list[Any] | None = None
    for index, item in enumerate(group):
        if isinstance(item, Mapping):
            if leaf_member is None or len(leaf_member) != 1:
                raise MalformedTreeError(f"Output paths at position {index} of a parallel group must follow an action.")
            leaf_member.append(item)
        elif _is_sequence(item):
            members.append(list(item))
            leaf_member = None
        else:
            leaf_member = [item]
            members.append(leaf_member)

    branches = tuple(compile_chain(member) for member in members)
    return ParallelNode(branches=branches, is_async=any(branch.is_async for branch in branches))


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))
