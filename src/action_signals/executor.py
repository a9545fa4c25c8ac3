"""Tree execution: sequencing, path selection and parallel groups."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Mapping

import anyio

from action_signals.action import (
    ActionContext,
    ActionStep,
    Dispatch,
    ExecutionResult,
    GetState,
    Output,
    Payload,
    merge_payload,
    output_outcome,
)
from action_signals.compiler import ActionNode, CompiledTree, Node, ParallelNode
from action_signals.errors import StepContractError

logger = logging.getLogger(__name__)


@dataclass
class _MemberOutcome:
    changes: Payload | None = None
    error: Exception | None = None


class TreeExecutor:
    """
    Runs compiled trees against a payload.

    Sequences return the union of the partial results produced inside them;
    callers merge that into the payload they seeded the sequence with. Fully
    synchronous subtrees never suspend.
    """

    def __init__(self, dispatch: Dispatch | None = None, get_state: GetState | None = None) -> None:
        self.dispatch: Dispatch | None = dispatch
        self.get_state: GetState | None = get_state

    async def execute(self, tree: CompiledTree, payload: Mapping[str, Any] | None = None) -> Payload:
        initial = dict(payload or {})
        changes = await self._run_sequence(tree, initial)
        return merge_payload(initial, changes)

    def execute_sync(self, tree: CompiledTree, payload: Mapping[str, Any] | None = None) -> Payload:
        if tree.is_async:
            raise StepContractError("Tree contains asynchronous steps; use TreeExecutor.execute instead.")
        initial = dict(payload or {})
        changes = self._run_sequence_sync(tree, initial)
        return merge_payload(initial, changes)

    def execute_prefix(
        self, tree: CompiledTree, payload: Mapping[str, Any] | None = None
    ) -> tuple[Payload, CompiledTree]:
        """
        Runs the leading synchronous nodes of ``tree`` immediately.

        Returns the payload after them and the remaining tree, which starts
        at the first asynchronous node (or is empty).
        """
        current = dict(payload or {})
        for index, node in enumerate(tree.steps):
            if node.is_async:
                return current, CompiledTree(steps=tree.steps[index:], is_async=True)
            current.update(self._run_node_sync(node, current))
        return current, CompiledTree()

    # Synchronous traversal

    def _run_sequence_sync(self, tree: CompiledTree, payload: Payload) -> Payload:
        current = dict(payload)
        changes: Payload = {}
        for node in tree.steps:
            update = self._run_node_sync(node, current)
            current.update(update)
            changes.update(update)
        return changes

    def _run_node_sync(self, node: Node, payload: Payload) -> Payload:
        if isinstance(node, ParallelNode):
            return self._run_parallel_sync(node, payload)
        return self._run_action_sync(node, payload)

    def _run_parallel_sync(self, node: ParallelNode, payload: Payload) -> Payload:
        outcomes: list[_MemberOutcome] = []
        for branch in node.branches:
            outcome = _MemberOutcome()
            try:
                outcome.changes = self._run_sequence_sync(branch, payload)
            except Exception as exc:
                outcome.error = exc
            outcomes.append(outcome)
        return _join_members(payload, outcomes)

    def _run_action_sync(self, node: ActionNode, payload: Payload) -> Payload:
        result = self._invoke_sync(node.action, payload)
        changes = dict(result.payload)
        child = self._select_path(node, result)
        if child is not None:
            changes.update(self._run_sequence_sync(child, merge_payload(payload, changes)))
        return changes

    def _invoke_sync(self, step: ActionStep, payload: Payload) -> ExecutionResult:
        logger.debug("Running action %s", step.name)
        output = Output(step)
        context = ActionContext(input=dict(payload), output=output, dispatch=self.dispatch, get_state=self.get_state)
        returned = step(context)
        if inspect.isawaitable(returned):
            if inspect.iscoroutine(returned):
                returned.close()
            raise StepContractError(
                f"Synchronous action {step.name!r} returned an awaitable; declare it with is_async=True."
            )
        result, error = output_outcome(output)
        if error is not None:
            raise error
        if result is None:
            return ExecutionResult(path=None, payload={})
        return result

    # Asynchronous traversal

    async def _run_sequence(self, tree: CompiledTree, payload: Payload) -> Payload:
        if not tree.is_async:
            return self._run_sequence_sync(tree, payload)
        current = dict(payload)
        changes: Payload = {}
        for node in tree.steps:
            if not node.is_async:
                update = self._run_node_sync(node, current)
            elif isinstance(node, ParallelNode):
                update = await self._run_parallel(node, current)
            else:
                update = await self._run_action(node, current)
            current.update(update)
            changes.update(update)
        return changes

    async def _run_parallel(self, node: ParallelNode, payload: Payload) -> Payload:
        outcomes = [_MemberOutcome() for _ in node.branches]

        async def run_member(index: int, branch: CompiledTree) -> None:
            # Members run to completion; failures are raised after the join.
            try:
                outcomes[index].changes = await self._run_sequence(branch, payload)
            except Exception as exc:
                outcomes[index].error = exc

        async with anyio.create_task_group() as task_group:
            for index, branch in enumerate(node.branches):
                task_group.start_soon(run_member, index, branch)

        return _join_members(payload, outcomes)

    async def _run_action(self, node: ActionNode, payload: Payload) -> Payload:
        if node.action.is_async:
            result = await self._invoke_async(node.action, payload)
        else:
            result = self._invoke_sync(node.action, payload)
        changes = dict(result.payload)
        child = self._select_path(node, result)
        if child is not None:
            changes.update(await self._run_sequence(child, merge_payload(payload, changes)))
        return changes

    async def _invoke_async(self, step: ActionStep, payload: Payload) -> ExecutionResult:
        logger.debug("Running async action %s", step.name)
        completed = anyio.Event()
        output = Output(step, on_complete=completed.set)
        context = ActionContext(input=dict(payload), output=output, dispatch=None, get_state=self.get_state)
        returned = step(context)
        if inspect.isawaitable(returned):
            await returned
        await completed.wait()
        result, error = output_outcome(output)
        if error is not None:
            raise error
        if result is None:
            raise StepContractError(f"Action {step.name!r} signalled completion without a result.")
        return result

    def _select_path(self, node: ActionNode, result: ExecutionResult) -> CompiledTree | None:
        if result.path is None:
            return None
        child = node.paths.get(result.path)
        if child is None:
            logger.debug("Action %s took path %r with no compiled branch", node.action.name, result.path)
            return None
        logger.debug("Action %s took path %r", node.action.name, result.path)
        return child


def _join_members(snapshot: Payload, outcomes: list[_MemberOutcome]) -> Payload:
    # Each member's final payload is folded over the next in declared order.
    for outcome in outcomes:
        if outcome.error is not None:
            raise outcome.error
    merged: Payload = {}
    for outcome in outcomes:
        merged.update(merge_payload(snapshot, outcome.changes or {}))
    return merged
