"""Trigger steps that forward the payload to the host dispatcher."""

from __future__ import annotations

from action_signals.action import ActionContext, ActionStep
from action_signals.errors import MissingDispatcherError


def dispatch_action(action_type: str) -> ActionStep:
    """
    Builds a synchronous step that dispatches ``{"type": action_type, "payload": input}``.
    """

    def trigger(context: ActionContext) -> None:
        if context.dispatch is None:
            raise MissingDispatcherError(f"Cannot dispatch {action_type!r}: no dispatcher was supplied.")
        context.dispatch({"type": action_type, "payload": context.input})
        context.output()

    return ActionStep(func=trigger, is_async=False, name=f"dispatch:{action_type}")
