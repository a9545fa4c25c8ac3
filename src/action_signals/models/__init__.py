"""Model types for signal definition files."""

from action_signals.models.chain_item_spec import ActionSpec
from action_signals.models.chain_item_spec import ChainItemSpec
from action_signals.models.chain_item_spec import ParallelSpec
from action_signals.models.chain_item_spec import TriggerSpec
from action_signals.models.signal_spec import SignalSpec

__all__ = [
    "ActionSpec",
    "ChainItemSpec",
    "ParallelSpec",
    "SignalSpec",
    "TriggerSpec",
]
