"""Public package exports."""

from action_signals.action import ActionContext
from action_signals.action import ActionStep
from action_signals.action import ExecutionResult
from action_signals.action import Output
from action_signals.action import action
from action_signals.action import merge_payload
from action_signals.compiler import CompiledTree
from action_signals.compiler import compile_chain
from action_signals.completion import SignalCompletion
from action_signals.errors import MalformedTreeError
from action_signals.errors import SignalError
from action_signals.errors import StepContractError
from action_signals.executor import TreeExecutor
from action_signals.middleware import signals_middleware
from action_signals.orchestrator import Orchestrator
from action_signals.signal import Signal
from action_signals.signal import SignalRun
from action_signals.signal import create_signal
from action_signals.triggers import dispatch_action

__all__ = [
    "ActionContext",
    "ActionStep",
    "CompiledTree",
    "ExecutionResult",
    "MalformedTreeError",
    "Orchestrator",
    "Output",
    "Signal",
    "SignalCompletion",
    "SignalError",
    "SignalRun",
    "StepContractError",
    "TreeExecutor",
    "action",
    "compile_chain",
    "create_signal",
    "dispatch_action",
    "merge_payload",
    "signals_middleware",
]
