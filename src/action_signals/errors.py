"""Exception types raised by the signal engine."""

from __future__ import annotations


class SignalError(Exception):
    """Base class for errors raised by action_signals."""


class MalformedTreeError(SignalError, ValueError):
    """Raised while compiling a chain description with an invalid structure."""


class StepContractError(SignalError):
    """Raised when an action step breaks its completion contract."""


class DuplicateCompletionError(StepContractError):
    """Raised when an action step completes more than once."""


class UndeclaredOutputError(StepContractError):
    """Raised when an action step completes along an output it did not declare."""


class MissingDispatcherError(SignalError):
    """Raised when a step needs the host dispatcher but none was supplied."""


class SignalPendingError(SignalError, RuntimeError):
    """Raised when the result of an unfinished signal run is requested."""


class SignalNotFoundError(SignalError, LookupError):
    """Raised when a signal id is not present in any registry root."""
