"""Store middleware routing signal runs to the engine."""

from __future__ import annotations

from typing import Any, Callable, Protocol

from action_signals.signal import SignalRun

Next = Callable[[Any], Any]


class Store(Protocol):
    def dispatch(self, action: Any) -> Any: ...

    def get_state(self) -> Any: ...


def signals_middleware(store: Store) -> Callable[[Next], Next]:
    """
    Signal runs dispatched to the store are executed with the store's
    dispatcher and state accessor; everything else goes to ``next_``.
    """

    def middleware(next_: Next) -> Next:
        def trigger(action: Any) -> Any:
            if isinstance(action, SignalRun):
                return action(store.dispatch, store.get_state)
            return next_(action)

        return trigger

    return middleware
