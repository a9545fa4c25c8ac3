"""Action steps and the completion contract they follow."""

from __future__ import annotations

import functools
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, NoReturn, TypeAlias

from action_signals.errors import (
    DuplicateCompletionError,
    MalformedTreeError,
    StepContractError,
    UndeclaredOutputError,
)

Payload: TypeAlias = dict[str, Any]
Dispatch: TypeAlias = Callable[[Any], Any]
GetState: TypeAlias = Callable[[], Any]


def merge_payload(base: Mapping[str, Any], *updates: Mapping[str, Any]) -> Payload:
    """Shallow, right-biased union of ``base`` and every update."""
    merged: Payload = dict(base)
    for update in updates:
        merged.update(update)
    return merged


@dataclass(frozen=True)
class ExecutionResult:
    path: str | None
    payload: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ActionStep:
    """
    A caller-supplied callable plus the metadata the executor needs.

    ``is_async`` tells the executor the step may complete after it returns.
    ``outputs`` lists the named paths the step may complete along; an empty
    tuple means the step accepts any path name.
    """

    func: Callable[[ActionContext], Any]
    is_async: bool = False
    outputs: tuple[str, ...] = ()
    name: str = ""

    def __post_init__(self) -> None:
        if not callable(self.func):
            raise TypeError(f"Action step must wrap a callable, got {self.func!r}")
        outputs = tuple(self.outputs)
        for output_name in outputs:
            if not isinstance(output_name, str) or not output_name:
                raise MalformedTreeError(f"Output names must be non-empty strings, got {output_name!r}")
        if len(set(outputs)) != len(outputs):
            raise MalformedTreeError(f"Duplicate output names declared: {list(outputs)}")
        object.__setattr__(self, "outputs", outputs)
        if not self.name:
            object.__setattr__(self, "name", _callable_name(self.func))

    def __call__(self, context: ActionContext) -> Any:
        return self.func(context)

    def accepts_output(self, name: str) -> bool:
        if not self.outputs:
            return True
        return name in self.outputs

    @classmethod
    def from_callable(cls, func: Callable[..., Any]) -> "ActionStep":
        """
        Wraps a plain callable.
        Reads optional ``is_async`` / ``outputs`` attributes set on the function;
        coroutine functions are asynchronous unless told otherwise.
        """
        if isinstance(func, ActionStep):
            return func
        if not callable(func):
            raise TypeError(f"Expected a callable action, got {func!r}")
        is_async = getattr(func, "is_async", None)
        if is_async is None:
            is_async = inspect.iscoroutinefunction(func)
        outputs = getattr(func, "outputs", None) or ()
        return cls(func=func, is_async=bool(is_async), outputs=tuple(outputs))


def action(
    func: Callable[..., Any] | None = None,
    *,
    is_async: bool | None = None,
    outputs: list[str] | tuple[str, ...] = (),
    name: str | None = None,
) -> Any:
    """Decorator turning a function into an ActionStep."""

    def wrap(target: Callable[..., Any]) -> ActionStep:
        resolved_async = inspect.iscoroutinefunction(target) if is_async is None else is_async
        return ActionStep(func=target, is_async=resolved_async, outputs=tuple(outputs), name=name or "")

    if func is None:
        return wrap
    return wrap(func)


class Output:
    """
    Completion object handed to a step as ``context.output``.

    ``output(payload)`` completes without a path, ``output.success(payload)``
    or ``output.path("success", payload)`` completes along ``success`` and
    ``output.fail(exc)`` reports a failure. Any other public attribute is an
    output name, so only ``path`` and ``fail`` are reserved.
    """

    def __init__(self, step: ActionStep, on_complete: Callable[[], None] | None = None) -> None:
        self._step = step
        self._on_complete = on_complete
        self._result: ExecutionResult | None = None
        self._error: BaseException | None = None

    def __call__(self, payload: Mapping[str, Any] | None = None) -> None:
        self._complete(None, payload)

    def __getattr__(self, name: str) -> Callable[..., None]:
        if name.startswith("_"):
            raise AttributeError(name)
        return functools.partial(self.path, name)

    def path(self, name: str, payload: Mapping[str, Any] | None = None) -> None:
        if not self._step.accepts_output(name):
            self._reject(
                UndeclaredOutputError(
                    f"Step {self._step.name!r} has no output {name!r}; declared: {list(self._step.outputs)}"
                )
            )
        self._complete(name, payload)

    def fail(self, error: BaseException) -> None:
        self._ensure_pending()
        self._error = error
        self._notify()

    def _completed(self) -> bool:
        return self._result is not None or self._error is not None

    def _complete(self, path: str | None, payload: Mapping[str, Any] | None) -> None:
        self._ensure_pending()
        if payload is None:
            payload = {}
        elif not isinstance(payload, Mapping):
            self._reject(
                StepContractError(
                    f"Step {self._step.name!r} completed with a {type(payload).__name__}; expected a mapping."
                )
            )
        self._result = ExecutionResult(path=path, payload=dict(payload))
        self._notify()

    def _ensure_pending(self) -> None:
        if self._completed():
            raise DuplicateCompletionError(f"Step {self._step.name!r} already completed.")

    def _reject(self, error: StepContractError) -> NoReturn:
        # Pending steps record the error so an awaiting run fails with it.
        if not self._completed():
            self._error = error
            self._notify()
        raise error

    def _notify(self) -> None:
        if self._on_complete is not None:
            self._on_complete()


def output_outcome(output: Output) -> tuple[ExecutionResult | None, BaseException | None]:
    """Returns the ``(result, error)`` recorded by ``output``; both are None while pending."""
    return output._result, output._error


@dataclass(frozen=True)
class ActionContext:
    input: Payload
    output: Output
    dispatch: Dispatch | None = None
    get_state: GetState | None = None


def _callable_name(func: Callable[..., Any]) -> str:
    name = getattr(func, "__qualname__", None) or getattr(func, "__name__", None)
    if name:
        return str(name)
    return type(func).__name__
