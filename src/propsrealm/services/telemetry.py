"""Verbose-mode timing for service calls.

``@traced`` opens a root span around a service method; ``trace_span``
nests named steps inside it.  With telemetry off (the default) both reduce
to a ContextVar lookup.  With ``--verbose`` the finished span tree is
attached to ``ServiceResult.meta["telemetry"]`` and logged at DEBUG.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from propsrealm.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("propsrealm_telemetry", default=False)
_active: ContextVar[Span | None] = ContextVar("propsrealm_active_span", default=None)

_log = structlog.get_logger("propsrealm.telemetry")


@dataclass
class Span:
    """One timed step; children are the steps nested inside it."""

    name: str
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        tree: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            tree["annotations"] = dict(self.annotations)
        if self.children:
            tree["children"] = [child.to_dict() for child in self.children]
        return tree


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    token = _active.set(span)
    try:
        yield span
    finally:
        span.end()
        _active.reset(token)


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Time a step under the active span.

    Yields None when telemetry is off or no ``@traced`` call is running, so
    callers guard annotations with ``if span:``.
    """
    parent = _active.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    child = Span(name)
    parent.children.append(child)
    with _activate(child):
        yield child


_P = ParamSpec("_P")
_R = TypeVar("_R")


def _attach(result: Any, span: Span) -> Any:
    ok = result.ok if isinstance(result, ServiceResult) else True
    _log.debug("span.complete", span_name=span.name, duration_ms=round(span.duration_ms, 2), ok=ok)
    if not isinstance(result, ServiceResult):
        return result
    meta = {**(result.meta or {}), "telemetry": span.to_dict()}
    return result.model_copy(update={"meta": meta})


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Record a root span around *func* when telemetry is on."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)
        span = Span(func.__qualname__)
        with _activate(span):
            result = func(*args, **kwargs)
        return _attach(result, span)

    return wrapper


def enable_telemetry() -> None:
    """Turn span collection on for the current context (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
