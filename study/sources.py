"""
Scripture Study - Per-Source Results

Every upstream or table lookup produces a :class:`SourceResult` instead of
raising, so one failing provider never takes the rest of a study down.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from opentelemetry import trace

from core.errors import classify_error
from observability.logging import SourceLogger

tracer = trace.get_tracer(__name__)

T = TypeVar("T")


class SourceStatus(Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class SourceResult(Generic[T]):
    """Outcome of consulting one source."""

    name: str
    status: SourceStatus
    value: Optional[T] = None
    error: Optional[str] = None
    duration_ms: float = 0.0

    @classmethod
    def success(cls, name: str, value: T, duration_ms: float = 0.0) -> "SourceResult[T]":
        return cls(name=name, status=SourceStatus.SUCCESS, value=value,
                   duration_ms=duration_ms)

    @classmethod
    def empty(cls, name: str, duration_ms: float = 0.0) -> "SourceResult[T]":
        return cls(name=name, status=SourceStatus.EMPTY, duration_ms=duration_ms)

    @classmethod
    def failed(cls, name: str, error: str, duration_ms: float = 0.0) -> "SourceResult[T]":
        return cls(name=name, status=SourceStatus.FAILED, error=error, duration_ms=duration_ms)

    @property
    def ok(self) -> bool:
        return self.status is SourceStatus.SUCCESS


async def consult(
    name: str,
    reference: str,
    fetch: Callable[[], Awaitable[Optional[T]]],
    log: SourceLogger,
) -> SourceResult[T]:
    """
    Run ``fetch`` under a span and fold its outcome into a SourceResult.

    ``None`` means the source had nothing; any exception means it failed.
    """
    start = time.perf_counter()
    with tracer.start_as_current_span(f"source.{name}") as span:
        span.set_attribute("source.name", name)
        span.set_attribute("study.reference", reference)
        try:
            value = await fetch()
        except Exception as e:
            error = classify_error(e)
            duration_ms = (time.perf_counter() - start) * 1000
            span.set_attribute("source.status", SourceStatus.FAILED.value)
            log.failed(name, reference, error.message)
            return SourceResult.failed(name, error.message, duration_ms)

        duration_ms = (time.perf_counter() - start) * 1000
        if value is None:
            span.set_attribute("source.status", SourceStatus.EMPTY.value)
            log.empty(name, reference)
            return SourceResult.empty(name, duration_ms)

        span.set_attribute("source.status", SourceStatus.SUCCESS.value)
        log.succeeded(name, reference, duration_ms)
        return SourceResult.success(name, value, duration_ms)
