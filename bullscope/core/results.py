from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from bullscope import metrics
from bullscope.core.enums import ReadPolicy
from bullscope.exceptions import ImproperlyConfigured, StoreError, StoreUnavailable
from bullscope.logging import logger

T = TypeVar("T")


@dataclass(frozen=True)
class ReadResult(Generic[T]):
    """
    The outcome of one store read: the value when `ok`, otherwise the error
    that stopped it. Aggregations decide through a `ReadPolicy` what a failed
    read contributes.
    """

    value: T | None
    ok: bool
    error: StoreError | None = None

    def resolve(self, default: T, policy: ReadPolicy = ReadPolicy.DEGRADE) -> T:
        """
        Returns the value, or applies `policy` to a failed read.

        Args:
            default: What a failed read contributes under `ReadPolicy.DEGRADE`.
            policy: `DEGRADE` returns `default`; `FAIL_FAST` re-raises the error.
        """
        if self.ok:
            return self.value  # type: ignore[return-value]
        if policy == ReadPolicy.FAIL_FAST and self.error is not None:
            raise self.error
        return default


async def attempt(
    read: Callable[..., Awaitable[T]],
    *args: Any,
    operation: str = "read",
) -> ReadResult[T]:
    """
    Runs a single store read and captures a `StoreError` in the result.

    `StoreUnavailable` is not captured: an unreachable store aborts the whole
    request instead of degrading every count to zero.

    Args:
        read: The store coroutine function to call.
        *args: Arguments forwarded to `read`.
        operation: Label used for logging and the error counter.
    """
    try:
        return ReadResult(value=await read(*args), ok=True)
    except StoreUnavailable:
        raise
    except StoreError as exc:
        logger.warning(f"{operation} failed for {args!r}: {exc}")
        metrics.record_error(operation)
        return ReadResult(value=None, ok=False, error=exc)


def get_read_policy(name: str | ReadPolicy) -> ReadPolicy:
    try:
        return ReadPolicy(name)
    except ValueError:
        raise ImproperlyConfigured(
            f"Unknown read policy '{name}'. Expected one of: {', '.join(p.value for p in ReadPolicy)}."
        ) from None
