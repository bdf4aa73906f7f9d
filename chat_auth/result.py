"""Explicit success/failure results for network and persistence steps."""

import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

import structlog

from .errors import SideEffectError

logger = structlog.get_logger()

T = TypeVar("T")

Step = Callable[[], Union[Awaitable[Any], Any]]


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful step carrying its value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Failed step carrying the error that stopped it."""

    error: Exception

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure]


async def attempt(
    step: Step, on_error: Callable[[Exception], Exception] | None = None
) -> "Result[Any]":
    """Run a sync or async step and capture its outcome.

    Args:
        step: Zero-argument callable, may return an awaitable
        on_error: Optional mapping applied to the raised exception

    Returns:
        Success with the step's value, or Failure with the (mapped) error
    """
    try:
        value = step()
        if inspect.isawaitable(value):
            value = await value
    except Exception as e:
        return Failure(on_error(e) if on_error else e)
    return Success(value)


async def run_steps(steps: Sequence[tuple[str, Step]]) -> "Result[list[Any]]":
    """Run named side-effect steps in order, stopping at the first failure.

    A failing step is reported as a SideEffectError naming that step; the
    steps after it never run.
    """
    values: list[Any] = []
    for name, step in steps:
        result = await attempt(step, on_error=lambda e, name=name: SideEffectError(name, e))
        if isinstance(result, Failure):
            logger.warning(
                "Side effect step failed, skipping remaining steps",
                step=name,
                error=str(result.error),
                remaining=len(steps) - len(values) - 1,
            )
            return result
        logger.debug("Side effect step completed", step=name)
        values.append(result.value)
    return Success(values)
