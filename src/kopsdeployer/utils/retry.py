"""tenacity policies shared by the cloud clients and the IP lookup."""

from collections.abc import Callable
from typing import Any, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)
from tenacity.wait import wait_base

from kopsdeployer.utils.logging import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _policy(
    exceptions: tuple[type[Exception], ...], max_attempts: int, wait: wait_base
) -> dict[str, Any]:
    def warn(state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome else None
        if error is None:
            return
        logger.warning(
            "retrying",
            attempt=state.attempt_number,
            max_attempts=max_attempts,
            error_type=type(error).__name__,
            error_message=str(error),
        )

    return {
        "retry": retry_if_exception_type(exceptions),
        "stop": stop_after_attempt(max_attempts),
        "wait": wait,
        "before_sleep": warn,
        "reraise": True,
    }


def retry_on_exception(
    exceptions: tuple[type[Exception], ...] = (Exception,),
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
) -> Callable[[F], F]:
    """Retry the decorated call with exponential backoff.

    Args:
        exceptions: Exception types worth another attempt
        max_attempts: Attempts before the last error propagates
        min_wait: Shortest pause (seconds)
        max_wait: Longest pause (seconds)
    """
    wait = wait_exponential(multiplier=1, min=min_wait, max=max_wait)
    return retry(**_policy(exceptions, max_attempts, wait))


def fixed_attempts(
    exceptions: tuple[type[Exception], ...],
    max_attempts: int,
    wait_seconds: float,
) -> Retrying:
    """Attempt loop with a constant pause, for code that cannot be a decorator.

    Usage::

        for attempt in fixed_attempts((SomeError,), 5, 2.0):
            with attempt:
                do_work()
    """
    return Retrying(**_policy(exceptions, max_attempts, wait_fixed(wait_seconds)))
