"""Retry decorator utilities."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Callable, Optional, ParamSpec, Tuple, Type, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

logger = logging.getLogger(__name__)


def retry(
    *,
    attempts: int = 3,
    delay: float = 0.1,
    backoff: float = 2.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Retry decorator with exponential backoff.

    ``attempts`` counts the first call, so ``attempts=1`` disables retrying.
    """

    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            current_delay = delay
            last_error: Optional[BaseException] = None
            for attempt in range(attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as exc:
                    last_error = exc
                    if attempt == attempts - 1:
                        raise
                    logger.warning(
                        "retrying_call",
                        extra={
                            "function": func.__name__,
                            "attempt": attempt + 1,
                            "delay": current_delay,
                            "error": str(exc),
                        },
                    )
                    sleep(current_delay)
                    current_delay *= backoff
            raise last_error if last_error else RuntimeError("retry failed")

        return wrapper

    return decorator
