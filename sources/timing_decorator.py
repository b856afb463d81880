# timing_decorator.py
import functools
import time
from typing import Any, Callable, Optional, TypeVar, cast

from app_logger import logger

F = TypeVar("F", bound=Callable[..., Any])


def timed(label: Optional[str] = None) -> Callable[[F], F]:
    """
    Log how long each call of the wrapped function takes, at DEBUG level.

    ``label`` tags the log line; the function's qualified name is used when
    it is omitted.  The duration is logged even when the call raises.
    """
    def decorator(func: F) -> F:
        tag = label or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                logger.debug("[%s] took %.6f s", tag, time.perf_counter() - start)
        return cast(F, wrapper)
    return decorator
