"""
Caller-level retries of the read-modify-write operations.

The resource clients never retry on their own. The callers that know that
their operation is safe to repeat (e.g. `ResourceClient.transform` with
an idempotent mutator) can wrap it into a retrying routine::

    @retried(backoffs=[0.1, 0.5, 1.0])
    async def relabel(client, namespace, name):
        await client.transform(namespace, name, label_set_mutator({'x': 'y'}))

Every attempt re-reads the object, so the retries see the fresh versions.
"""
import asyncio
import collections.abc
import functools
import itertools
import logging
from typing import Any, Callable, Iterable, Optional, Tuple, Type, TypeVar, Union, cast

from kfclient.toolkits import errors
from kfclient.utilities import typedefs

DEFAULT_BACKOFFS: Tuple[float, ...] = (0.1, 0.5, 1.0, 2.0)

# A typevar to show that we return a function with the same signature as given.
_F = TypeVar('_F', bound=Callable[..., Any])

logger = logging.getLogger(__name__)


def retried(
        *,
        backoffs: Union[float, Iterable[float]] = DEFAULT_BACKOFFS,
        retry_on: Tuple[Type[BaseException], ...] = (errors.ConflictError,),
        logger: typedefs.Logger = logger,
) -> Callable[[_F], _F]:
    """
    A decorator to retry a coroutine function on the conflicts (by default).

    The backoffs are the delays between the attempts, in seconds: a number,
    or a finite sequence of numbers (consumed once, when decorating). The number
    of attempts is one more than the number of backoffs. The last error is
    escalated as is. Other errors are escalated immediately.
    """
    delays = tuple(backoffs) if isinstance(backoffs, collections.abc.Iterable) else (backoffs,)
    count = len(delays) + 1

    def decorator(fn: _F) -> _F:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            backoff: Optional[float]
            for attempt, backoff in enumerate(itertools.chain(delays, [None]), start=1):
                idx = f"#{attempt}/{count}"
                what = getattr(fn, '__qualname__', repr(fn))
                try:
                    if attempt > 1:
                        logger.debug(f"Attempt {idx}: {what}")
                    result = await fn(*args, **kwargs)
                except retry_on as e:
                    if backoff is None:  # i.e. the last or the only attempt.
                        logger.error(f"Attempt {idx} failed; escalating: {what} -> {e}")
                        raise
                    else:
                        logger.warning(f"Attempt {idx} failed; will retry: {what} -> {e}")
                        await asyncio.sleep(backoff)
                else:
                    if attempt > 1:
                        logger.debug(f"Attempt {idx} succeeded: {what}")
                    return result

            raise RuntimeError("Broken retryable routine.")  # impossible, but needed for type-checking.
        return cast(_F, wrapper)
    return decorator
