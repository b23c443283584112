"""
Retrying of the reconcilers' operations on the transient failures.

Every operation of the CRUD contract is retried individually: e.g. if the
update of a deployment fails with a write conflict, only the update is
repeated, not the whole pass. The non-transient errors are escalated
immediately, and so is the last transient error once the attempts are over.
"""
import asyncio
import functools
from typing import Any, Awaitable, Callable, cast

from clusterkeeper._cogs.configs import configuration
from clusterkeeper._core.actions import execution
from clusterkeeper._core.resources import base


def get_delay(
        attempt: int,
        *,
        settings: configuration.OperatorSettings,
        exc: BaseException,
) -> float:
    """ The delay after a failed attempt (1-based), before the next one. """
    if isinstance(exc, execution.TemporaryError) and exc.delay is not None:
        return exc.delay
    retrying = settings.retrying
    return min(retrying.backoff * retrying.factor ** (attempt - 1), retrying.max_delay)


def retried(
        fn: Callable[..., Awaitable[Any]],
        operation: str,
        *,
        kind: str,
        settings: configuration.OperatorSettings,
) -> Callable[..., Awaitable[Any]]:

    @functools.wraps(fn)
    async def wrapper(cause: base.Cause, *args: Any, **kwargs: Any) -> Any:
        attempts = max(1, settings.retrying.attempts)
        for attempt in range(1, attempts + 1):
            try:
                return await fn(cause, *args, **kwargs)
            except Exception as e:
                if not execution.is_transient(e):
                    raise
                if attempt >= attempts:
                    cause.logger.error(f"{kind}: {operation} failed temporarily, "
                                       f"no attempts left ({attempt}/{attempts}): {str(e) or repr(e)}")
                    raise
                delay = get_delay(attempt, settings=settings, exc=e)
                cause.logger.warning(f"{kind}: {operation} failed temporarily, will retry "
                                     f"in {delay:.2f}s ({attempt}/{attempts}): {str(e) or repr(e)}")
                await asyncio.sleep(delay)
        raise RuntimeError("Broken retryable routine.")  # impossible, but needed for type-checking.

    return wrapper


def wrap(
        ops: base.CRUDOps[Any],
        *,
        settings: configuration.OperatorSettings,
) -> base.CRUDOps[Any]:
    """ Retry every operation of the ops on the transient errors. """
    decorator = functools.partial(retried, kind=ops.name, settings=settings)
    return cast(base.CRUDOps[Any], base.DecoratedOps(ops, decorator))
