"""
Metrics of the reconcilers' operations: how long they take, how they end.

The metrics are process-wide (the default Prometheus registry), and are
labelled by the resource set, the resource kind, and the operation.
Exposing them (e.g. via an HTTP endpoint) is the embedding application's job.
"""
import functools
import time
from typing import Any, Awaitable, Callable, cast

from prometheus_client import Counter, Histogram

from clusterkeeper._cogs.configs import configuration
from clusterkeeper._core.resources import base

OPERATION_DURATION = Histogram(
    "clusterkeeper_operation_duration_seconds",
    "Duration of the reconcilers' operations, including the retries",
    ["resource_set", "resource", "operation"],
)

OPERATIONS_TOTAL = Counter(
    "clusterkeeper_operations_total",
    "Total operations of the reconcilers, by their outcome",
    ["resource_set", "resource", "operation", "outcome"],
)

PASSES_TOTAL = Counter(
    "clusterkeeper_passes_total",
    "Total reconciliation passes of the clusters, by their verdict",
    ["resource_set", "verdict"],
)

OUTCOME_SUCCESS = 'success'
OUTCOME_FAILURE = 'failure'


def metered(
        fn: Callable[..., Awaitable[Any]],
        operation: str,
        *,
        name: str,
        kind: str,
) -> Callable[..., Awaitable[Any]]:

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        outcome = OUTCOME_FAILURE
        started = time.monotonic()
        try:
            result = await fn(*args, **kwargs)
            outcome = OUTCOME_SUCCESS
            return result
        finally:
            duration = time.monotonic() - started
            OPERATION_DURATION.labels(resource_set=name, resource=kind, operation=operation).observe(duration)
            OPERATIONS_TOTAL.labels(resource_set=name, resource=kind, operation=operation, outcome=outcome).inc()

    return wrapper


def wrap(
        ops: base.CRUDOps[Any],
        *,
        name: str,
        settings: configuration.OperatorSettings,
) -> base.CRUDOps[Any]:
    """ Measure every operation of the ops, unless the metering is disabled. """
    if not settings.metering.enabled:
        return ops
    decorator = functools.partial(metered, name=name, kind=ops.name)
    return cast(base.CRUDOps[Any], base.DecoratedOps(ops, decorator))


def count_pass(*, name: str, verdict: base.Verdict) -> None:
    PASSES_TOTAL.labels(resource_set=name, verdict=verdict.name.lower()).inc()
