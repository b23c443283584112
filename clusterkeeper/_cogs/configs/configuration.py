"""
All configuration flags, options, settings to fine-tune the engine.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).
The settings are static for the lifetime of the engine: they are read
when the resource sets are built and when every pass starts,
and are never modified by the engine itself.
"""
import dataclasses
from typing import Iterable, Optional


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for the API requests (in seconds).
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for establishing the connection to the API (in seconds).
    """

    error_backoffs: Iterable[float] = (1, 1, 2, 3, 5)
    """
    Backoff intervals in case the API is not reachable:
    i.e. connection failures and timeouts of the requests.
    The number of retries is the number of backoffs.
    To disable retrying of the API requests, set it to ``[]`` or ``()``.

    The HTTP errors of the API (5xx, 409) are not retried here, but only
    by the reconcilers' operations (see `RetryingSettings`), once per operation.
    """


@dataclasses.dataclass
class RetryingSettings:
    """
    Settings for retrying the reconcilers' operations on transient failures.

    Transient failures are the write conflicts (stale resource versions),
    the server-side API errors, and the explicit temporary errors.
    All other errors are escalated immediately.
    """

    attempts: int = 3
    """
    How many times an operation is attempted in total, including the first one.
    Once exceeded, the last error is escalated and the pass fails.
    """

    backoff: float = 0.5
    """
    The delay (in seconds) before the second attempt.
    """

    factor: float = 1.5
    """
    The multiplier of the delay for every next attempt (exponential backoff).
    """

    max_delay: float = 60.0
    """
    The maximum delay (in seconds) between two attempts, regardless of the factor.
    """


@dataclasses.dataclass
class UpdatingSettings:

    enabled: bool = False
    """
    Are the disruptive updates of the guest clusters' workloads allowed?

    If not (the default), the deployments are only created & deleted,
    but never updated: e.g. when the version bundle of the cluster changes.
    If allowed, the deployments are updated one per pass,
    and only when all the deployments of the cluster are fully available.
    """


@dataclasses.dataclass
class BatchingSettings:

    worker_limit: Optional[int] = None
    """
    How many clusters can be reconciled simultaneously.
    If ``None``, there is no limit (all the requested clusters at once).
    Otherwise, it must be positive.
    """


@dataclasses.dataclass
class MeteringSettings:

    enabled: bool = True
    """
    Should the durations and the outcomes of the operations be measured?
    """


@dataclasses.dataclass
class OperatorSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    retrying: RetryingSettings = dataclasses.field(default_factory=RetryingSettings)
    updating: UpdatingSettings = dataclasses.field(default_factory=UpdatingSettings)
    batching: BatchingSettings = dataclasses.field(default_factory=BatchingSettings)
    metering: MeteringSettings = dataclasses.field(default_factory=MeteringSettings)
