"""
Errors of the engine itself (not of the API), and how they are classified.

The API errors are in :mod:`clusterkeeper._cogs.clients.errors`.
Here, they are only sorted into the transient ones (to be retried)
and all others (to be escalated to the caller as is).
"""
from typing import Optional, Tuple, Type

from clusterkeeper._cogs.clients import errors

# The default delay duration for the explicit temporary errors.
DEFAULT_RETRY_DELAY = 1.0


class PermanentError(Exception):
    """ A fatal error of a reconciler, the retries are useless. """


class TemporaryError(Exception):
    """ A potentially recoverable error of a reconciler, should be retried. """
    def __init__(
            self,
            __msg: Optional[str] = None,
            delay: Optional[float] = DEFAULT_RETRY_DELAY,
    ) -> None:
        super().__init__(__msg)
        self.delay = delay


class InvalidConfigError(Exception):
    """ The engine is assembled wrongly (a programming or deployment error). """


class NoResourceSetError(Exception):
    """ No engine generation handles the version of a cluster. """


class AmbiguousResourceSetError(Exception):
    """ More than one engine generation handles the version of a cluster. """


# The write conflicts are caused by the concurrent writers of the same object,
# the server errors are caused by the API's own state: both can pass with time.
TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    errors.APIConflictError,
    errors.APIServerError,
    TemporaryError,
)


def is_transient(exc: BaseException) -> bool:
    return isinstance(exc, TRANSIENT_ERRORS)
