import contextlib
import dataclasses
import enum
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, Iterable, Optional, \
                   Sequence, Tuple, TypeVar

from typing_extensions import Protocol

from clusterkeeper._cogs.configs import configuration
from clusterkeeper._cogs.helpers import typedefs
from clusterkeeper._cogs.structs import bodies, clusters, patches, references

# All the operations of the CRUD contract, in the order of their usage in a pass.
OPERATIONS: Tuple[str, ...] = (
    'get_current_state',
    'get_desired_state',
    'new_create_patch',
    'new_update_patch',
    'new_delete_patch',
    'apply_create_change',
    'apply_delete_change',
    'apply_update_change',
)

StateT = TypeVar('StateT')


class Reason(str, enum.Enum):
    UPSERT = 'upsert'  # the cluster exists: create or update its sub-resources.
    DELETE = 'delete'  # the cluster is gone: nothing is desired anymore.

    def __str__(self) -> str:
        return str(self.value)


class Verdict(enum.Enum):
    PROCEED = enum.auto()
    CANCELLED = enum.auto()


@dataclasses.dataclass(frozen=True)
class Cause:
    """
    Everything the reconcilers need to know about one pass of one cluster.

    The cause is created once per pass, before the first reconciler starts,
    and is passed as is to every operation of every reconciler of that pass.
    """
    cluster: clusters.ClusterSpec
    reason: Reason
    updates_allowed: bool
    settings: configuration.OperatorSettings
    logger: typedefs.Logger

    @property
    def namespace(self) -> references.NamespaceName:
        return references.NamespaceName(self.cluster.namespace)


@dataclasses.dataclass(frozen=True)
class Observation(Generic[StateT]):
    """
    The current state as observed, and whether the pass must stop here.
    """
    state: StateT
    cancelled: bool = False


class CRUDOps(Protocol[StateT]):
    """ The uniform contract of all the per-kind reconcilers. """
    name: str

    async def get_current_state(self, cause: Cause) -> Observation[StateT]: ...

    async def get_desired_state(self, cause: Cause) -> StateT: ...

    async def new_create_patch(self, cause: Cause, current: StateT, desired: StateT) -> patches.Patch: ...

    async def new_update_patch(self, cause: Cause, current: StateT, desired: StateT) -> patches.Patch: ...

    async def new_delete_patch(self, cause: Cause, current: StateT, desired: StateT) -> patches.Patch: ...

    async def apply_create_change(self, cause: Cause, objs: Sequence[bodies.RawBody]) -> None: ...

    async def apply_delete_change(self, cause: Cause, objs: Sequence[bodies.RawBody]) -> None: ...

    async def apply_update_change(self, cause: Cause, objs: Sequence[bodies.RawBody]) -> None: ...


# A decorator of one operation, given the operation's name: e.g. retrying or metering.
OperationDecorator = Callable[[Callable[..., Awaitable[Any]], str], Callable[..., Awaitable[Any]]]


class DecoratedOps:
    """
    The same ops, but with all the operations of the contract decorated.

    All other attributes (e.g. the name) are taken from the original ops as is.
    The decorators can be stacked: the decorated ops can be decorated again.
    """

    def __init__(self, ops: CRUDOps[Any], decorator: OperationDecorator) -> None:
        super().__init__()
        self._ops = ops
        for operation in OPERATIONS:
            setattr(self, operation, decorator(getattr(ops, operation), operation))

    def __getattr__(self, name: str) -> Any:
        return getattr(self._ops, name)

    def __repr__(self) -> str:
        return f'<{type(self).__name__} of {self._ops!r}>'


class CRUDResource:
    """
    A generic driver of one reconciler through one pass.

    For the existing clusters, the current & desired states are compared,
    and the objects are created, deleted, updated in this order.
    For the deleted clusters, nothing is desired, so everything is deleted.
    """

    def __init__(self, ops: CRUDOps[Any]) -> None:
        super().__init__()
        self.ops = ops

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.name!r}>'

    @property
    def name(self) -> str:
        return self.ops.name

    async def reconcile(self, cause: Cause) -> Verdict:
        async with self._step(cause, 'get the current state'):
            observation = await self.ops.get_current_state(cause)
        if observation.cancelled:
            cause.logger.debug(f"{self.name}: canceling the reconciliation of the cluster")
            return Verdict.CANCELLED

        async with self._step(cause, 'get the desired state'):
            desired = await self.ops.get_desired_state(cause)

        async with self._step(cause, 'compute the patch'):
            if cause.reason is Reason.DELETE:
                patch = await self.ops.new_delete_patch(cause, observation.state, desired)
            else:
                patch = await self.ops.new_update_patch(cause, observation.state, desired)

        async with self._step(cause, 'create the objects'):
            await self.ops.apply_create_change(cause, patch.to_create)
        async with self._step(cause, 'delete the objects'):
            await self.ops.apply_delete_change(cause, patch.to_delete)
        async with self._step(cause, 'update the objects'):
            await self.ops.apply_update_change(cause, patch.to_update)
        return Verdict.PROCEED

    @contextlib.asynccontextmanager
    async def _step(self, cause: Cause, what: str) -> AsyncIterator[None]:
        try:
            yield
        except Exception as e:
            cause.logger.error(f"{self.name}: failed to {what} for {cause.reason} "
                               f"of version {cause.cluster.version}: {e!r}")
            raise


def subtract(
        objs: Iterable[bodies.RawBody],
        others: Iterable[bodies.RawBody],
) -> Sequence[bodies.RawBody]:
    """ The objects with no same-named objects among the others, in their original order. """
    names = {bodies.get_name(obj) for obj in others}
    return [obj for obj in objs if bodies.get_name(obj) not in names]


def describe(objs: Iterable[Optional[bodies.RawBody]]) -> str:
    return ', '.join(repr(bodies.get_name(obj)) for obj in objs)
