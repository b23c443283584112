"""
The namespace of a guest cluster: the first resource of every pass.

All other resources of the cluster live in this namespace. When the namespace
is being deleted (e.g. after the cluster is deleted), there is nothing
to reconcile in it: the pass is cancelled by this reconciler.
"""
from typing import Callable, Optional, Sequence

from clusterkeeper._cogs.clients import creating, deleting, fetching, patching
from clusterkeeper._cogs.structs import bodies, clusters, dicts, diffs, patches, references
from clusterkeeper._core.resources import base

TERMINATING_PHASE = 'Terminating'

State = Optional[bodies.RawBody]


class NamespaceOps:
    name = 'namespace'
    resource = references.NAMESPACES
    comparable_fields: Sequence[dicts.FieldSpec] = ('metadata.labels',)

    def __init__(self, build: Callable[[clusters.ClusterSpec], bodies.RawBody]) -> None:
        super().__init__()
        self.build = build

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.name!r}>'

    async def get_current_state(self, cause: base.Cause) -> base.Observation[State]:
        cause.logger.debug(f"{self.name}: looking for the namespace {cause.namespace!r} in the API")
        body = await fetching.read_obj(
            resource=self.resource,
            namespace=None,
            name=cause.namespace,
            settings=cause.settings,
            logger=cause.logger,
        )
        if body is None:
            cause.logger.debug(f"{self.name}: did not find the namespace in the API")
            return base.Observation(None)

        cause.logger.debug(f"{self.name}: found the namespace in the API")
        if dicts.resolve(body, 'status.phase', default=None) == TERMINATING_PHASE:
            cause.logger.debug(f"{self.name}: the namespace is in state {TERMINATING_PHASE!r}")
            return base.Observation(None, cancelled=True)
        return base.Observation(body)

    async def get_desired_state(self, cause: base.Cause) -> State:
        if cause.reason is base.Reason.DELETE:
            return None
        return self.build(cause.cluster)

    async def new_create_patch(self, cause: base.Cause, current: State, desired: State) -> patches.Patch:
        if current is None and desired is not None:
            return patches.Patch.create([desired])
        return patches.EMPTY

    async def new_delete_patch(self, cause: base.Cause, current: State, desired: State) -> patches.Patch:
        if current is not None and desired is None:
            return patches.Patch.delete([current])
        return patches.EMPTY

    async def new_update_patch(self, cause: base.Cause, current: State, desired: State) -> patches.Patch:
        create_patch = await self.new_create_patch(cause, current, desired)
        delete_patch = await self.new_delete_patch(cause, current, desired)
        update_patch = patches.EMPTY
        if current is not None and desired is not None:
            d = diffs.diff_fields(current, desired, self.comparable_fields, scope=diffs.DiffScope.RIGHT)
            if d:
                update_patch = patches.Patch.update([desired])
        return create_patch.merge(delete_patch, update_patch)

    async def apply_create_change(self, cause: base.Cause, objs: Sequence[bodies.RawBody]) -> None:
        for obj in objs:
            cause.logger.debug(f"{self.name}: creating the namespace in the API")
            await creating.create_obj(
                resource=self.resource,
                body=obj,
                settings=cause.settings,
                logger=cause.logger,
            )
            cause.logger.info(f"{self.name}: created the namespace {bodies.get_name(obj)!r}")

    async def apply_delete_change(self, cause: base.Cause, objs: Sequence[bodies.RawBody]) -> None:
        for obj in objs:
            cause.logger.debug(f"{self.name}: deleting the namespace in the API")
            deleted = await deleting.delete_obj(
                resource=self.resource,
                namespace=None,
                name=bodies.get_name(obj) or '',
                settings=cause.settings,
                logger=cause.logger,
            )
            if deleted:
                cause.logger.info(f"{self.name}: deleted the namespace {bodies.get_name(obj)!r}")
            else:
                cause.logger.debug(f"{self.name}: the namespace is already gone")

    async def apply_update_change(self, cause: base.Cause, objs: Sequence[bodies.RawBody]) -> None:
        for obj in objs:
            cause.logger.debug(f"{self.name}: updating the namespace in the API")
            patched = await patching.patch_obj(
                resource=self.resource,
                namespace=None,
                name=bodies.get_name(obj) or '',
                patch={'metadata': {'labels': dicts.resolve(obj, 'metadata.labels', default={})}},
                settings=cause.settings,
                logger=cause.logger,
            )
            if patched is None:
                cause.logger.info(f"{self.name}: not updating the namespace {bodies.get_name(obj)!r}: it is gone")
            else:
                cause.logger.info(f"{self.name}: updated the namespace {bodies.get_name(obj)!r}")
