"""
The common reconciler of the list-based kinds: all but the namespace.

The objects of such kinds live in the cluster's namespace and are matched
between the current & desired states by their names. The kinds only differ
by the API resource, by the template of the desired objects,
and by the fields which are compared to detect the divergence.
"""
from typing import Any, Callable, ClassVar, Dict, List, Optional, Sequence, Tuple

from clusterkeeper._cogs.clients import creating, deleting, fetching, patching
from clusterkeeper._cogs.structs import bodies, clusters, dicts, diffs, patches, references
from clusterkeeper._core.resources import base

Builder = Callable[[clusters.ClusterSpec], Sequence[bodies.RawBody]]


class ListedOps:
    name: ClassVar[str]
    resource: ClassVar[references.Resource]

    # The fields which are updated if changed. No fields means the objects are never updated.
    comparable_fields: ClassVar[Tuple[dicts.FieldSpec, ...]] = ()

    def __init__(self, build: Builder) -> None:
        super().__init__()
        self.build = build

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.name!r}>'

    async def get_current_state(self, cause: base.Cause) -> base.Observation[Sequence[bodies.RawBody]]:
        cause.logger.debug(f"{self.name}: looking for the objects in the API")
        objs = await fetching.list_objs(
            resource=self.resource,
            namespace=cause.namespace,
            settings=cause.settings,
            logger=cause.logger,
        )
        cause.logger.debug(f"{self.name}: found {len(objs)} objects in the API")
        return base.Observation(objs)

    async def get_desired_state(self, cause: base.Cause) -> Sequence[bodies.RawBody]:
        if cause.reason is base.Reason.DELETE:
            return []
        return self.build(cause.cluster)

    async def new_create_patch(
            self,
            cause: base.Cause,
            current: Sequence[bodies.RawBody],
            desired: Sequence[bodies.RawBody],
    ) -> patches.Patch:
        return patches.Patch.create(base.subtract(desired, current))

    async def new_delete_patch(
            self,
            cause: base.Cause,
            current: Sequence[bodies.RawBody],
            desired: Sequence[bodies.RawBody],
    ) -> patches.Patch:
        return patches.Patch.delete(base.subtract(current, desired))

    async def new_update_patch(
            self,
            cause: base.Cause,
            current: Sequence[bodies.RawBody],
            desired: Sequence[bodies.RawBody],
    ) -> patches.Patch:
        create_patch = await self.new_create_patch(cause, current, desired)
        delete_patch = await self.new_delete_patch(cause, current, desired)
        update_patch = patches.Patch.update(self.select_updates(cause, current, desired))
        return create_patch.merge(delete_patch, update_patch)

    def select_updates(
            self,
            cause: base.Cause,
            current: Sequence[bodies.RawBody],
            desired: Sequence[bodies.RawBody],
    ) -> Sequence[bodies.RawBody]:
        """ All the desired objects which are modified compared to the current ones. """
        selected = []
        for desired_obj in desired:
            current_obj = bodies.find_by_name(current, bodies.get_name(desired_obj))
            if current_obj is not None and self.is_modified(current_obj, desired_obj):
                selected.append(desired_obj)
        return selected

    def is_modified(self, current: bodies.RawBody, desired: bodies.RawBody) -> bool:
        if not self.comparable_fields:
            return False
        d = diffs.diff_fields(current, desired, self.comparable_fields, scope=diffs.DiffScope.RIGHT)
        return bool(d)

    def build_update(self, desired: bodies.RawBody) -> Dict[str, Any]:
        """ A merge-patch with only the comparable fields of the desired object. """
        patch: Dict[str, Any] = {}
        for field in self.comparable_fields:
            value: Optional[Any] = dicts.resolve(desired, field, default=None)
            if value is not None:
                dicts.ensure(patch, field, value)
        return patch

    async def apply_create_change(self, cause: base.Cause, objs: Sequence[bodies.RawBody]) -> None:
        if not objs:
            cause.logger.debug(f"{self.name}: the objects do not need to be created in the API")
            return
        cause.logger.debug(f"{self.name}: creating the objects in the API: {base.describe(objs)}")
        for obj in objs:
            await creating.create_obj(
                resource=self.resource,
                namespace=cause.namespace,
                body=obj,
                settings=cause.settings,
                logger=cause.logger,
            )
        cause.logger.info(f"{self.name}: created the objects in the API: {base.describe(objs)}")

    async def apply_delete_change(self, cause: base.Cause, objs: Sequence[bodies.RawBody]) -> None:
        if not objs:
            cause.logger.debug(f"{self.name}: the objects do not need to be deleted in the API")
            return
        cause.logger.debug(f"{self.name}: deleting the objects in the API: {base.describe(objs)}")
        deleted: List[bodies.RawBody] = []
        for obj in objs:
            existed = await deleting.delete_obj(
                resource=self.resource,
                namespace=cause.namespace,
                name=bodies.get_name(obj) or '',
                settings=cause.settings,
                logger=cause.logger,
            )
            if existed:
                deleted.append(obj)
            else:
                cause.logger.debug(f"{self.name}: not deleting {bodies.get_name(obj)!r}: it is gone")
        if deleted:
            cause.logger.info(f"{self.name}: deleted the objects in the API: {base.describe(deleted)}")

    async def apply_update_change(self, cause: base.Cause, objs: Sequence[bodies.RawBody]) -> None:
        if not objs:
            cause.logger.debug(f"{self.name}: the objects do not need to be updated in the API")
            return
        cause.logger.debug(f"{self.name}: updating the objects in the API: {base.describe(objs)}")
        updated: List[bodies.RawBody] = []
        for obj in objs:
            patched = await patching.patch_obj(
                resource=self.resource,
                namespace=cause.namespace,
                name=bodies.get_name(obj) or '',
                patch=self.build_update(obj),
                settings=cause.settings,
                logger=cause.logger,
            )
            if patched is None:
                cause.logger.info(f"{self.name}: not updating {bodies.get_name(obj)!r}: it is gone")
            else:
                updated.append(obj)
        if updated:
            cause.logger.info(f"{self.name}: updated the objects in the API: {base.describe(updated)}")
