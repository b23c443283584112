"""
The bounded changes computed for one resource kind in one reconciliation pass.

Unlike the field-level patches sent to the API, this is a batch of whole
objects: which objects to create, which to update, which to delete.
The patch is a pure value: it is computed from the current & desired states
without side effects, and is then applied by the resource's ops.
"""
import dataclasses
from typing import Iterable, Tuple

from clusterkeeper._cogs.structs import bodies


@dataclasses.dataclass(frozen=True)
class Patch:
    to_create: Tuple[bodies.RawBody, ...] = ()
    to_update: Tuple[bodies.RawBody, ...] = ()
    to_delete: Tuple[bodies.RawBody, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.to_create or self.to_update or self.to_delete)

    @classmethod
    def create(cls, objs: Iterable[bodies.RawBody]) -> "Patch":
        return cls(to_create=tuple(objs))

    @classmethod
    def update(cls, objs: Iterable[bodies.RawBody]) -> "Patch":
        return cls(to_update=tuple(objs))

    @classmethod
    def delete(cls, objs: Iterable[bodies.RawBody]) -> "Patch":
        return cls(to_delete=tuple(objs))

    def merge(self, *others: "Patch") -> "Patch":
        """ Combine the partial patches (e.g. create-, delete-, update-only) into one. """
        patch = self
        for other in others:
            patch = Patch(
                to_create=patch.to_create + other.to_create,
                to_update=patch.to_update + other.to_update,
                to_delete=patch.to_delete + other.to_delete,
            )
        return patch


EMPTY = Patch()
