"""
The diffs of the objects' fields: what the engine compares to detect a divergence.

The observed objects are compared as the source (left) with the desired ones
as the target (right). The API server adds plenty of fields on its own:
the defaults of the pods & containers, the cluster IPs, the statuses, etc.
Such fields are absent in the desired objects and are not a divergence.
Hence, the right-scoped diff, which looks only at what the target declares.
"""
import collections.abc
import enum
from typing import Any, Iterable, Iterator, NamedTuple, Tuple, Union

from clusterkeeper._cogs.structs import dicts

# Same as a field path, but also with the indexes of the list items.
DiffPath = Tuple[Union[str, int], ...]


class DiffScope(enum.Flag):
    """
    Which side's fields are noticed when the two objects are compared.

    In the full scope (the default), the fields of both sides are noticed,
    and the lists are compared as a whole: an extra item on either side
    is a change of the whole list.

    In the right scope, only the fields declared in the right object (target)
    are noticed, also inside the lists' items, which are then compared
    pairwise by their positions. The lists of different lengths are still
    a change of the whole list. The extra fields of the left object (source)
    are ignored, except when the whole left object is absent.

    The left scope is the mirror of the right one for the mappings.
    """
    RIGHT = enum.auto()
    LEFT = enum.auto()
    FULL = LEFT | RIGHT


class DiffOperation(str, enum.Enum):
    ADD = 'add'
    CHANGE = 'change'
    REMOVE = 'remove'

    def __str__(self) -> str:
        return str(self.value)


class DiffItem(NamedTuple):
    operation: DiffOperation
    field: DiffPath
    old: Any
    new: Any


def _is_list(value: Any) -> bool:
    return isinstance(value, collections.abc.Sequence) and not isinstance(value, (str, bytes))


def diff_iter(
        a: Any,
        b: Any,
        path: DiffPath = (),
        *,
        scope: DiffScope = DiffScope.FULL,
) -> Iterator[DiffItem]:
    """
    Yield the differences from ``a`` to ``b`` as ``(op, path, old, new)`` items.

    The ``path`` is a tuple of keys and list indexes (empty for the root);
    ``old`` or ``new`` is ``None`` for the additions & removals.
    """
    if a == b:  # incl. cases when both are None
        pass
    elif a is None:
        yield DiffItem(DiffOperation.ADD, path, a, b)
    elif b is None:
        if DiffScope.LEFT in scope or not path:
            yield DiffItem(DiffOperation.REMOVE, path, a, b)
    elif isinstance(a, collections.abc.Mapping) and isinstance(b, collections.abc.Mapping):
        a_keys = frozenset(a.keys())
        b_keys = frozenset(b.keys())
        for key in (b_keys - a_keys if DiffScope.RIGHT in scope else ()):
            yield from diff_iter(None, b[key], path=path+(key,), scope=scope)
        for key in (a_keys - b_keys if DiffScope.LEFT in scope else ()):
            yield from diff_iter(a[key], None, path=path+(key,), scope=scope)
        for key in (a_keys & b_keys):
            yield from diff_iter(a[key], b[key], path=path+(key,), scope=scope)
    elif scope == DiffScope.RIGHT and _is_list(a) and _is_list(b) and len(a) == len(b):
        for idx, (a_item, b_item) in enumerate(zip(a, b)):
            yield from diff_iter(a_item, b_item, path=path+(idx,), scope=scope)
    else:
        yield DiffItem(DiffOperation.CHANGE, path, a, b)


def diff_fields(
        a: Any,
        b: Any,
        fields: Iterable[dicts.FieldSpec],
        *,
        scope: DiffScope = DiffScope.FULL,
) -> Tuple[DiffItem, ...]:
    """
    The diff of only the selected fields of two objects; empty if they match.

    The absent fields are treated as ``None``. The paths in the diff items
    are full paths from the objects' roots, not relative to the fields.
    """
    items = []
    for field in fields:
        path = dicts.parse_field(field)
        old = dicts.resolve(a, path, default=None)
        new = dicts.resolve(b, path, default=None)
        items.extend(diff_iter(old, new, path=path, scope=scope))
    return tuple(items)
