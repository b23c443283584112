"""
Access to the nested fields of the raw bodies by their paths.

The bodies come from the manifests and from the API, and both can be
incomplete or edited manually: the lookups never fail on them,
the absent or malformed parents are the same as the absent fields.
"""
import collections.abc
from typing import Any, List, Mapping, MutableMapping, Optional, Tuple, Union

FieldPath = Tuple[str, ...]
FieldSpec = Union[None, str, FieldPath, List[str]]


def parse_field(field: FieldSpec) -> FieldPath:
    """
    A path as a tuple of keys: from ``None`` (the root), from a dotted string,
    or from a list/tuple of keys (for the keys with dots, e.g. annotations).
    """
    if field is None:
        return ()
    if isinstance(field, str):
        return tuple(field.split('.'))
    if isinstance(field, (list, tuple)):
        return tuple(field)
    raise ValueError(f"A field is neither a string nor a list of keys: {field!r}")


def resolve(d: Optional[Mapping[Any, Any]], field: FieldSpec, *, default: Any = None) -> Any:
    """ The value at the path, or the default if it or any parent is absent or not a dict. """
    value: Any = d
    for key in parse_field(field):
        if not isinstance(value, collections.abc.Mapping) or key not in value:
            return default
        value = value[key]
    return value


def ensure(d: MutableMapping[Any, Any], field: FieldSpec, value: Any) -> None:
    """ Set the value at the path, creating the absent parents as dicts. """
    path = parse_field(field)
    if not path:
        raise ValueError("The root cannot be set; a field path is required.")
    *parents, last = path
    target = d
    for key in parents:
        target = target.setdefault(key, {})
    target[last] = value
