"""
All the structures coming from/to the Kubernetes API.

The objects are plain JSON-decoded dicts, exactly as the API sends them.
For stricter type-checking, the well-known fields are declared as `TypedDict`;
the objects can carry arbitrary other fields at runtime.
"""
from typing import Any, List, Mapping, Optional, Sequence

from typing_extensions import TypedDict

Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    finalizers: List[str]
    resourceVersion: str
    deletionTimestamp: str
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]
    data: Mapping[str, str]


# The current or desired state of the list-based kinds.
RawBodies = Sequence[RawBody]


def get_name(body: Optional[RawBody]) -> Optional[str]:
    return body.get('metadata', {}).get('name') if body is not None else None


def find_by_name(bodies: RawBodies, name: Optional[str]) -> Optional[RawBody]:
    """
    Find an object by its name, or ``None`` if there is no such object.

    The names are unique within a kind in a namespace, so the first match wins.
    """
    for body in bodies:
        if get_name(body) == name:
            return body
    return None
