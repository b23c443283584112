"""
Cluster specifications: the declared topology of one managed guest cluster.

The specification is created and updated by the cluster's owner (as a custom
object in the host cluster). The engine only reads it: a frozen snapshot is
parsed once per pass and passed to every reconciler of that pass.
"""
import dataclasses
from typing import Any, Mapping, Optional, Tuple

from clusterkeeper._cogs.structs import dicts

STORAGE_HOST_PATH = 'hostPath'
STORAGE_PERSISTENT_VOLUME = 'persistentVolume'
STORAGE_TYPES = (STORAGE_HOST_PATH, STORAGE_PERSISTENT_VOLUME)


class InvalidClusterError(Exception):
    """ Raised when a cluster specification cannot be parsed. """


@dataclasses.dataclass(frozen=True)
class Node:
    """ One master or worker node, i.e. one virtual machine. """
    id: str
    cpus: int = 1
    memory: str = '1G'
    disk: float = 10.0


@dataclasses.dataclass(frozen=True)
class ClusterSpec:
    id: str
    customer: str
    version: str  # of the version bundle; used for routing to the engine generations.
    api_domain: str
    api_secure_port: int = 443
    etcd_domain: Optional[str] = None
    masters: Tuple[Node, ...] = ()
    workers: Tuple[Node, ...] = ()
    etcd_storage: str = STORAGE_HOST_PATH
    etcd_storage_size: str = '15Gi'

    def __post_init__(self) -> None:
        object.__setattr__(self, 'masters', tuple(self.masters))
        object.__setattr__(self, 'workers', tuple(self.workers))

    @property
    def namespace(self) -> str:
        """ Every guest cluster lives in its own namespace named as the cluster. """
        return self.id

    @property
    def ref(self) -> Mapping[str, str]:
        """ Identifying information, as used in logs. """
        return dict(id=self.id, customer=self.customer, version=self.version)

    @classmethod
    def from_body(cls, body: Mapping[str, Any]) -> "ClusterSpec":
        """
        Parse a cluster specification from a raw custom object.

        The object's layout::

            spec:
              cluster:
                id: al9qy
                customer: {id: acme}
                kubernetes: {api: {domain: api.al9qy.k8s.example.com, securePort: 443}}
                etcd: {domain: etcd.al9qy.k8s.example.com}
                masters: [{id: m7mxz}]
                workers: [{id: wbz8a}, {id: wzc4k}]
              kvm:
                masters: [{cpus: 2, memory: 4G, disk: 20}]
                workers: [{cpus: 4, memory: 8G, disk: 50}, {cpus: 4, memory: 8G, disk: 50}]
                storage: {type: persistentVolume, size: 15Gi}
              versionBundle: {version: 2.1.0}

        The master and worker capabilities are matched to the nodes by index.
        """
        spec = dicts.resolve(body, 'spec', default=None)
        if not isinstance(spec, Mapping):
            raise InvalidClusterError("The cluster object has no spec.")

        cluster_id = dicts.resolve(spec, 'cluster.id', default=None)
        version = dicts.resolve(spec, 'versionBundle.version', default=None)
        api_domain = dicts.resolve(spec, 'cluster.kubernetes.api.domain', default=None)
        if not cluster_id:
            raise InvalidClusterError("The cluster id is not specified.")
        if not version:
            raise InvalidClusterError(f"The version bundle of {cluster_id} is not specified.")
        if not api_domain:
            raise InvalidClusterError(f"The API domain of {cluster_id} is not specified.")

        raw_port = dicts.resolve(spec, 'cluster.kubernetes.api.securePort', default=443)
        try:
            secure_port = int(raw_port)
        except (TypeError, ValueError) as e:
            raise InvalidClusterError(f"Malformed API port of {cluster_id}: {raw_port!r}") from e

        storage_type = dicts.resolve(spec, 'kvm.storage.type', default=STORAGE_HOST_PATH)
        if storage_type not in STORAGE_TYPES:
            raise InvalidClusterError(f"Unsupported storage type of {cluster_id}: {storage_type!r}")

        return cls(
            id=str(cluster_id),
            customer=str(dicts.resolve(spec, 'cluster.customer.id', default='')),
            version=str(version),
            api_domain=str(api_domain),
            api_secure_port=secure_port,
            etcd_domain=dicts.resolve(spec, 'cluster.etcd.domain', default=None),
            masters=_parse_nodes(spec, 'masters', cluster_id=str(cluster_id)),
            workers=_parse_nodes(spec, 'workers', cluster_id=str(cluster_id)),
            etcd_storage=str(storage_type),
            etcd_storage_size=str(dicts.resolve(spec, 'kvm.storage.size', default='15Gi')),
        )


def _parse_nodes(spec: Mapping[str, Any], role: str, *, cluster_id: str) -> Tuple[Node, ...]:
    nodes = dicts.resolve(spec, ('cluster', role), default=None) or []
    capabilities = dicts.resolve(spec, ('kvm', role), default=None) or []
    if len(capabilities) != len(nodes):
        raise InvalidClusterError(f"The {role} of {cluster_id} do not match their capabilities: "
                                  f"{len(nodes)} nodes vs. {len(capabilities)} capabilities.")
    result = []
    for node, caps in zip(nodes, capabilities):
        if not isinstance(node, Mapping) or not node.get('id'):
            raise InvalidClusterError(f"One of the {role} of {cluster_id} has no id.")
        try:
            result.append(Node(
                id=str(node['id']),
                cpus=int(caps.get('cpus', 1)),
                memory=str(caps.get('memory', '1G')),
                disk=float(caps.get('disk', 10.0)),
            ))
        except (TypeError, ValueError, AttributeError) as e:
            raise InvalidClusterError(f"Malformed capabilities of {role} {node['id']}: {e}") from e
    return tuple(result)
