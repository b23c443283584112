"""
Naming of the guest clusters' sub-resources, and other well-known keys.

The names must be stable across the engine generations: the objects created
by one generation are found, updated, or deleted by the next ones by name.
"""
from clusterkeeper._cogs.structs import clusters
from clusterkeeper._core.resources import deployments

MASTER_ID = 'master'
WORKER_ID = 'worker'
API_ID = 'api'
ETCD_ID = 'etcd'

VERSION_ANNOTATION = deployments.VERSION_ANNOTATION
ANNOTATION_IP = 'endpoint.clusterkeeper.dev/ip'
ANNOTATION_SERVICE = 'endpoint.clusterkeeper.dev/service'

COREOS_IMAGE_DIR = '/home/core/images'
FLANNEL_ENV_PATH_PREFIX = '/run/flannel'
CLOUD_CONFIG_PATH = '/cloudconfig/user_data'
ETCD_HOST_PATH_PREFIX = '/home/core/volumes'
HEALTH_ENDPOINT = '/healthz'
PROBE_HOST = '127.0.0.1'
LIVENESS_PORT = 23000
HEALTH_LISTEN_ADDRESS = f'http://{PROBE_HOST}:{LIVENESS_PORT}'

# The liveness probe of the virtual machines: they boot slowly.
INITIAL_DELAY_SECONDS = 250
TIMEOUT_SECONDS = 15
PERIOD_SECONDS = 20
FAILURE_THRESHOLD = 2
SUCCESS_THRESHOLD = 1


def deployment_name(prefix: str, node: clusters.Node) -> str:
    return f'{prefix}-{node.id}'


def config_map_name(cluster: clusters.ClusterSpec, node: clusters.Node, prefix: str) -> str:
    return f'{prefix}-{cluster.id}-{node.id}'


def service_account_name(cluster: clusters.ClusterSpec) -> str:
    return cluster.id


def volume_claim_name(cluster: clusters.ClusterSpec, node: clusters.Node) -> str:
    return f'pvc-{MASTER_ID}-{ETCD_ID}-{cluster.id}-{node.id}'


def network_bridge_name(cluster: clusters.ClusterSpec) -> str:
    return f'br-{cluster.id}'


def network_tap_name(cluster: clusters.ClusterSpec) -> str:
    return f'tap-{cluster.id}'


def network_env_file_path(cluster: clusters.ClusterSpec) -> str:
    return f'{FLANNEL_ENV_PATH_PREFIX}/networks/{network_bridge_name(cluster)}.env'


def etcd_host_path(cluster: clusters.ClusterSpec, node: clusters.Node) -> str:
    return f'{ETCD_HOST_PATH_PREFIX}/{cluster.id}-{node.id}-k8s-etcd'


def labels(cluster: clusters.ClusterSpec, app: str) -> dict[str, str]:
    return {'app': app, 'cluster': cluster.id, 'customer': cluster.customer}
