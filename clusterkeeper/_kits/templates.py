"""
The desired state of the guest clusters' sub-resources.

Every guest cluster runs in the host cluster as a set of virtual machines
(one per master or worker node), each wrapped into its own deployment.
The machines get their cloud-configs from the config maps, their network
from the host's bridge & tap devices, and their API & etcd endpoints
exposed via the services and ingresses of the cluster's namespace.

The builders are pure: the same cluster specification always gives
the same bodies, so that the repeated passes detect no divergence.
"""
import dataclasses
from typing import Any, Dict, List, Optional

import yaml

from clusterkeeper._cogs.structs import bodies, clusters, references
from clusterkeeper._kits import keys


@dataclasses.dataclass(frozen=True)
class Templates:
    endpoint_updater_image: str
    kvm_image: str
    kvm_health_image: str
    coreos_version: str
    pod_anti_affinity: bool = False  # keep the masters & workers on separate hosts?

    def namespace(self, cluster: clusters.ClusterSpec) -> bodies.RawBody:
        return {
            'apiVersion': references.NAMESPACES.api_version,
            'kind': references.NAMESPACES.kind,
            'metadata': {
                'name': cluster.namespace,
                'labels': {'cluster': cluster.id, 'customer': cluster.customer},
            },
        }

    def service_accounts(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies:
        return [_new_body(references.SERVICE_ACCOUNTS, cluster, keys.service_account_name(cluster),
                          labels={'cluster': cluster.id, 'customer': cluster.customer})]

    def config_maps(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies:
        result: List[bodies.RawBody] = []
        for role, nodes in [(keys.MASTER_ID, cluster.masters), (keys.WORKER_ID, cluster.workers)]:
            for node in nodes:
                body = _new_body(references.CONFIG_MAPS, cluster, keys.config_map_name(cluster, node, role),
                                 labels=dict(keys.labels(cluster, role), node=node.id))
                body['data'] = {'user_data': self._cloud_config(cluster, node, role)}
                result.append(body)
        return result

    def deployments(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies:
        return ([self._deployment(cluster, node, keys.MASTER_ID) for node in cluster.masters] +
                [self._deployment(cluster, node, keys.WORKER_ID) for node in cluster.workers])

    def ingresses(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies:
        result = [self._ingress(cluster, keys.API_ID, cluster.api_domain, cluster.api_secure_port)]
        if cluster.etcd_domain:
            result.append(self._ingress(cluster, keys.ETCD_ID, cluster.etcd_domain, 2379))
        return result

    def volume_claims(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies:
        if cluster.etcd_storage != clusters.STORAGE_PERSISTENT_VOLUME:
            return []
        result: List[bodies.RawBody] = []
        for node in cluster.masters:
            body = _new_body(references.VOLUME_CLAIMS, cluster, keys.volume_claim_name(cluster, node),
                             labels=dict(keys.labels(cluster, keys.MASTER_ID), node=node.id))
            body['spec'] = {
                'accessModes': ['ReadWriteOnce'],
                'resources': {'requests': {'storage': cluster.etcd_storage_size}},
            }
            result.append(body)
        return result

    def services(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies:
        master = _new_body(references.SERVICES, cluster, keys.MASTER_ID,
                           labels=keys.labels(cluster, keys.MASTER_ID))
        master['spec'] = {
            'type': 'ClusterIP',
            'ports': [
                _port('etcd', 2379),
                _port('api', cluster.api_secure_port),
            ],
            'selector': {'app': keys.MASTER_ID, 'cluster': cluster.id},
        }
        worker = _new_body(references.SERVICES, cluster, keys.WORKER_ID,
                           labels=keys.labels(cluster, keys.WORKER_ID))
        worker['spec'] = {
            'type': 'ClusterIP',
            'ports': [
                _port('http', 30010),
                _port('https', 30011),
            ],
            'selector': {'app': keys.WORKER_ID, 'cluster': cluster.id},
        }
        return [master, worker]

    def _cloud_config(self, cluster: clusters.ClusterSpec, node: clusters.Node, role: str) -> str:
        config = {
            'hostname': f'{role}-{node.id}',
            'role': role,
            'cluster': {'id': cluster.id, 'customer': cluster.customer},
            'kubernetes': {'api': {'domain': cluster.api_domain, 'securePort': cluster.api_secure_port}},
            'etcd': {'domain': cluster.etcd_domain} if cluster.etcd_domain else None,
        }
        return '#cloud-config\n' + yaml.safe_dump(config, default_flow_style=False, sort_keys=True)

    def _deployment(self, cluster: clusters.ClusterSpec, node: clusters.Node, role: str) -> bodies.RawBody:
        pod_labels = dict(keys.labels(cluster, role), node=node.id)
        body = _new_body(references.DEPLOYMENTS, cluster, keys.deployment_name(role, node),
                         labels=pod_labels,
                         annotations={keys.VERSION_ANNOTATION: cluster.version})
        volumes = [
            {'name': 'cloud-config', 'configMap': {'name': keys.config_map_name(cluster, node, role)}},
            {'name': 'images', 'hostPath': {'path': keys.COREOS_IMAGE_DIR}},
            {'name': 'rootfs', 'emptyDir': {}},
            {'name': 'flannel', 'hostPath': {'path': keys.FLANNEL_ENV_PATH_PREFIX}},
        ]
        mounts = [
            {'name': 'cloud-config', 'mountPath': '/cloudconfig/'},
            {'name': 'images', 'mountPath': '/usr/code/images/'},
            {'name': 'rootfs', 'mountPath': '/usr/code/rootfs/'},
        ]
        if role == keys.MASTER_ID:
            volumes.append({'name': 'etcd-data', **self._etcd_volume(cluster, node)})
            mounts.append({'name': 'etcd-data', 'mountPath': '/etc/kubernetes/data/etcd/'})

        pod_spec: Dict[str, Any] = {
            'hostNetwork': True,
            'nodeSelector': {'role': role},
            'serviceAccountName': keys.service_account_name(cluster),
            'volumes': volumes,
            'containers': [
                self._endpoint_updater_container(cluster, role),
                self._kvm_container(cluster, node, role, mounts),
                self._kvm_health_container(cluster),
            ],
        }
        affinity = self._affinity(cluster)
        if affinity is not None:
            pod_spec['affinity'] = affinity

        body['spec'] = {
            'replicas': 1,
            'strategy': {'type': 'Recreate'},
            'selector': {'matchLabels': pod_labels},
            'template': {
                'metadata': {
                    'name': role,
                    'labels': pod_labels,
                    'annotations': {keys.ANNOTATION_IP: '', keys.ANNOTATION_SERVICE: role},
                },
                'spec': pod_spec,
            },
        }
        return body

    def _etcd_volume(self, cluster: clusters.ClusterSpec, node: clusters.Node) -> Dict[str, Any]:
        if cluster.etcd_storage == clusters.STORAGE_PERSISTENT_VOLUME:
            return {'persistentVolumeClaim': {'claimName': keys.volume_claim_name(cluster, node)}}
        return {'hostPath': {'path': keys.etcd_host_path(cluster, node)}}

    def _affinity(self, cluster: clusters.ClusterSpec) -> Optional[Dict[str, Any]]:
        if not self.pod_anti_affinity:
            return None
        return {
            'podAntiAffinity': {
                'requiredDuringSchedulingIgnoredDuringExecution': [{
                    'labelSelector': {
                        'matchExpressions': [{
                            'key': 'app',
                            'operator': 'In',
                            'values': [keys.MASTER_ID, keys.WORKER_ID],
                        }],
                    },
                    'topologyKey': 'kubernetes.io/hostname',
                    'namespaces': [cluster.namespace],
                }],
            },
        }

    def _endpoint_updater_container(self, cluster: clusters.ClusterSpec, role: str) -> Dict[str, Any]:
        command = ' '.join([
            '/opt/k8s-endpoint-updater update',
            f'--provider.bridge.name={keys.network_bridge_name(cluster)}',
            f'--service.kubernetes.cluster.namespace={cluster.namespace}',
            f'--service.kubernetes.cluster.service={role}',
            '--service.kubernetes.inCluster=true',
            '--service.kubernetes.pod.name=${POD_NAME}',
        ])
        return {
            'name': 'k8s-endpoint-updater',
            'image': self.endpoint_updater_image,
            'imagePullPolicy': 'IfNotPresent',
            'command': ['/bin/sh', '-c', command],
            'securityContext': {'privileged': True},
            'env': [_field_env('POD_NAME', 'metadata.name')],
        }

    def _kvm_container(
            self,
            cluster: clusters.ClusterSpec,
            node: clusters.Node,
            role: str,
            mounts: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        quantities = {'cpu': str(node.cpus), 'memory': node.memory}
        return {
            'name': 'k8s-kvm',
            'image': self.kvm_image,
            'imagePullPolicy': 'IfNotPresent',
            'securityContext': {'privileged': True},
            'args': [role],
            'env': [
                {'name': 'CORES', 'value': str(node.cpus)},
                {'name': 'COREOS_VERSION', 'value': self.coreos_version},
                {'name': 'DISK', 'value': f'{node.disk:.0f}G'},
                _field_env('HOSTNAME', 'metadata.name'),
                {'name': 'NETWORK_BRIDGE_NAME', 'value': keys.network_bridge_name(cluster)},
                {'name': 'NETWORK_TAP_NAME', 'value': keys.network_tap_name(cluster)},
                {'name': 'MEMORY', 'value': node.memory},
                {'name': 'ROLE', 'value': role},
                {'name': 'CLOUD_CONFIG_PATH', 'value': keys.CLOUD_CONFIG_PATH},
            ],
            'lifecycle': {'preStop': {'exec': {'command': ['/qemu-shutdown']}}},
            'livenessProbe': {
                'initialDelaySeconds': keys.INITIAL_DELAY_SECONDS,
                'timeoutSeconds': keys.TIMEOUT_SECONDS,
                'periodSeconds': keys.PERIOD_SECONDS,
                'failureThreshold': keys.FAILURE_THRESHOLD,
                'successThreshold': keys.SUCCESS_THRESHOLD,
                'httpGet': {
                    'path': keys.HEALTH_ENDPOINT,
                    'port': keys.LIVENESS_PORT,
                    'host': keys.PROBE_HOST,
                },
            },
            'resources': {'requests': dict(quantities), 'limits': dict(quantities)},
            'volumeMounts': mounts,
        }

    def _kvm_health_container(self, cluster: clusters.ClusterSpec) -> Dict[str, Any]:
        return {
            'name': 'k8s-kvm-health',
            'image': self.kvm_health_image,
            'imagePullPolicy': 'Always',
            'env': [
                {'name': 'LISTEN_ADDRESS', 'value': keys.HEALTH_LISTEN_ADDRESS},
                {'name': 'NETWORK_ENV_FILE_PATH', 'value': keys.network_env_file_path(cluster)},
            ],
            'securityContext': {'privileged': True},
            'volumeMounts': [{'name': 'flannel', 'mountPath': keys.FLANNEL_ENV_PATH_PREFIX}],
        }

    def _ingress(self, cluster: clusters.ClusterSpec, name: str, host: str, port: int) -> bodies.RawBody:
        body = _new_body(references.INGRESSES, cluster, name,
                         labels=keys.labels(cluster, keys.MASTER_ID),
                         annotations={'nginx.ingress.kubernetes.io/ssl-passthrough': 'true'})
        body['spec'] = {
            'tls': [{'hosts': [host]}],
            'rules': [{
                'host': host,
                'http': {
                    'paths': [{
                        'path': '/',
                        'pathType': 'Prefix',
                        'backend': {'service': {'name': keys.MASTER_ID, 'port': {'number': port}}},
                    }],
                },
            }],
        }
        return body


def _new_body(
        resource: references.Resource,
        cluster: clusters.ClusterSpec,
        name: str,
        *,
        labels: Dict[str, str],
        annotations: Optional[Dict[str, str]] = None,
) -> bodies.RawBody:
    body: bodies.RawBody = {
        'apiVersion': resource.api_version,
        'kind': resource.kind or '',
        'metadata': {'name': name, 'namespace': cluster.namespace, 'labels': labels},
    }
    if annotations:
        body['metadata']['annotations'] = annotations
    return body


def _port(name: str, port: int) -> Dict[str, Any]:
    return {'name': name, 'port': port, 'protocol': 'TCP', 'targetPort': port}


def _field_env(name: str, field_path: str) -> Dict[str, Any]:
    return {'name': name, 'valueFrom': {'fieldRef': {'apiVersion': 'v1', 'fieldPath': field_path}}}
