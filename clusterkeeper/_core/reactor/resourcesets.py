"""
Resource sets: the ordered chains of reconcilers of one engine generation.

A resource set reconciles all the sub-resources of one cluster in one pass,
strictly sequentially and in a fixed order: the namespace goes first,
since all other resources live in it. If a reconciler cancels the pass
(e.g. the namespace is being deleted), the remaining ones are not started.
"""
from typing import Any, Optional, Sequence

from typing_extensions import Protocol

from clusterkeeper._cogs.configs import configuration
from clusterkeeper._cogs.structs import bodies, bundles, clusters
from clusterkeeper._core.actions import execution, loggers, metering, retrying
from clusterkeeper._core.resources import base, configmaps, deployments, ingresses, namespaces, \
                                         serviceaccounts, services, volumeclaims


class DesiredStates(Protocol):
    """ The builders of the desired state of every kind, as provided by a generation. """

    def namespace(self, cluster: clusters.ClusterSpec) -> bodies.RawBody: ...

    def service_accounts(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies: ...

    def config_maps(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies: ...

    def deployments(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies: ...

    def ingresses(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies: ...

    def volume_claims(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies: ...

    def services(self, cluster: clusters.ClusterSpec) -> bodies.RawBodies: ...


class ResourceSet:

    def __init__(
            self,
            *,
            name: str,
            bundle: bundles.Bundle,
            resources: Sequence[base.CRUDResource],
            settings: configuration.OperatorSettings,
    ) -> None:
        super().__init__()
        self.name = name
        self.bundle = bundle
        self.resources = tuple(resources)
        self.settings = settings

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.name!r} {self.bundle.version}>'

    def handles(self, cluster: clusters.ClusterSpec) -> bool:
        """ Exact match of the versions: no normalisation, no ranges. """
        return self.bundle.handles(cluster.version)

    def init_cause(self, cluster: clusters.ClusterSpec, reason: base.Reason) -> base.Cause:
        return base.Cause(
            cluster=cluster,
            reason=reason,
            updates_allowed=self.settings.updating.enabled,
            settings=self.settings,
            logger=loggers.ClusterLogger(cluster=cluster),
        )

    async def reconcile(
            self,
            cluster: clusters.ClusterSpec,
            *,
            reason: base.Reason = base.Reason.UPSERT,
    ) -> base.Verdict:
        cause = self.init_cause(cluster, reason)
        cause.logger.debug(f"Starting the {reason} pass with {self.name} {self.bundle.version}.")
        verdict = base.Verdict.PROCEED
        for resource in self.resources:
            verdict = await resource.reconcile(cause)
            if verdict is base.Verdict.CANCELLED:
                cause.logger.info(f"The {reason} pass is cancelled by the {resource.name}.")
                break
        else:
            cause.logger.debug(f"The {reason} pass is finished.")
        if self.settings.metering.enabled:
            metering.count_pass(name=self.name, verdict=verdict)
        return verdict


def make_resource_set(
        *,
        name: str,
        bundle: bundles.Bundle,
        templates: DesiredStates,
        settings: Optional[configuration.OperatorSettings] = None,
) -> ResourceSet:
    """
    Build a resource set with all the reconcilers, retried and measured.

    The metering is outside of the retries: the durations include the retries,
    and the outcomes are counted once per operation.
    """
    settings = settings if settings is not None else configuration.OperatorSettings()
    if not name:
        raise execution.InvalidConfigError("The resource set's name must not be empty.")
    try:
        bundle.validate()
    except bundles.InvalidBundleError as e:
        raise execution.InvalidConfigError(f"The resource set {name!r} has a bad bundle: {e}") from e

    all_ops: Sequence[base.CRUDOps[Any]] = [
        namespaces.NamespaceOps(templates.namespace),
        serviceaccounts.ServiceAccountOps(templates.service_accounts),
        configmaps.ConfigMapOps(templates.config_maps),
        deployments.DeploymentOps(templates.deployments),
        ingresses.IngressOps(templates.ingresses),
        volumeclaims.VolumeClaimOps(templates.volume_claims),
        services.ServiceOps(templates.services),
    ]
    resources = [
        base.CRUDResource(metering.wrap(retrying.wrap(ops, settings=settings), name=name, settings=settings))
        for ops in all_ops
    ]
    return ResourceSet(name=name, bundle=bundle, resources=resources, settings=settings)
