"""
The top-level entry point of the engine: routing the clusters to the generations.

The controller knows all the engine generations (as resource sets) and routes
every cluster specification to the only one that handles its version.
It is the controller's caller who decides when to reconcile which clusters:
e.g. the command line on demand, or an outer operator on every change.
"""
import asyncio
import dataclasses
import logging
from typing import Iterable, List, Optional, Sequence

from clusterkeeper._cogs.configs import configuration
from clusterkeeper._cogs.structs import bundles, clusters
from clusterkeeper._core.actions import execution
from clusterkeeper._core.reactor import resourcesets
from clusterkeeper._core.resources import base

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class PassResult:
    """
    The outcome of one pass of one cluster in a batch.

    The verdict is ``None`` if the pass was skipped (no generation handles
    the cluster's version) or has failed (then, the error is set).
    """
    cluster: clusters.ClusterSpec
    verdict: Optional[base.Verdict] = None
    error: Optional[Exception] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class Controller:

    def __init__(
            self,
            resource_sets: Iterable[resourcesets.ResourceSet],
            *,
            settings: Optional[configuration.OperatorSettings] = None,
            strict: bool = False,
    ) -> None:
        super().__init__()
        self.resource_sets = tuple(resource_sets)
        self.settings = settings if settings is not None else configuration.OperatorSettings()
        self.strict = strict

    def bundles(self) -> Sequence[bundles.Bundle]:
        return [resource_set.bundle for resource_set in self.resource_sets]

    def select(self, cluster: clusters.ClusterSpec) -> resourcesets.ResourceSet:
        selected = [rs for rs in self.resource_sets if rs.handles(cluster)]
        if not selected:
            raise execution.NoResourceSetError(
                f"No resource set handles the version {cluster.version!r} of {cluster.id}.")
        if len(selected) > 1:
            names = ', '.join(repr(rs.name) for rs in selected)
            raise execution.AmbiguousResourceSetError(
                f"Many resource sets handle the version {cluster.version!r} of {cluster.id}: {names}.")
        return selected[0]

    async def reconcile(
            self,
            cluster: clusters.ClusterSpec,
            *,
            reason: base.Reason = base.Reason.UPSERT,
    ) -> Optional[base.Verdict]:
        """
        Run one pass of one cluster with the generation that handles its version.

        In the non-strict mode, the clusters of unknown versions are skipped
        with a warning: they are expected to be served by other engines
        (e.g. by newer or older deployments of the same engine).
        """
        try:
            resource_set = self.select(cluster)
        except execution.NoResourceSetError as e:
            if self.strict:
                raise
            logger.warning(f"Skipping the {reason} pass: {e}")
            return None
        return await resource_set.reconcile(cluster, reason=reason)

    async def finalize(self, cluster: clusters.ClusterSpec) -> Optional[base.Verdict]:
        """ Delete all the sub-resources of a deleted cluster. """
        return await self.reconcile(cluster, reason=base.Reason.DELETE)

    async def run(
            self,
            clusters_: Iterable[clusters.ClusterSpec],
            *,
            reason: base.Reason = base.Reason.UPSERT,
    ) -> List[PassResult]:
        """
        Run the passes of many clusters concurrently, up to the worker limit.

        The failure of one pass does not affect others. The results are
        in the same order as the clusters, with the failures in them.
        """
        limit = self.settings.batching.worker_limit
        if limit is not None and limit < 1:
            raise execution.InvalidConfigError(f"The worker limit must be positive or None, got {limit!r}.")
        semaphore = asyncio.Semaphore(limit) if limit is not None else None

        async def run_one(cluster: clusters.ClusterSpec) -> PassResult:
            if semaphore is None:
                return await self._run_one(cluster, reason=reason)
            async with semaphore:
                return await self._run_one(cluster, reason=reason)

        return list(await asyncio.gather(*[run_one(cluster) for cluster in clusters_]))

    async def _run_one(self, cluster: clusters.ClusterSpec, *, reason: base.Reason) -> PassResult:
        try:
            verdict = await self.reconcile(cluster, reason=reason)
        except Exception as e:
            logger.error(f"The {reason} pass of {cluster.id} has failed: {e!r}")
            return PassResult(cluster=cluster, error=e)
        return PassResult(cluster=cluster, verdict=verdict)
