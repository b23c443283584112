"""
The workloads of a guest cluster: one deployment per master or worker node.

Unlike other kinds, the deployments are updated cautiously: one at a time,
and only when all of them are stable (see :mod:`gating`). The version
annotation is compared in addition to the pod spec, so that a new version
bundle rolls the nodes even if their pods did not change.
"""
from typing import Sequence

from clusterkeeper._cogs.structs import bodies, references
from clusterkeeper._core.resources import base, gating, listing

# The version bundle's version, as put to the deployments by the templates.
VERSION_ANNOTATION = 'clusterkeeper.dev/version-bundle-version'


class DeploymentOps(listing.ListedOps):
    name = 'deployment'
    resource = references.DEPLOYMENTS
    comparable_fields = (
        ('metadata', 'annotations', VERSION_ANNOTATION),
        'spec.template.spec',
    )

    def select_updates(
            self,
            cause: base.Cause,
            current: Sequence[bodies.RawBody],
            desired: Sequence[bodies.RawBody],
    ) -> Sequence[bodies.RawBody]:
        selected = gating.select_update(cause, current, desired,
                                        is_modified=self.is_modified, kind=self.name)
        return [] if selected is None else [selected]
