"""
The update gate of the workload kinds (deployments).

The workloads of a guest cluster are its virtual machines: updating one means
restarting one node. To keep the cluster alive, no more than one workload
is updated per pass, and only when all the workloads are fully rolled out:
i.e. after the previous update has settled.
"""
from typing import Callable, Optional, Sequence

from clusterkeeper._cogs.structs import bodies, dicts
from clusterkeeper._core.resources import base

# The replica counters which must all agree for a workload to be stable.
STABILITY_FIELDS = (
    'status.availableReplicas',
    'status.readyReplicas',
    'status.replicas',
    'status.updatedReplicas',
)


def is_stable(body: bodies.RawBody) -> bool:
    """
    Check if the workload is fully rolled out. The missing counters are zeroes.

    Note: zero replicas everywhere is also stable: e.g. a freshly created
    deployment with no status yet, or a deliberately scaled-down one.
    """
    counters = {dicts.resolve(body, field, default=0) or 0 for field in STABILITY_FIELDS}
    return len(counters) == 1


def select_update(
        cause: base.Cause,
        current: Sequence[bodies.RawBody],
        desired: Sequence[bodies.RawBody],
        *,
        is_modified: Callable[[bodies.RawBody, bodies.RawBody], bool],
        kind: str,
) -> Optional[bodies.RawBody]:
    """
    Select at most one desired object to be updated in this pass.

    Nothing is selected if the updates are not allowed for the pass,
    or if any of the current objects is not stable. Otherwise, the first
    modified object in the order of the current state is selected.
    """
    if not cause.updates_allowed:
        cause.logger.debug(f"{kind}: not computing the update: the updates are not allowed")
        return None

    for current_obj in current:
        if not is_stable(current_obj):
            cause.logger.info(f"{kind}: cannot update any {kind}: "
                              f"{bodies.get_name(current_obj)!r} is not stable")
            return None

    for current_obj in current:
        name = bodies.get_name(current_obj)
        desired_obj = bodies.find_by_name(desired, name)
        if desired_obj is None:
            cause.logger.warning(f"{kind}: not updating {name!r}: it is not desired")
            continue
        if not is_modified(current_obj, desired_obj):
            cause.logger.debug(f"{kind}: not updating {name!r}: it is up to date")
            continue
        cause.logger.info(f"{kind}: selected {name!r} for the update")
        return desired_obj

    return None
