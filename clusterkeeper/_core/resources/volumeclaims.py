from clusterkeeper._cogs.structs import references
from clusterkeeper._core.resources import listing


class VolumeClaimOps(listing.ListedOps):
    """
    The persistent storage of the guest cluster's etcd.

    The claims are never updated: their specs are immutable once bound,
    and the data in them must survive the version upgrades.
    """
    name = 'pvc'
    resource = references.VOLUME_CLAIMS
    comparable_fields = ()
