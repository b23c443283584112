from clusterkeeper._cogs.structs import references
from clusterkeeper._core.resources import listing


class ServiceOps(listing.ListedOps):
    name = 'service'
    resource = references.SERVICES

    # Not the whole spec: the cluster IPs and other fields are assigned by the server.
    comparable_fields = ('spec.ports', 'spec.selector')
