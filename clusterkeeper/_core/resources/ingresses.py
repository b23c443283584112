from clusterkeeper._cogs.structs import references
from clusterkeeper._core.resources import listing


class IngressOps(listing.ListedOps):
    name = 'ingress'
    resource = references.INGRESSES
    comparable_fields = ('spec',)
