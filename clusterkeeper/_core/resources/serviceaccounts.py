from clusterkeeper._cogs.structs import references
from clusterkeeper._core.resources import listing


class ServiceAccountOps(listing.ListedOps):
    name = 'serviceaccount'
    resource = references.SERVICE_ACCOUNTS
    comparable_fields = ('metadata.labels',)
