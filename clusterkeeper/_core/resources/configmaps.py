from clusterkeeper._cogs.structs import references
from clusterkeeper._core.resources import listing


class ConfigMapOps(listing.ListedOps):
    """ The cloud-configs of the guest cluster's nodes, one per node. """
    name = 'configmap'
    resource = references.CONFIG_MAPS
    comparable_fields = ('data',)
