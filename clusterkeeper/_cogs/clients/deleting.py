from clusterkeeper._cogs.clients import api, errors
from clusterkeeper._cogs.configs import configuration
from clusterkeeper._cogs.helpers import typedefs
from clusterkeeper._cogs.structs import references


async def delete_obj(
        *,
        settings: configuration.OperatorSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        logger: typedefs.Logger,
) -> bool:
    """
    Delete an object with its dependants (the foreground cascading deletion).

    Returns ``False`` if the object was already absent, ``True`` otherwise.
    The deletion is not awaited: the object can exist for some time
    (e.g. the namespaces go through the "Terminating" phase).
    """
    try:
        await api.call(
            'delete',
            url=resource.get_url(namespace=namespace, name=name),
            payload={'propagationPolicy': 'Foreground'},
            settings=settings,
            logger=logger,
        )
    except errors.APINotFoundError:
        return False
    return True
