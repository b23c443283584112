from typing import List, Optional

from clusterkeeper._cogs.clients import api, errors
from clusterkeeper._cogs.configs import configuration
from clusterkeeper._cogs.helpers import typedefs
from clusterkeeper._cogs.structs import bodies, references


async def read_obj(
        *,
        settings: configuration.OperatorSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        logger: typedefs.Logger,
) -> Optional[bodies.RawBody]:
    """
    Read one specific object, or ``None`` if it does not exist.

    The absence of an object is a valid state for the reconcilers
    (e.g. not yet created, or already deleted), not an error.
    """
    try:
        body: bodies.RawBody = await api.call(
            'get',
            url=resource.get_url(namespace=namespace, name=name),
            settings=settings,
            logger=logger,
        )
    except errors.APINotFoundError:
        return None
    return body


async def list_objs(
        *,
        settings: configuration.OperatorSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        logger: typedefs.Logger,
) -> List[bodies.RawBody]:
    """
    List the objects of specific resource type, in the order as listed by the API.

    If the namespace itself is absent, there are no objects in it (not an error).
    """
    try:
        rsp = await api.call(
            'get',
            url=resource.get_url(namespace=namespace),
            settings=settings,
            logger=logger,
        )
    except errors.APINotFoundError:
        return []

    # The items of the lists have no kind & apiVersion, but the templates have them.
    items: List[bodies.RawBody] = []
    for item in rsp.get('items', []):
        if 'kind' in rsp:
            item.setdefault('kind', rsp['kind'][:-4] if rsp['kind'][-4:] == 'List' else rsp['kind'])
        if 'apiVersion' in rsp:
            item.setdefault('apiVersion', rsp['apiVersion'])
        items.append(item)
    return items
