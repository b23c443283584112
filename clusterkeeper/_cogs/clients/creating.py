from typing import Optional

from clusterkeeper._cogs.clients import api
from clusterkeeper._cogs.configs import configuration
from clusterkeeper._cogs.helpers import typedefs
from clusterkeeper._cogs.structs import bodies, references


async def create_obj(
        *,
        settings: configuration.OperatorSettings,
        resource: references.Resource,
        namespace: references.Namespace = None,
        body: bodies.RawBody,
        logger: typedefs.Logger,
) -> Optional[bodies.RawBody]:
    """
    Create an object of a resource kind; the namespace is taken from the body if not set.
    """
    if namespace is None and resource.namespaced:
        namespace = body.get('metadata', {}).get('namespace')
    created_body: bodies.RawBody = await api.call(
        'post',
        url=resource.get_url(namespace=namespace),
        payload=body,
        settings=settings,
        logger=logger,
    )
    return created_body
