from typing import Any, Mapping, Optional

from clusterkeeper._cogs.clients import api, errors
from clusterkeeper._cogs.configs import configuration
from clusterkeeper._cogs.helpers import typedefs
from clusterkeeper._cogs.structs import bodies, references


async def patch_obj(
        *,
        settings: configuration.OperatorSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        patch: Mapping[str, Any],
        logger: typedefs.Logger,
) -> Optional[bodies.RawBody]:
    """
    Patch an object of specific kind with a JSON merge-patch (RFC 7386).

    The dict values are merged field by field, the lists are replaced as a whole,
    and ``None`` values remove the fields.

    Returns the patched body as reported by the server.

    Returns ``None`` if the underlying object is absent, as detected by trying
    to patch it and failing with HTTP 404. This can happen if the object was
    deleted externally during the pass, so that the engine was unaware
    of these changes until the last moment.
    """
    try:
        patched_body: bodies.RawBody = await api.call(
            'patch',
            url=resource.get_url(namespace=namespace, name=name),
            headers={'Content-Type': 'application/merge-patch+json'},
            payload=patch,
            settings=settings,
            logger=logger,
        )
    except errors.APINotFoundError:
        return None
    return patched_body
