from typing import Mapping, Optional, cast

from kfclient.clients import api, auth
from kfclient.structs import bodies, configuration, references
from kfclient.utilities import typedefs


async def create_obj(
        *,
        settings: configuration.ClientSettings,
        resource: references.Resource,
        namespace: references.Namespace = None,
        name: Optional[str] = None,
        body: Optional[bodies.RawBody] = None,
        params: Optional[Mapping[str, str]] = None,
        context: Optional[auth.APIContext] = None,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Create a resource.

    Raises `errors.APIConflictError` if an object with the same name exists.
    """
    body = body if body is not None else {}
    if namespace is not None:
        body.setdefault('metadata', {}).setdefault('namespace', namespace)
    if name is not None:
        body.setdefault('metadata', {}).setdefault('name', name)

    namespace = cast(references.Namespace, (body.get('metadata') or {}).get('namespace'))
    created_body: bodies.RawBody = await api.post(
        url=resource.get_url(namespace=namespace),
        payload=body,
        params=params,
        context=context,
        settings=settings,
        logger=logger,
    )
    return created_body
