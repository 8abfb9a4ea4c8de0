from typing import Mapping, Optional

from kfclient.clients import api, auth
from kfclient.structs import bodies, configuration, references
from kfclient.utilities import typedefs


async def replace_obj(
        *,
        settings: configuration.ClientSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        body: bodies.RawBody,
        params: Optional[Mapping[str, str]] = None,
        context: Optional[auth.APIContext] = None,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Replace an existing object with the new body as a whole.

    Unlike patching, the whole object is sent. If the body carries
    ``metadata.resourceVersion``, the API server rejects the replacement
    with `errors.APIConflictError` when the object was changed since then.
    Raises `errors.APINotFoundError` if the object does not exist.
    """
    replaced_body: bodies.RawBody = await api.put(
        url=resource.get_url(namespace=namespace, name=name),
        payload=body,
        params=params,
        context=context,
        settings=settings,
        logger=logger,
    )
    return replaced_body
