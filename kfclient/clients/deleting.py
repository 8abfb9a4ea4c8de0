from typing import Any, Mapping, Optional

from kfclient.clients import api, auth
from kfclient.structs import configuration, references
from kfclient.utilities import typedefs


async def delete_obj(
        *,
        settings: configuration.ClientSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        options: Optional[Mapping[str, Any]] = None,
        context: Optional[auth.APIContext] = None,
        logger: typedefs.Logger,
) -> None:
    """
    Delete an object by its name.

    The options are K8s's ``DeleteOptions`` (``propagationPolicy``,
    ``gracePeriodSeconds``, etc.) and go in the request's body.
    Raises `errors.APINotFoundError` if the object does not exist.
    """
    payload = dict(options or {}, apiVersion='v1', kind='DeleteOptions')
    await api.delete(
        url=resource.get_url(namespace=namespace, name=name),
        payload=payload,
        context=context,
        settings=settings,
        logger=logger,
    )
