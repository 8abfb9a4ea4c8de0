from typing import List, Mapping, Optional, Tuple

from kfclient.clients import api, auth
from kfclient.structs import bodies, configuration, references
from kfclient.utilities import typedefs


async def read_obj(
        *,
        settings: configuration.ClientSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        params: Optional[Mapping[str, str]] = None,
        context: Optional[auth.APIContext] = None,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Read one specific object by its name.

    Raises `errors.APINotFoundError` if the object does not exist.
    """
    body: bodies.RawBody = await api.get(
        url=resource.get_url(namespace=namespace, name=name),
        params=params,
        context=context,
        settings=settings,
        logger=logger,
    )
    return body


async def list_objs(
        *,
        settings: configuration.ClientSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        params: Optional[Mapping[str, str]] = None,
        context: Optional[auth.APIContext] = None,
        logger: typedefs.Logger,
) -> Tuple[List[bodies.RawBody], Optional[str]]:
    """
    List the objects of specific resource type.

    The selectors, if any, go to the query params as is. The API server can
    ignore some of the field selectors for some resources, so the results
    should not be assumed to be filtered by them.

    The list items usually come without ``kind`` & ``apiVersion``;
    they are restored from the list's own kind & API version.
    """
    rsp = await api.get(
        url=resource.get_url(namespace=namespace),
        params=params,
        context=context,
        settings=settings,
        logger=logger,
    )

    items: List[bodies.RawBody] = []
    resource_version = rsp.get('metadata', {}).get('resourceVersion', None)
    for item in rsp.get('items') or []:
        if 'kind' in rsp:
            item.setdefault('kind', rsp['kind'][:-4] if rsp['kind'][-4:] == 'List' else rsp['kind'])
        if 'apiVersion' in rsp:
            item.setdefault('apiVersion', rsp['apiVersion'])
        items.append(item)

    return items, resource_version
