from typing import Any, Mapping, Optional

import aiohttp

from kfclient.clients import auth, errors
from kfclient.structs import configuration
from kfclient.utilities import typedefs


@auth.authenticated
async def request(
        method: str,
        url: str,  # relative to the server/api root.
        *,
        settings: configuration.ClientSettings,
        payload: Optional[object] = None,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        context: Optional[auth.APIContext] = None,  # injected by the decorator
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    """
    Perform a single request and check the response for the K8s API errors.

    There are no retries on errors of any kind: it is the callers' decision
    on how to react to the failed requests.
    """
    if context is None:  # for type-checking!
        raise RuntimeError("API instance is not injected by the decorator.")

    if '://' not in url:
        url = context.server.rstrip('/') + '/' + url.lstrip('/')

    if timeout is None:
        timeout = aiohttp.ClientTimeout(
            total=settings.networking.request_timeout,
            sock_connect=settings.networking.connect_timeout,
        )

    logger.debug(f"Requesting: {method.upper()} {url}")
    response = await context.session.request(
        method=method,
        url=url,
        json=payload,
        params=params,
        headers=headers,
        timeout=timeout,
    )
    try:
        await errors.check_response(response)  # but do not parse it!
    except errors.APIError as e:
        logger.debug(f"Request failed: {method.upper()} {url} -> {e.status} {e.message or ''}")
        raise
    return response


async def get(
        url: str,  # relative to the server/api root.
        *,
        settings: configuration.ClientSettings,
        params: Optional[Mapping[str, str]] = None,
        context: Optional[auth.APIContext] = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='get',
        url=url,
        params=params,
        context=context,
        settings=settings,
        logger=logger,
    )
    async with response:
        return await response.json()


async def post(
        url: str,  # relative to the server/api root.
        *,
        settings: configuration.ClientSettings,
        payload: Optional[object] = None,
        params: Optional[Mapping[str, str]] = None,
        context: Optional[auth.APIContext] = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='post',
        url=url,
        payload=payload,
        params=params,
        context=context,
        settings=settings,
        logger=logger,
    )
    async with response:
        return await response.json()


async def put(
        url: str,  # relative to the server/api root.
        *,
        settings: configuration.ClientSettings,
        payload: Optional[object] = None,
        params: Optional[Mapping[str, str]] = None,
        context: Optional[auth.APIContext] = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='put',
        url=url,
        payload=payload,
        params=params,
        context=context,
        settings=settings,
        logger=logger,
    )
    async with response:
        return await response.json()


async def delete(
        url: str,  # relative to the server/api root.
        *,
        settings: configuration.ClientSettings,
        payload: Optional[object] = None,
        params: Optional[Mapping[str, str]] = None,
        context: Optional[auth.APIContext] = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='delete',
        url=url,
        payload=payload,
        params=params,
        context=context,
        settings=settings,
        logger=logger,
    )
    async with response:
        return await response.json()
