import asyncio
from typing import Any, Mapping, Optional

import aiohttp

from clusterkeeper._cogs.clients import auth, errors
from clusterkeeper._cogs.configs import configuration
from clusterkeeper._cogs.helpers import typedefs


@auth.authenticated
async def request(
        method: str,
        url: str,  # relative to the server/api root.
        *,
        settings: configuration.OperatorSettings,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        context: Optional[auth.APIContext] = None,  # injected by the decorator
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    """
    Send a request, retrying it only if the API is not reachable.

    The API's own errors (including 5xx & 409) are raised on the first response:
    they are retried by the operations' decorator, once per operation,
    so that the attempts of an operation are not multiplied by the requests'.
    """
    if context is None:  # for type-checking!
        raise RuntimeError("API context is not injected by the decorator.")

    url = url if '://' in url else f"{context.server.rstrip('/')}/{url.lstrip('/')}"
    timeout = timeout if timeout is not None else aiohttp.ClientTimeout(
        total=settings.networking.request_timeout,
        sock_connect=settings.networking.connect_timeout,
    )

    what = f"{method.upper()} {url}"
    delays = list(settings.networking.error_backoffs)
    attempts = len(delays) + 1
    for attempt in range(1, attempts + 1):
        try:
            response = await context.session.request(
                method=method,
                url=url,
                json=payload,
                headers=headers,
                timeout=timeout,
            )
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            if attempt == attempts:
                logger.error(f"Request attempt #{attempt}/{attempts} failed; escalating: {what} -> {e!r}")
                raise
            logger.error(f"Request attempt #{attempt}/{attempts} failed; will retry: {what} -> {e!r}")
            await asyncio.sleep(delays[attempt - 1])
        else:
            await errors.check_response(response)  # but do not parse it!
            if attempt > 1:
                logger.debug(f"Request attempt #{attempt}/{attempts} succeeded: {what}")
            return response

    raise RuntimeError("Broken retrying loop.")  # impossible, but needed for type-checking.


async def call(
        method: str,
        url: str,  # relative to the server/api root.
        *,
        settings: configuration.OperatorSettings,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        logger: typedefs.Logger,
) -> Any:
    """
    Perform a request and return its parsed JSON payload (the closed response).

    All the API calls of the engine return either an object, or a list
    of objects, or a ``Status`` -- always in JSON, never as a stream.
    """
    response = await request(
        method=method,
        url=url,
        payload=payload,
        headers=headers,
        settings=settings,
        logger=logger,
    )
    async with response:
        return await response.json()
