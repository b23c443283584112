"""
Errors of the orchestration API, classified by the HTTP status of a response.

The engine treats few of them specially: an absent object is a valid state
for the reconcilers; the write conflicts and the server-side failures are
transient and retried by the operations' decorator (`retrying.wrap`);
everything else is escalated as is.

The network-level errors (connections, SSL, timeouts) are not wrapped:
they are the errors of aiohttp, not of the API. The original aiohttp error
is chained as the cause of every API error.
"""
import json
from typing import Any, Dict, Mapping, Optional, Type

import aiohttp

# The ``Status`` object of the API, as returned in the failed responses.
RawStatus = Mapping[str, Any]


class APIError(Exception):

    def __init__(self, status_obj: Optional[RawStatus], *, status: int) -> None:
        self.status = status
        self.status_obj = status_obj
        super().__init__(self.message or f"HTTP {status}", status_obj)

    @property
    def message(self) -> Optional[str]:
        return self.status_obj.get('message') if self.status_obj else None

    @property
    def reason(self) -> Optional[str]:
        """ A machine-readable reason, e.g. ``AlreadyExists`` or ``Conflict``. """
        return self.status_obj.get('reason') if self.status_obj else None


class APIClientError(APIError):
    pass


class APIServerError(APIError):
    pass


class APIUnauthorizedError(APIClientError):
    pass


class APIForbiddenError(APIClientError):
    pass


class APINotFoundError(APIClientError):
    pass


class APIConflictError(APIClientError):
    pass


_CLASSES_BY_STATUS: Dict[int, Type[APIError]] = {
    401: APIUnauthorizedError,
    403: APIForbiddenError,
    404: APINotFoundError,
    409: APIConflictError,
}


def classify(status: int) -> Type[APIError]:
    if status in _CLASSES_BY_STATUS:
        return _CLASSES_BY_STATUS[status]
    elif 400 <= status < 500:
        return APIClientError
    elif 500 <= status < 600:
        return APIServerError
    else:
        return APIError


async def check_response(response: aiohttp.ClientResponse) -> None:
    """ Raise the classified error for a failed response, do nothing otherwise. """
    if response.status < 400:
        return

    # The body must be read before raise_for_status() releases the response.
    status_obj = await _read_status(response)
    cls = classify(response.status)
    try:
        response.raise_for_status()
    except aiohttp.ClientResponseError as e:
        raise cls(status_obj, status=response.status) from e


async def _read_status(response: aiohttp.ClientResponse) -> Optional[RawStatus]:
    try:
        payload = await response.json()
    except (json.JSONDecodeError, aiohttp.ContentTypeError, aiohttp.ClientConnectionError):
        return None

    # Other payloads are not kept: they can contain the objects' sensitive data.
    if isinstance(payload, Mapping) and payload.get('kind') == 'Status':
        return payload
    return None
