"""
The authenticated API sessions, shared by all the API calls of a run.

The session is opened once per run by `authentication()` and is injected
into the requesting functions by the `authenticated` decorator, so that
the resources' operations never pass the credentials around.
"""
import base64
import contextlib
import functools
import ssl
import tempfile
from contextvars import ContextVar
from typing import Any, AsyncIterator, Callable, Dict, Optional, TypeVar, Union, cast

import aiohttp

from clusterkeeper._cogs.helpers import versions
from clusterkeeper._cogs.structs import credentials

# The context of the current `authentication()` block, if any.
context_var: ContextVar["APIContext"] = ContextVar('context_var')

_F = TypeVar('_F', bound=Callable[..., Any])


def authenticated(fn: _F) -> _F:
    """
    Inject the current API context as the ``context=`` kwarg, unless passed explicitly.

    Calling the API outside of any authentication block is a `LoginError`.
    """
    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        if kwargs.get('context') is None:
            try:
                kwargs['context'] = context_var.get()
            except LookupError:
                raise credentials.LoginError("The API is used without authentication.") from None
        return await fn(*args, **kwargs)

    return cast(_F, wrapper)


@contextlib.asynccontextmanager
async def authentication(info: credentials.ConnectionInfo) -> AsyncIterator["APIContext"]:
    context = APIContext(info)
    token = context_var.set(context)
    try:
        yield context
    finally:
        context_var.reset(token)
        await context.close()


class APIContext:
    """
    One HTTP session to one API server, with the server's URL for the requests.

    All the clusters of a run are in the same host cluster, so one session
    (with an unlimited connection pool) serves all the passes concurrently.
    """

    session: aiohttp.ClientSession
    server: str
    default_namespace: Optional[str]

    def __init__(self, info: credentials.ConnectionInfo) -> None:
        super().__init__()
        self.server = info.server
        self.default_namespace = info.default_namespace
        self.session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=0, ssl=make_ssl_context(info)),
            headers=dict(make_headers(info), **{'User-Agent': f'clusterkeeper/{versions.version or "unknown"}'}),
            auth=aiohttp.BasicAuth(info.username, info.password) if info.username and info.password else None,
        )

    async def close(self) -> None:
        await self.session.close()


def make_headers(info: credentials.ConnectionInfo) -> Dict[str, str]:
    """ The ``Authorization`` header for the tokens; the token's scheme is Bearer by default. """
    if info.token:
        return {'Authorization': f'{info.scheme or "Bearer"} {info.token}'}
    elif info.scheme:
        return {'Authorization': info.scheme}
    else:
        return {}


def make_ssl_context(info: credentials.ConnectionInfo) -> ssl.SSLContext:
    context = ssl.create_default_context(
        purpose=ssl.Purpose.SERVER_AUTH,
        cafile=info.ca_path,
        cadata=decode_to_pem(info.ca_data) if info.ca_data is not None else None,
    )

    # SSL accepts the client certificates only as files. The temporary files
    # are created only when needed: the filesystem can be read-only.
    with contextlib.ExitStack() as stack:
        certfile = info.certificate_path or _dump_pem(stack, info.certificate_data)
        keyfile = info.private_key_path or _dump_pem(stack, info.private_key_data)
        if certfile and keyfile:
            context.load_cert_chain(certfile=certfile, keyfile=keyfile)

    if info.insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def _dump_pem(stack: contextlib.ExitStack, data: Optional[bytes]) -> Optional[str]:
    if not data:
        return None
    file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
    file.write(decode_to_pem(data).encode('ascii'))
    return file.name


def decode_to_pem(data: Union[str, bytes]) -> str:
    """ Accept both PEM texts and base64-encoded PEMs (as in the kubeconfigs). """
    match data:
        case str() if data.startswith('-----BEGIN '):
            return data
        case bytes() if data.startswith(b'-----BEGIN '):
            return data.decode('ascii')
        case _:
            return base64.b64decode(data).decode('ascii')
