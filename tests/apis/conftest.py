from unittest.mock import AsyncMock, Mock

import aiohttp
import pytest


class FakeResponse:
    """ Just enough of `aiohttp.ClientResponse` for the API calls. """

    def __init__(self, status=200, payload=None):
        super().__init__()
        self.status = status
        self.payload = payload if payload is not None else {}

    async def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientResponseError(Mock(), (), status=self.status)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


@pytest.fixture()
def response_factory():
    return FakeResponse


@pytest.fixture()
def context():
    context = Mock(server='https://fake-host:443', default_namespace=None)
    context.session.request = AsyncMock(return_value=FakeResponse(200, {}))
    return context


@pytest.fixture(autouse=True)
def sleep(mocker):
    """Do not let it actually sleep, even if it is a 0-sleep."""
    return mocker.patch('asyncio.sleep')
