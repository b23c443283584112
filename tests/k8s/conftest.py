import pytest

from clusterkeeper._cogs.clients.errors import APINotFoundError


@pytest.fixture()
def call_mock(mocker):
    return mocker.patch('clusterkeeper._cogs.clients.api.call', return_value={})


@pytest.fixture()
def not_found():
    return APINotFoundError({'kind': 'Status', 'code': 404}, status=404)
