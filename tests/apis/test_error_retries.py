import asyncio
from unittest.mock import call

import aiohttp
import pytest

from clusterkeeper._cogs.clients.api import request
from clusterkeeper._cogs.clients.errors import APIClientError, APIConflictError, APIError, \
                                               APIForbiddenError, APINotFoundError, \
                                               APIServerError, APIUnauthorizedError, classify


async def test_regular_errors_escalate_without_retries(
        assert_logs, settings, logger, context):
    context.session.request.side_effect = Exception("boo")

    settings.networking.error_backoffs = [1, 2, 3]
    with pytest.raises(Exception) as err:
        await request('get', '/url', settings=settings, logger=logger, context=context)

    assert str(err.value) == "boo"
    assert context.session.request.call_count == 1
    assert_logs(prohibited=["attempt", "escalating", "retry"])


@pytest.mark.parametrize('status, cls', [
    (400, APIClientError),
    (401, APIUnauthorizedError),
    (403, APIForbiddenError),
    (404, APINotFoundError),
    (409, APIConflictError),
    (499, APIClientError),
])
async def test_client_errors_escalate_without_retries(
        assert_logs, settings, logger, context, response_factory, status, cls):
    context.session.request.return_value = response_factory(status)

    settings.networking.error_backoffs = [1, 2, 3]
    with pytest.raises(cls) as err:
        await request('get', '/url', settings=settings, logger=logger, context=context)

    assert err.value.status == status
    assert context.session.request.call_count == 1
    assert_logs(prohibited=["attempt", "escalating", "retry"])


@pytest.mark.parametrize('status', [500, 503, 599])
async def test_server_errors_escalate_without_retries(
        assert_logs, settings, logger, context, response_factory, status):
    context.session.request.return_value = response_factory(status)

    settings.networking.error_backoffs = [1, 2, 3]
    with pytest.raises(APIServerError) as err:
        await request('get', '/url', settings=settings, logger=logger, context=context)

    assert err.value.status == status
    assert context.session.request.call_count == 1
    assert_logs(prohibited=["attempt", "escalating", "retry"])


async def test_connection_errors_escalate_with_retries(
        assert_logs, settings, logger, context):
    context.session.request.side_effect = aiohttp.ClientConnectionError()

    settings.networking.error_backoffs = [0, 0, 0]
    with pytest.raises(aiohttp.ClientConnectionError):
        await request('get', '/url', settings=settings, logger=logger, context=context)

    assert context.session.request.call_count == 4
    assert_logs([
        "attempt #1/4 failed; will retry",
        "attempt #2/4 failed; will retry",
        "attempt #3/4 failed; will retry",
        "attempt #4/4 failed; escalating",
    ])


async def test_timeout_errors_escalate_with_retries(
        assert_logs, settings, logger, context):
    context.session.request.side_effect = asyncio.TimeoutError()

    settings.networking.error_backoffs = [0]
    with pytest.raises(asyncio.TimeoutError):
        await request('get', '/url', settings=settings, logger=logger, context=context)

    assert context.session.request.call_count == 2


async def test_retried_until_success(
        assert_logs, settings, logger, context, response_factory, sleep):
    context.session.request.side_effect = [
        aiohttp.ClientConnectionError(),
        asyncio.TimeoutError(),
        response_factory(200, {'kind': 'Namespace'}),
    ]

    settings.networking.error_backoffs = [1, 2, 3]
    response = await request('get', '/url', settings=settings, logger=logger, context=context)

    assert response.status == 200
    assert context.session.request.call_count == 3
    assert sleep.call_args_list == [call(1), call(2)]
    assert_logs([
        "attempt #1/4 failed; will retry",
        "attempt #2/4 failed; will retry",
        "attempt #3/4 succeeded",
    ])


async def test_no_retries_when_disabled(settings, logger, context):
    context.session.request.side_effect = aiohttp.ClientConnectionError()

    settings.networking.error_backoffs = []
    with pytest.raises(aiohttp.ClientConnectionError):
        await request('get', '/url', settings=settings, logger=logger, context=context)

    assert context.session.request.call_count == 1


@pytest.mark.parametrize('status, cls', [
    (401, APIUnauthorizedError),
    (404, APINotFoundError),
    (418, APIClientError),
    (502, APIServerError),
    (600, APIError),
])
def test_classification_by_status(status, cls):
    assert classify(status) is cls
