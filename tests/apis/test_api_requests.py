import pytest

from clusterkeeper._cogs.clients import api, auth
from clusterkeeper._cogs.clients.errors import APIError, APIServerError
from clusterkeeper._cogs.structs.credentials import LoginError


async def test_relative_urls_are_joined_with_the_server(settings, logger, context):
    await api.request('get', '/api/v1/namespaces', settings=settings, logger=logger, context=context)
    assert context.session.request.call_count == 1
    kwargs = context.session.request.call_args[1]
    assert kwargs['method'] == 'get'
    assert kwargs['url'] == 'https://fake-host:443/api/v1/namespaces'


async def test_absolute_urls_are_used_as_is(settings, logger, context):
    await api.request('get', 'https://other-host/x', settings=settings, logger=logger, context=context)
    assert context.session.request.call_args[1]['url'] == 'https://other-host/x'


async def test_payload_and_headers_are_passed(settings, logger, context):
    await api.request('patch', '/x', payload={'a': 'b'}, headers={'Content-Type': 'x/y'},
                      settings=settings, logger=logger, context=context)
    kwargs = context.session.request.call_args[1]
    assert kwargs['json'] == {'a': 'b'}
    assert kwargs['headers'] == {'Content-Type': 'x/y'}


async def test_timeouts_are_taken_from_settings(settings, logger, context):
    settings.networking.request_timeout = 12
    settings.networking.connect_timeout = 3
    await api.request('get', '/x', settings=settings, logger=logger, context=context)
    timeout = context.session.request.call_args[1]['timeout']
    assert timeout.total == 12
    assert timeout.sock_connect == 3


async def test_calls_return_the_json_payloads(mocker, settings, logger, response_factory):
    mocker.patch.object(api, 'request', return_value=response_factory(200, {'kind': 'Namespace'}))
    result = await api.call('get', '/x', settings=settings, logger=logger)
    assert result == {'kind': 'Namespace'}


async def test_status_payloads_are_kept_in_errors(settings, logger, context, response_factory):
    status = {'kind': 'Status', 'code': 500, 'reason': 'InternalError', 'message': 'etcd is down'}
    context.session.request.return_value = response_factory(500, status)
    settings.networking.error_backoffs = []
    with pytest.raises(APIServerError) as err:
        await api.request('get', '/x', settings=settings, logger=logger, context=context)
    assert err.value.status == 500
    assert err.value.reason == 'InternalError'
    assert err.value.message == 'etcd is down'
    assert str(err.value) == 'etcd is down'


async def test_non_status_payloads_are_not_kept_in_errors(settings, logger, context, response_factory):
    context.session.request.return_value = response_factory(500, {'kind': 'Secret', 'data': 'x'})
    settings.networking.error_backoffs = []
    with pytest.raises(APIError) as err:
        await api.request('get', '/x', settings=settings, logger=logger, context=context)
    assert err.value.message is None
    assert err.value.status_obj is None
    assert str(err.value) == 'HTTP 500'


async def test_unauthenticated_requests_fail(settings, logger):
    with pytest.raises(LoginError):
        await api.request('get', '/x', settings=settings, logger=logger)


async def test_authenticated_requests_use_the_context_var(settings, logger, context):
    token = auth.context_var.set(context)
    try:
        await api.request('get', '/x', settings=settings, logger=logger)
    finally:
        auth.context_var.reset(token)
    assert context.session.request.call_count == 1
