import aiohttp.web
import pytest

from kfclient.clients.errors import APIError, APINotFoundError
from kfclient.clients.fetching import read_obj


async def test_when_present(
        resp_mocker, aresponses, hostname, resource, namespace, settings, logger,
        enforced_context):

    get_mock = resp_mocker(return_value=aiohttp.web.json_response({'a': 'b'}))
    aresponses.add(hostname, resource.get_url(namespace=namespace, name='name1'), 'get', get_mock)

    result = await read_obj(resource=resource, namespace=namespace, name='name1',
                            context=enforced_context, settings=settings, logger=logger)

    assert result == {'a': 'b'}
    assert get_mock.called
    assert get_mock.call_count == 1


async def test_params_go_to_the_query(
        resp_mocker, aresponses, hostname, namespaced_resource, settings, logger,
        enforced_context):

    get_mock = resp_mocker(return_value=aiohttp.web.json_response({'a': 'b'}))
    url = namespaced_resource.get_url(namespace='ns', name='name1')
    aresponses.add(hostname, url, 'get', get_mock)

    await read_obj(resource=namespaced_resource, namespace='ns', name='name1',
                   params={'resourceVersion': '0'},
                   context=enforced_context, settings=settings, logger=logger)

    assert get_mock.queries[0] == {'resourceVersion': '0'}


async def test_when_absent_with_status_payload(
        resp_mocker, aresponses, hostname, resource, namespace, settings, logger,
        enforced_context):

    status = {'kind': 'Status', 'code': 404, 'reason': 'NotFound', 'message': 'not here'}
    get_mock = resp_mocker(return_value=aiohttp.web.json_response(status, status=404))
    aresponses.add(hostname, resource.get_url(namespace=namespace, name='name1'), 'get', get_mock)

    with pytest.raises(APINotFoundError) as e:
        await read_obj(resource=resource, namespace=namespace, name='name1',
                       context=enforced_context, settings=settings, logger=logger)

    assert e.value.status == 404
    assert e.value.code == 404
    assert e.value.reason == 'NotFound'
    assert e.value.message == 'not here'


@pytest.mark.parametrize('status', [400, 401, 403, 500, 666])
async def test_raises_api_errors(
        resp_mocker, aresponses, hostname, status, resource, namespace, settings, logger,
        enforced_context):

    get_mock = resp_mocker(return_value=aresponses.Response(status=status))
    aresponses.add(hostname, resource.get_url(namespace=namespace, name='name1'), 'get', get_mock)

    with pytest.raises(APIError) as e:
        await read_obj(resource=resource, namespace=namespace, name='name1',
                       context=enforced_context, settings=settings, logger=logger)
    assert e.value.status == status
