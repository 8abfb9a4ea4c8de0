import aiohttp
import pytest

from kfclient.clients.api import request
from kfclient.clients.errors import APIConflictError, APIError, APIForbiddenError, \
                                    APINotFoundError, APIUnauthorizedError, check_response, \
                                    make_error


def test_aiohttp_is_not_leaked_outside():
    assert not issubclass(APIError, aiohttp.ClientError)


def test_exception_without_payload():
    exc = APIError(None, status=456)
    assert exc.status == 456
    assert exc.code is None
    assert exc.message is None
    assert exc.details is None


def test_exception_with_payload():
    exc = APIError({'message': 'msg', 'code': 123, 'details': {'a': 'b'}}, status=456)
    assert exc.status == 456
    assert exc.code == 123
    assert exc.message == 'msg'
    assert exc.details == {'a': 'b'}


@pytest.mark.parametrize('status', [200, 202, 300, 304])
async def test_no_error_on_success(
        resp_mocker, aresponses, hostname, status, settings, logger, enforced_context):

    resp = aresponses.Response(
        status=status,
        reason='boo!',
        headers={'Content-Type': 'application/json'},
        text='{"kind": "Status", "code": "xxx", "message": "msg"}',
    )
    aresponses.add(hostname, '/', 'get', resp_mocker(return_value=resp))

    response = await request('get', '/', context=enforced_context,
                             settings=settings, logger=logger)
    await check_response(response)
    response.close()


@pytest.mark.parametrize('status, exctype', [
    (400, APIError),
    (401, APIUnauthorizedError),
    (403, APIForbiddenError),
    (404, APINotFoundError),
    (409, APIConflictError),
    (500, APIError),
    (666, APIError),
])
async def test_error_with_payload(
        resp_mocker, aresponses, hostname, status, exctype, settings, logger, enforced_context):

    resp = aresponses.Response(
        status=status,
        reason='boo!',
        headers={'Content-Type': 'application/json'},
        text='{"kind": "Status", "code": 123, "message": "msg", "details": {"a": "b"}}',
    )
    aresponses.add(hostname, '/', 'get', resp_mocker(return_value=resp))

    with pytest.raises(APIError) as err:
        await request('get', '/', context=enforced_context, settings=settings, logger=logger)

    assert type(err.value) is exctype
    assert err.value.status == status
    assert err.value.code == 123
    assert err.value.message == 'msg'
    assert err.value.details == {'a': 'b'}


@pytest.mark.parametrize('status', [400, 500, 666])
async def test_error_with_non_status_payload_hides_it(
        resp_mocker, aresponses, hostname, status, settings, logger, enforced_context):

    resp = aresponses.Response(
        status=status,
        reason='boo!',
        headers={'Content-Type': 'application/json'},
        text='{"kind": "Secret", "message": "sensitive data"}',
    )
    aresponses.add(hostname, '/', 'get', resp_mocker(return_value=resp))

    with pytest.raises(APIError) as err:
        await request('get', '/', context=enforced_context, settings=settings, logger=logger)

    assert err.value.status == status
    assert err.value.message is None


@pytest.mark.parametrize('status', [400, 500, 666])
async def test_error_with_no_payload(
        resp_mocker, aresponses, hostname, status, settings, logger, enforced_context):

    resp = aresponses.Response(status=status, reason='boo!', text='not json')
    aresponses.add(hostname, '/', 'get', resp_mocker(return_value=resp))

    with pytest.raises(APIError) as err:
        await request('get', '/', context=enforced_context, settings=settings, logger=logger)

    assert err.value.status == status
    assert err.value.code is None
    assert err.value.message is None
    assert err.value.details is None


@pytest.mark.parametrize('status, exctype', [
    (401, APIUnauthorizedError),
    (403, APIForbiddenError),
    (404, APINotFoundError),
    (409, APIConflictError),
    (422, APIError),
])
def test_made_errors_look_like_api_errors(status, exctype):
    err = make_error(status, reason='Reason', message='msg', details={'name': 'n1'})
    assert type(err) is exctype
    assert err.status == status
    assert err.code == status
    assert err.reason == 'Reason'
    assert err.message == 'msg'
    assert err.details == {'name': 'n1'}
