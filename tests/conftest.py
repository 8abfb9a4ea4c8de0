import io
import json
import logging
import re
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest
from aresponses import ResponsesMockServer

from kfclient.clients.auth import APIContext
from kfclient.engines.loggers import ObjectPrefixingTextFormatter, configure
from kfclient.structs.configuration import ClientSettings
from kfclient.structs.credentials import ConnectionInfo
from kfclient.structs.references import Resource


@pytest.fixture()
def namespaced_resource():
    """ The resource used in the tests. Usually mocked, so it does not matter. """
    return Resource('kf.dev', 'v1alpha1', 'kfexamples', kind='KfExample', namespaced=True)


@pytest.fixture()
def cluster_resource():
    """ The resource used in the tests. Usually mocked, so it does not matter. """
    return Resource('kf.dev', 'v1alpha1', 'kfexamples', kind='KfExample', namespaced=False)


@pytest.fixture(params=[True, False], ids=['namespaced', 'cluster'])
def resource(request):
    """ The resource used in the tests. Usually mocked, so it does not matter. """
    return Resource('kf.dev', 'v1alpha1', 'kfexamples', kind='KfExample', namespaced=request.param)


@pytest.fixture()
def namespace(resource):
    return 'ns' if resource.namespaced else None


@pytest.fixture()
def settings():
    return ClientSettings()


@pytest.fixture()
def logger():
    return logging.getLogger('kfclient.tests')


#
# Mocks for Kubernetes API clients (HTTP layer).
# We assume that the client library is fully functional,
# and we only check that it is used as expected.
#

@pytest.fixture()
def hostname():
    """ A fake hostname to be used in all aiohttp/aresponses tests. """
    return 'fake-host'


@pytest.fixture()
async def aresponses():
    async with ResponsesMockServer() as server:
        yield server


@pytest.fixture()
async def enforced_context(aresponses, hostname):
    """
    An API context pointing to the fake host, closed after every test.

    The context is passed to the client functions explicitly. The tests
    of the implicit injection set `auth.context_var` on their own.
    """
    context = APIContext(ConnectionInfo(server=f'https://{hostname}'))
    try:
        yield context
    finally:
        await context.close()


@pytest.fixture()
def resp_mocker(enforced_context, aresponses):
    """
    A factory of server-side callbacks for `aresponses` with mocking/spying.

    The value of the fixture is a function, which return a coroutine mock.
    That coroutine mock should be passed to `aresponses.add` as a response
    callback function. When called, it calls the mock defined by the function's
    arguments (specifically, return_value or side_effects).

    The requests' payloads & query params are preserved in the callback's
    ``.payloads`` & ``.queries`` lists, so that they could be asserted later.

    Sample usage::

        def test_me(resp_mocker):
            response = aiohttp.web.json_response({'a': 'b'})
            callback = resp_mocker(return_value=response)
            aresponses.add(hostname, '/path/', 'get', callback)
            do_something()
            assert callback.called
            assert callback.call_count == 1
    """
    def resp_maker(*args, **kwargs):
        actual_response = MagicMock(*args, **kwargs)

        async def resp_mock_effect(request):

            # The request's content can be read inside of the handler only.
            text = await request.text()
            try:
                callback.payloads.append(json.loads(text))
            except json.JSONDecodeError:
                callback.payloads.append(text)
            callback.queries.append(dict(request.query))

            # Get a response/error as it was intended (via return_value/side_effect).
            return actual_response()

        callback = AsyncMock(side_effect=resp_mock_effect)
        callback.payloads = []
        callback.queries = []
        return callback
    return resp_maker


#
# Helpers for the logging checks.
#

@pytest.fixture()
def logstream(caplog):
    """ Prefixing is done at the final output. We have to intercept it. """

    logger = logging.getLogger()
    handlers = list(logger.handlers)

    # Setup all log levels of sub-libraries. A side-effect: the handlers are also added.
    configure(verbose=True)

    # Remove any stream handlers added in the step above. But keep the caplog's handlers.
    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler) and handler.stream is sys.stderr:
            logger.removeHandler(handler)

    # Inject our stream-intercepting handler.
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    formatter = ObjectPrefixingTextFormatter('prefix %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    try:
        with caplog.at_level(logging.DEBUG):
            yield stream
    finally:
        logger.removeHandler(handler)
        logger.handlers[:] = handlers  # undo `configure()`


@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    def assert_logs_fn(patterns, prohibited=[]):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            for idx, pattern in enumerate(remaining_patterns):
                if re.search(pattern, message):
                    if idx == 0:
                        remaining_patterns[:1] = []
                        break
                    else:
                        skipped_patterns = remaining_patterns[:idx]
                        raise AssertionError(f"Few patterns were skipped: {skipped_patterns!r}")
            for pattern in prohibited:
                if re.search(pattern, message):
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")
    return assert_logs_fn
