import datetime
import functools

import click.testing
import pytest

from kfclient.cli import CLIControls, main
from kfclient.storage.stores import MemoryStore
from kfclient.toolkits.routes import ROUTES

NOW = datetime.datetime(2026, 1, 1, 0, 5, 0, tzinfo=datetime.timezone.utc)
CREATED = '2026-01-01T00:00:00Z'


@pytest.fixture(autouse=True)
def configure(mocker):
    """ Keep the root logger's handlers intact: they are not restored by the CLI. """
    return mocker.patch('kfclient.engines.loggers.configure')


@pytest.fixture()
def login(mocker):
    return mocker.patch('kfclient.utilities.piggybacking.login')


def _route(namespace, name, managed_by='kf'):
    return {
        'metadata': {
            'name': name,
            'namespace': namespace,
            'creationTimestamp': CREATED,
            'labels': {'app.kubernetes.io/managed-by': managed_by, 'app': name},
        },
        'spec': {'hosts': [f'{name}.example.com']},
    }


@pytest.fixture()
def store():
    return MemoryStore(ROUTES, objects=[
        _route('default', 'r1'),
        _route('default', 'r2'),
        _route('default', 'alien', managed_by='istioctl'),
        _route('other', 'r3'),
    ])


@pytest.fixture()
def controls(store):
    return CLIControls(store=store, now=NOW)


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner, controls):
    return functools.partial(runner.invoke, main, obj=controls)
