import pytest

from kfclient.storage.stores import MemoryStore, ObjectStore
from kfclient.structs.filters import label_equals_predicate, label_set_mutator
from kfclient.structs.references import Resource
from kfclient.toolkits.clients import ResourceClient

WIDGETS = Resource('kf.dev', 'v1alpha1', 'widgets', kind='Widget')


class SelectorIgnoringStore(MemoryStore):
    """ Some API servers ignore the field selectors for custom resources. """

    async def list(self, *, namespace, params=None):
        params = {key: val for key, val in (params or {}).items() if key != 'fieldSelector'}
        return await super().list(namespace=namespace, params=params)


@pytest.fixture()
def is_member():
    return label_equals_predicate('app.kubernetes.io/managed-by', 'kf')


@pytest.fixture()
def mark_member():
    return label_set_mutator({'app.kubernetes.io/managed-by': 'kf'})


@pytest.fixture()
def store():
    return MemoryStore(WIDGETS)


@pytest.fixture()
def spy_store(mocker):
    """ A store that returns the bodies as they are sent, and records the calls. """
    store = mocker.Mock(spec=ObjectStore)
    store.create = mocker.AsyncMock(side_effect=lambda *, namespace, body, params=None: body)
    store.replace = mocker.AsyncMock(side_effect=lambda *, namespace, name, body, params=None: body)
    store.read = mocker.AsyncMock(return_value={})
    store.list = mocker.AsyncMock(return_value=[])
    store.delete = mocker.AsyncMock(return_value=None)
    return store


@pytest.fixture()
def client(store, is_member, mark_member):
    return ResourceClient(store=store, kind='Widget',
                          membership_validator=is_member, upsert_mutators=[mark_member])


@pytest.fixture()
def spy_client(spy_store, is_member, mark_member):
    return ResourceClient(store=spy_store, kind='Widget',
                          membership_validator=is_member, upsert_mutators=[mark_member])


@pytest.fixture()
def member():
    return {'metadata': {'name': 'w1', 'labels': {'app.kubernetes.io/managed-by': 'kf'}},
            'spec': {'size': 1}}


@pytest.fixture()
def stranger():
    return {'metadata': {'name': 'w2', 'labels': {'app.kubernetes.io/managed-by': 'helm'}},
            'spec': {'size': 2}}


@pytest.fixture()
def selector_ignoring_store():
    return SelectorIgnoringStore(WIDGETS)
