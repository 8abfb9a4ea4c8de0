import datetime

import pytest
import yaml

from kfclient.cli import format_age
from kfclient.structs.credentials import ConnectionInfo, LoginError


def test_list_in_the_default_namespace(invoke):
    result = invoke(['routes', 'list'])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0].split() == ['NAME', 'AGE']
    assert [line.split() for line in lines[1:]] == [['r1', '5m'], ['r2', '5m']]


def test_list_in_a_specific_namespace(invoke):
    result = invoke(['routes', 'list', '-n', 'other'])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert [line.split() for line in lines[1:]] == [['r3', '5m']]


def test_list_in_all_namespaces(invoke):
    result = invoke(['routes', 'list', '--all-namespaces'])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0].split() == ['NAMESPACE', 'NAME', 'AGE']
    assert [line.split() for line in lines[1:]] == [
        ['default', 'r1', '5m'],
        ['default', 'r2', '5m'],
        ['other', 'r3', '5m'],
    ]


def test_list_with_selectors(invoke):
    result = invoke(['routes', 'list', '-l', 'app=r2'])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert [line.split() for line in lines[1:]] == [['r2', '5m']]


def test_list_with_malformed_selectors(invoke):
    result = invoke(['routes', 'list', '-l', 'app'])
    assert result.exit_code == 2
    assert "is not in the key=value form" in result.output


def test_list_of_nothing(invoke):
    result = invoke(['routes', 'list', '-n', 'empty'])
    assert result.exit_code == 0
    assert "No routes found." in result.output


def test_list_with_both_namespace_and_clusterwide_fails(invoke):
    result = invoke(['routes', 'list', '-n', 'other', '-A'])
    assert result.exit_code == 2
    assert "Either --namespace or --all-namespaces" in result.output


def test_get_shows_yaml(invoke):
    result = invoke(['routes', 'get', 'r1'])
    assert result.exit_code == 0
    body = yaml.safe_load(result.output)
    assert body['kind'] == 'VirtualService'
    assert body['metadata']['name'] == 'r1'
    assert body['spec'] == {'hosts': ['r1.example.com']}


def test_get_of_absent_route_fails(invoke):
    result = invoke(['routes', 'get', 'nope'])
    assert result.exit_code == 1
    assert "couldn't get the Route with the name 'nope'" in result.output


def test_get_of_foreign_object_fails(invoke):
    result = invoke(['routes', 'get', 'alien'])
    assert result.exit_code == 1
    assert "doesn't appear to be a Route" in result.output


def test_delete(invoke, store):
    result = invoke(['routes', 'delete', 'r1'])
    assert result.exit_code == 0
    assert "Route 'r1' is deleted." in result.output
    assert len(store) == 3


def test_delete_of_absent_route_fails(invoke, store):
    result = invoke(['routes', 'delete', 'nope'])
    assert result.exit_code == 1
    assert "couldn't delete the Route with the name 'nope'" in result.output
    assert len(store) == 4


@pytest.mark.parametrize('options', [['--foreground'], ['--now'], ['--foreground', '--now']])
def test_delete_with_options(invoke, store, options):
    result = invoke(['routes', 'delete', 'r2'] + options)
    assert result.exit_code == 0
    assert len(store) == 3


def test_login_is_not_used_with_an_injected_store(invoke, login):
    result = invoke(['routes', 'list'])
    assert result.exit_code == 0
    assert not login.called


def test_login_errors_are_reported(runner, login):
    from kfclient.cli import main
    login.side_effect = LoginError("Neither a kubeconfig, nor a service account is found.")
    result = runner.invoke(main, ['routes', 'list', '--context', 'ctx1'])
    assert result.exit_code == 1
    assert "Neither a kubeconfig, nor a service account is found." in result.output
    assert login.call_args[1]['context_name'] == 'ctx1'


def test_login_info_is_used_for_the_store(runner, login, mocker):
    from kfclient.cli import main
    login.return_value = ConnectionInfo(server='https://fake-host', default_namespace='ns1')
    list_objs = mocker.patch('kfclient.clients.fetching.list_objs', return_value=([], None))
    result = runner.invoke(main, ['routes', 'list'])
    assert result.exit_code == 0
    assert list_objs.call_count == 1
    assert list_objs.call_args[1]['namespace'] == 'ns1'


@pytest.mark.parametrize('delta, expected', [
    (datetime.timedelta(seconds=0), '0s'),
    (datetime.timedelta(seconds=45), '45s'),
    (datetime.timedelta(seconds=119), '119s'),
    (datetime.timedelta(minutes=12), '12m'),
    (datetime.timedelta(hours=3), '3h'),
    (datetime.timedelta(hours=47), '47h'),
    (datetime.timedelta(days=5), '5d'),
    (datetime.timedelta(seconds=-10), '0s'),
])
def test_format_age(delta, expected):
    created = datetime.datetime(2026, 1, 1, tzinfo=datetime.timezone.utc)
    assert format_age('2026-01-01T00:00:00Z', created + delta) == expected


def test_format_age_of_unknown_timestamp():
    assert format_age(None) == '<unknown>'
