import asyncio
import dataclasses
import datetime
import functools
from typing import Any, Awaitable, Callable, Collection, Optional, Tuple, TypeVar

import click
import iso8601
import yaml

from kfclient.clients import auth
from kfclient.engines import loggers
from kfclient.storage import stores
from kfclient.structs import bodies, configuration, credentials, options, references
from kfclient.toolkits import builds, clients, errors, routes
from kfclient.utilities import piggybacking

_T = TypeVar('_T')


@dataclasses.dataclass()
class CLIControls:
    """ CLI controls, which are impossible to pass via CLI. """
    store: Optional[stores.ObjectStore] = None
    settings: Optional[configuration.ClientSettings] = None
    now: Optional[datetime.datetime] = None


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


class SelectorParamType(click.ParamType):
    name = 'key=value'

    def convert(self, value: Any, param: Any, ctx: Any) -> Tuple[str, str]:
        if isinstance(value, tuple):
            return value
        key, sep, val = str(value).partition('=')
        if not sep or not key:
            self.fail(f"{value!r} is not in the key=value form.", param, ctx)
        return key, val


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: Optional[bool] = False,
                log_refkey: Optional[str] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def _run_with_routes(
        controls: CLIControls,
        kubecontext: Optional[str],
        namespace: Optional[str],
        fn: Callable[[clients.ResourceClient, references.Namespace], Awaitable[_T]],
) -> _T:
    """
    Run a routine with the routes client, either injected or logged in.

    The default namespace is taken from the credentials (if logged in),
    or is ``"default"``. The client errors are presented as CLI errors.
    """
    settings = controls.settings if controls.settings is not None else configuration.ClientSettings()

    async def runner() -> _T:
        if controls.store is not None:
            client = routes.make_routes_client(controls.store, settings)
            return await fn(client, references.NamespaceName(namespace or 'default'))

        info = piggybacking.login(context_name=kubecontext)
        async with auth.APIContext(info) as context:
            store = stores.KubernetesStore(routes.ROUTES, settings=settings, context=context)
            client = routes.make_routes_client(store, settings)
            ns = namespace or info.default_namespace or 'default'
            return await fn(client, references.NamespaceName(ns))

    try:
        return asyncio.run(runner())
    except (errors.ClientError, credentials.LoginError) as e:
        raise click.ClickException(str(e))


def format_age(timestamp: Optional[str], now: Optional[datetime.datetime] = None) -> str:
    """ Render the object's age in the kubectl's manner: ``45s``, ``12m``, ``3h``, ``5d``. """
    if not timestamp:
        return '<unknown>'
    created = iso8601.parse_date(timestamp)
    now = now if now is not None else datetime.datetime.now(datetime.timezone.utc)
    seconds = max(0, int((now - created).total_seconds()))
    if seconds < 120:
        return f"{seconds}s"
    elif seconds < 2 * 3600:
        return f"{seconds // 60}m"
    elif seconds < 2 * 86400:
        return f"{seconds // 3600}h"
    else:
        return f"{seconds // 86400}d"


@click.version_option(prog_name='kfclient')
@click.group(name='kfclient', context_settings=dict(
    auto_envvar_prefix='KFCLIENT',
))
def main() -> None:
    pass


@main.group(name='routes')
def routes_group() -> None:
    """ Manage the routes of the applications. """


@routes_group.command(name='list')
@logging_options
@click.option('--context', 'kubecontext', type=str, default=None)
@click.option('-n', '--namespace', type=str, default=None)
@click.option('-A', '--all-namespaces', 'clusterwide', is_flag=True)
@click.option('-l', '--selector', 'selectors', type=SelectorParamType(), multiple=True)
@click.make_pass_decorator(CLIControls, ensure=True)
def routes_list(
        __controls: CLIControls,
        kubecontext: Optional[str],
        namespace: Optional[str],
        clusterwide: bool,
        selectors: Collection[Tuple[str, str]],
) -> None:
    """ List the routes in the namespace. """
    if namespace and clusterwide:
        raise click.UsageError("Either --namespace or --all-namespaces can be used, not both.")

    async def list_routes(
            client: clients.ResourceClient,
            ns: references.Namespace,
    ) -> Any:
        opts = [options.with_list_label_selector(dict(selectors))] if selectors else []
        return await client.list(None if clusterwide else ns, *opts)

    items = _run_with_routes(__controls, kubecontext, namespace, list_routes)
    if not items:
        click.echo("No routes found.", err=True)
        return

    rows = [('NAMESPACE', 'NAME', 'AGE')] if clusterwide else [('NAME', 'AGE')]
    for item in items:
        age = format_age((item.get('metadata') or {}).get('creationTimestamp'), __controls.now)
        name = bodies.get_name(item) or ''
        if clusterwide:
            rows.append((bodies.get_namespace(item) or '', name, age))
        else:
            rows.append((name, age))
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    for row in rows:
        click.echo('   '.join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())


@routes_group.command(name='get')
@logging_options
@click.option('--context', 'kubecontext', type=str, default=None)
@click.option('-n', '--namespace', type=str, default=None)
@click.argument('name')
@click.make_pass_decorator(CLIControls, ensure=True)
def routes_get(
        __controls: CLIControls,
        kubecontext: Optional[str],
        namespace: Optional[str],
        name: str,
) -> None:
    """ Show the route as YAML. """

    async def get_route(
            client: clients.ResourceClient,
            ns: references.Namespace,
    ) -> bodies.RawBody:
        return await client.get(ns, name)

    body = _run_with_routes(__controls, kubecontext, namespace, get_route)
    click.echo(yaml.safe_dump(dict(body), sort_keys=False), nl=False)


@routes_group.command(name='delete')
@logging_options
@click.option('--context', 'kubecontext', type=str, default=None)
@click.option('-n', '--namespace', type=str, default=None)
@click.option('--foreground', is_flag=True, help="Delete the dependents before the route.")
@click.option('--now', 'immediately', is_flag=True, help="Delete with no grace period.")
@click.argument('name')
@click.make_pass_decorator(CLIControls, ensure=True)
def routes_delete(
        __controls: CLIControls,
        kubecontext: Optional[str],
        namespace: Optional[str],
        foreground: bool,
        immediately: bool,
        name: str,
) -> None:
    """ Delete the route by its name. """

    async def delete_route(
            client: clients.ResourceClient,
            ns: references.Namespace,
    ) -> None:
        opts = []
        if foreground:
            opts.append(options.with_delete_foreground_deletion())
        if immediately:
            opts.append(options.with_delete_delete_immediately())
        await client.delete(ns, name, *opts)

    _run_with_routes(__controls, kubecontext, namespace, delete_route)
    click.echo(f"Route {name!r} is deleted.")


@main.command()
@logging_options
@click.option('--registry', type=str, default=None, help="Push the images to this registry.")
@click.argument('source_file', type=click.File('r', encoding='utf-8'))
@click.make_pass_decorator(CLIControls, ensure=True)
def build(
        __controls: CLIControls,
        registry: Optional[str],
        source_file: Any,
) -> None:
    """
    Render the build of a source (from a YAML file, or "-" for stdin).

    The source must be as stored in the cluster, with its ``uid``:
    e.g. as dumped by ``kubectl get sources NAME -o yaml``.
    """
    settings = __controls.settings if __controls.settings is not None else configuration.ClientSettings()
    if registry:
        settings = dataclasses.replace(
            settings, building=dataclasses.replace(settings.building, registry=registry))

    source = yaml.safe_load(source_file)
    if not isinstance(source, dict):
        raise click.ClickException("The source file does not contain an object.")
    if source.get('kind', 'Source') != 'Source':
        raise click.ClickException(f"Expected a Source, got {source.get('kind')!r}.")

    try:
        body = builds.make_build(source, settings)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(yaml.safe_dump(dict(body), sort_keys=False), nl=False)
