import asyncio
import dataclasses
import functools
import json
from typing import Any, Callable, Collection, List, Optional

import click
import yaml

from clusterkeeper._cogs.clients import auth, logins
from clusterkeeper._cogs.configs import configuration
from clusterkeeper._cogs.helpers import versions
from clusterkeeper._cogs.structs import clusters, credentials
from clusterkeeper._core.actions import loggers
from clusterkeeper._core.reactor import processing
from clusterkeeper._core.resources import base
from clusterkeeper._kits import generations


@dataclasses.dataclass()
class CLIControls:
    """ The controls, which are impossible to pass via CLI (e.g. in tests or embedding apps). """
    settings: Optional[configuration.OperatorSettings] = None
    connection: Optional[credentials.ConnectionInfo] = None


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        if isinstance(value, loggers.LogFormat):
            return value
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


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


def load_clusters(paths: Collection[str]) -> List[clusters.ClusterSpec]:
    """ Parse the cluster specifications from YAML files, many documents per file. """
    result: List[clusters.ClusterSpec] = []
    for path in paths:
        with open(path, encoding='utf-8') as f:
            documents = [doc for doc in yaml.safe_load_all(f) if doc]
        for document in documents:
            try:
                result.append(clusters.ClusterSpec.from_body(document))
            except clusters.InvalidClusterError as e:
                raise click.BadParameter(f"{path}: {e}", param_hint='FILE') from e
    return result


@click.version_option(version=versions.version, prog_name='clusterkeeper')
@click.group(name='clusterkeeper', context_settings=dict(
    auto_envvar_prefix='CLUSTERKEEPER',
))
def main() -> None:
    pass


@main.command()
@logging_options
@click.option('--format', 'output_format', type=click.Choice(['yaml', 'json']), default='yaml')
def bundles(output_format: str) -> None:
    """ Show the version bundles of all the engine generations. """
    data = [generation.bundle.as_dict() for generation in generations.GENERATIONS]
    if output_format == 'json':
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(yaml.safe_dump(data, sort_keys=False), nl=False)


@main.command()
@logging_options
@click.argument('path', metavar='FILE', type=click.Path(exists=True, dir_okay=False))
def render(path: str) -> None:
    """ Show the desired sub-resources of the clusters, without touching the API. """
    documents: List[Any] = []
    for cluster in load_clusters([path]):
        generation = generations.find(cluster.version)
        if generation is None:
            raise click.ClickException(f"No generation handles the version {cluster.version!r} "
                                       f"of {cluster.id}.")
        tpl = generation.templates
        documents.append(tpl.namespace(cluster))
        for builder in [tpl.service_accounts, tpl.config_maps, tpl.deployments,
                        tpl.ingresses, tpl.volume_claims, tpl.services]:
            documents.extend(builder(cluster))
    click.echo(yaml.safe_dump_all(documents, sort_keys=False), nl=False)


@main.command()
@logging_options
@click.option('--kubeconfig', type=click.Path(dir_okay=False), default=None)
@click.option('--updates/--no-updates', default=None)
@click.option('--worker-limit', type=click.IntRange(min=1), default=None)
@click.option('--strict', is_flag=True)
@click.argument('paths', metavar='FILE...', nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False))
@click.make_pass_decorator(CLIControls, ensure=True)
def reconcile(
        __controls: CLIControls,
        paths: List[str],
        kubeconfig: Optional[str],
        updates: Optional[bool],
        worker_limit: Optional[int],
        strict: bool,
) -> None:
    """ Reconcile the sub-resources of the clusters once. """
    settings = __controls.settings if __controls.settings is not None else configuration.OperatorSettings()
    if updates is not None:
        settings.updating.enabled = updates
    if worker_limit is not None:
        settings.batching.worker_limit = worker_limit
    run(paths=paths, kubeconfig=kubeconfig, settings=settings, strict=strict,
        connection=__controls.connection, reason=base.Reason.UPSERT)


@main.command()
@logging_options
@click.option('--kubeconfig', type=click.Path(dir_okay=False), default=None)
@click.option('--worker-limit', type=click.IntRange(min=1), default=None)
@click.option('--strict', is_flag=True)
@click.argument('paths', metavar='FILE...', nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False))
@click.make_pass_decorator(CLIControls, ensure=True)
def finalize(
        __controls: CLIControls,
        paths: List[str],
        kubeconfig: Optional[str],
        worker_limit: Optional[int],
        strict: bool,
) -> None:
    """ Delete the sub-resources of the deleted clusters. """
    settings = __controls.settings if __controls.settings is not None else configuration.OperatorSettings()
    if worker_limit is not None:
        settings.batching.worker_limit = worker_limit
    run(paths=paths, kubeconfig=kubeconfig, settings=settings, strict=strict,
        connection=__controls.connection, reason=base.Reason.DELETE)


def run(
        *,
        paths: Collection[str],
        kubeconfig: Optional[str],
        settings: configuration.OperatorSettings,
        strict: bool,
        connection: Optional[credentials.ConnectionInfo],
        reason: base.Reason,
) -> None:
    cluster_specs = load_clusters(paths)
    try:
        info = connection if connection is not None else logins.login(kubeconfig=kubeconfig)
    except credentials.LoginError as e:
        raise click.ClickException(str(e)) from e
    controller = generations.make_controller(settings, strict=strict)
    results = asyncio.run(_run(controller, cluster_specs, info=info, reason=reason))
    failed = [result for result in results if result.failed]
    if failed:
        ids = ', '.join(result.cluster.id for result in failed)
        raise click.ClickException(f"The {reason} passes have failed for: {ids}")


async def _run(
        controller: processing.Controller,
        cluster_specs: Collection[clusters.ClusterSpec],
        *,
        info: credentials.ConnectionInfo,
        reason: base.Reason,
) -> List[processing.PassResult]:
    async with auth.authentication(info):
        return await controller.run(cluster_specs, reason=reason)
