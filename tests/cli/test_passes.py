import pytest

from clusterkeeper._cogs.configs.configuration import OperatorSettings
from clusterkeeper._cogs.structs.credentials import LoginError
from clusterkeeper._core.reactor.processing import PassResult
from clusterkeeper._core.resources.base import Reason, Verdict
from clusterkeeper.cli import CLIControls


@pytest.fixture()
def controller(mocker):
    controller = mocker.Mock()
    controller.run = mocker.AsyncMock(side_effect=lambda clusters, reason: [
        PassResult(cluster=cluster, verdict=Verdict.PROCEED) for cluster in clusters
    ])
    return controller


@pytest.fixture()
def make_controller(mocker, controller):
    return mocker.patch('clusterkeeper._kits.generations.make_controller', return_value=controller)


def test_reconcile_runs_upsert_passes(invoke, manifest, login, controller, make_controller):
    result = invoke(['reconcile', manifest])
    assert result.exit_code == 0, result.output
    assert login.call_count == 1
    assert make_controller.call_count == 1
    assert controller.run.await_count == 1
    clusters = controller.run.call_args[0][0]
    assert [cluster.id for cluster in clusters] == ['al9qy', 'xy12z']
    assert controller.run.call_args[1]['reason'] == Reason.UPSERT


def test_finalize_runs_delete_passes(invoke, manifest, login, controller, make_controller):
    result = invoke(['finalize', manifest])
    assert result.exit_code == 0, result.output
    assert controller.run.call_args[1]['reason'] == Reason.DELETE


def test_explicit_connection_skips_the_login(invoke, manifest, login, connection, make_controller):
    result = invoke(['reconcile', manifest], obj=CLIControls(connection=connection))
    assert result.exit_code == 0, result.output
    assert not login.called


def test_kubeconfig_is_passed_to_the_login(invoke, manifest, login, make_controller, tmp_path):
    kubeconfig = tmp_path / 'kubeconfig'
    result = invoke(['reconcile', manifest, '--kubeconfig', str(kubeconfig)])
    assert result.exit_code == 0, result.output
    assert login.call_args[1] == {'kubeconfig': str(kubeconfig)}


def test_login_failures_are_reported(invoke, manifest, mocker, make_controller):
    mocker.patch('clusterkeeper._cogs.clients.logins.login', side_effect=LoginError("no access"))
    result = invoke(['reconcile', manifest])
    assert result.exit_code == 1
    assert "no access" in result.output
    assert not make_controller.called


@pytest.mark.parametrize('options, enabled', [
    ([], False),
    (['--updates'], True),
    (['--no-updates'], False),
])
def test_updates_option(invoke, manifest, connection, make_controller, options, enabled):
    settings = OperatorSettings()
    controls = CLIControls(settings=settings, connection=connection)
    result = invoke(['reconcile', manifest] + options, obj=controls)
    assert result.exit_code == 0, result.output
    assert make_controller.call_args[0][0] is settings
    assert settings.updating.enabled is enabled


def test_worker_limit_option(invoke, manifest, connection, make_controller):
    settings = OperatorSettings()
    controls = CLIControls(settings=settings, connection=connection)
    result = invoke(['finalize', manifest, '--worker-limit', '3'], obj=controls)
    assert result.exit_code == 0, result.output
    assert settings.batching.worker_limit == 3


@pytest.mark.parametrize('options, strict', [([], False), (['--strict'], True)])
def test_strict_option(invoke, manifest, login, make_controller, options, strict):
    result = invoke(['reconcile', manifest] + options)
    assert result.exit_code == 0, result.output
    assert make_controller.call_args[1] == {'strict': strict}


def test_failed_passes_are_reported(invoke, manifest, login, controller, make_controller):
    controller.run.side_effect = lambda clusters, reason: [
        PassResult(cluster=clusters[0], verdict=Verdict.PROCEED),
        PassResult(cluster=clusters[1], error=RuntimeError("boo!")),
    ]
    result = invoke(['reconcile', manifest])
    assert result.exit_code == 1
    assert "The upsert passes have failed for: xy12z" in result.output


def test_broken_manifests_are_rejected(invoke, broken, login, make_controller):
    result = invoke(['reconcile', broken])
    assert result.exit_code == 2
    assert not make_controller.called


def test_files_are_required(invoke, login, make_controller):
    result = invoke(['reconcile'])
    assert result.exit_code == 2
    assert not make_controller.called


@pytest.mark.parametrize('command', ['reconcile', 'finalize'])
@pytest.mark.parametrize('limit', ['0', '-3'])
def test_non_positive_worker_limits_are_rejected(invoke, manifest, login, make_controller, command, limit):
    result = invoke([command, manifest, '--worker-limit', limit])
    assert result.exit_code == 2
    assert "--worker-limit" in result.output
    assert not make_controller.called
