import pytest


def test_help_in_root(invoke):
    result = invoke(['--help'])

    assert result.exit_code == 0
    assert 'Usage: clusterkeeper [OPTIONS]' in result.output
    assert '  bundles ' in result.output
    assert '  render ' in result.output
    assert '  reconcile ' in result.output
    assert '  finalize ' in result.output


@pytest.mark.parametrize('command', ['reconcile', 'finalize'])
def test_help_in_subcommand(invoke, mocker, command):
    make_controller = mocker.patch('clusterkeeper._kits.generations.make_controller')

    result = invoke([command, '--help'])

    assert result.exit_code == 0
    assert not make_controller.called
    assert f'Usage: clusterkeeper {command} [OPTIONS] FILE...' in result.output
    assert '  --kubeconfig' in result.output
    assert '  --worker-limit' in result.output
    assert '  --log-format' in result.output


def test_version(invoke):
    result = invoke(['--version'])
    assert result.exit_code == 0
    assert result.output.startswith('clusterkeeper, version ')
