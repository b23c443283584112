import pytest

from clusterkeeper._cogs.structs.bundles import Bundle, Component


@pytest.fixture()
def bundle_factory():
    def factory(version='2.1.0', name='kk'):
        return Bundle(name=name, version=version, components=[Component(name='kubernetes', version='1.9.2')])
    return factory


class FakeTemplates:
    """ Minimal desired state: only the namespace and one deployment. """

    def namespace(self, cluster):
        return {'metadata': {'name': cluster.namespace}}

    def service_accounts(self, cluster):
        return []

    def config_maps(self, cluster):
        return []

    def deployments(self, cluster):
        return [{'metadata': {'name': f'worker-{node.id}'}} for node in cluster.workers]

    def ingresses(self, cluster):
        return []

    def volume_claims(self, cluster):
        return []

    def services(self, cluster):
        return []


@pytest.fixture()
def templates():
    return FakeTemplates()


@pytest.fixture()
def k8s_mocks(mocker):
    return mocker.Mock(
        read_obj=mocker.patch('clusterkeeper._cogs.clients.fetching.read_obj', return_value=None),
        list_objs=mocker.patch('clusterkeeper._cogs.clients.fetching.list_objs', return_value=[]),
        create_obj=mocker.patch('clusterkeeper._cogs.clients.creating.create_obj', return_value={}),
        patch_obj=mocker.patch('clusterkeeper._cogs.clients.patching.patch_obj', return_value={}),
        delete_obj=mocker.patch('clusterkeeper._cogs.clients.deleting.delete_obj', return_value=True),
    )


class RecordingResource:
    """ A stand-in for `CRUDResource`, which only remembers that it was called. """

    def __init__(self, name, calls, verdict):
        super().__init__()
        self.name = name
        self.calls = calls
        self.verdict = verdict

    async def reconcile(self, cause):
        self.calls.append((self.name, cause))
        return self.verdict


@pytest.fixture()
def recording_resource_factory():
    return RecordingResource
