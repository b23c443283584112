import pytest


@pytest.fixture()
def k8s_mocks(mocker):
    """ All the API calls of the reconcilers, with no real API behind them. """
    return mocker.Mock(
        read_obj=mocker.patch('clusterkeeper._cogs.clients.fetching.read_obj', return_value=None),
        list_objs=mocker.patch('clusterkeeper._cogs.clients.fetching.list_objs', return_value=[]),
        create_obj=mocker.patch('clusterkeeper._cogs.clients.creating.create_obj', return_value={}),
        patch_obj=mocker.patch('clusterkeeper._cogs.clients.patching.patch_obj', return_value={}),
        delete_obj=mocker.patch('clusterkeeper._cogs.clients.deleting.delete_obj', return_value=True),
    )