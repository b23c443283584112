import asyncio
import dataclasses

import pytest

from clusterkeeper._core.actions.execution import AmbiguousResourceSetError, InvalidConfigError, \
                                                 NoResourceSetError
from clusterkeeper._core.reactor.processing import Controller
from clusterkeeper._core.reactor.resourcesets import ResourceSet
from clusterkeeper._core.resources.base import Reason, Verdict


@pytest.fixture()
def resource_set_factory(bundle_factory, settings):
    def factory(version, resources=()):
        return ResourceSet(name=f'rs-{version}', bundle=bundle_factory(version), resources=resources,
                           settings=settings)
    return factory


def test_bundles_are_exposed(resource_set_factory):
    controller = Controller([resource_set_factory('2.0.0'), resource_set_factory('2.1.0')])
    assert [bundle.version for bundle in controller.bundles()] == ['2.0.0', '2.1.0']


def test_selection_by_exact_versions(resource_set_factory, cluster):
    rs1 = resource_set_factory('2.0.0')
    rs2 = resource_set_factory('2.1.0')
    controller = Controller([rs1, rs2])
    assert controller.select(cluster) is rs2
    assert controller.select(dataclasses.replace(cluster, version='2.0.0')) is rs1


def test_selection_of_unknown_versions(resource_set_factory, cluster):
    controller = Controller([resource_set_factory('2.0.0')])
    with pytest.raises(NoResourceSetError):
        controller.select(cluster)


def test_selection_of_ambiguous_versions(resource_set_factory, cluster):
    controller = Controller([resource_set_factory('2.1.0'), resource_set_factory('2.1.0')])
    with pytest.raises(AmbiguousResourceSetError):
        controller.select(cluster)


async def test_reconciliation_with_the_selected_set(
        resource_set_factory, recording_resource_factory, cluster):
    calls = []
    rs1 = resource_set_factory('2.0.0', [recording_resource_factory('old', calls, Verdict.PROCEED)])
    rs2 = resource_set_factory('2.1.0', [recording_resource_factory('new', calls, Verdict.PROCEED)])
    verdict = await Controller([rs1, rs2]).reconcile(cluster)
    assert verdict is Verdict.PROCEED
    assert [name for name, _ in calls] == ['new']
    assert calls[0][1].reason is Reason.UPSERT


async def test_finalization_is_a_deletion_pass(
        resource_set_factory, recording_resource_factory, cluster):
    calls = []
    rs = resource_set_factory('2.1.0', [recording_resource_factory('new', calls, Verdict.PROCEED)])
    await Controller([rs]).finalize(cluster)
    assert calls[0][1].reason is Reason.DELETE


async def test_unknown_versions_are_skipped(resource_set_factory, cluster, assert_logs):
    controller = Controller([resource_set_factory('2.0.0')])
    verdict = await controller.reconcile(cluster)
    assert verdict is None
    assert_logs([r"Skipping the upsert pass: No resource set handles the version '2.1.0'"])


async def test_unknown_versions_fail_in_strict_mode(resource_set_factory, cluster):
    controller = Controller([resource_set_factory('2.0.0')], strict=True)
    with pytest.raises(NoResourceSetError):
        await controller.reconcile(cluster)


async def test_batches_collect_the_failures(resource_set_factory, cluster):
    class FailingResource:
        name = 'failing'

        async def reconcile(self, cause):
            if cause.cluster.id == 'bad':
                raise ValueError("boo")
            return Verdict.PROCEED

    controller = Controller([resource_set_factory('2.1.0', [FailingResource()])])
    good = cluster
    bad = dataclasses.replace(cluster, id='bad')
    unknown = dataclasses.replace(cluster, id='unknown', version='0.0.1')
    results = await controller.run([good, bad, unknown])

    assert [result.cluster.id for result in results] == ['al9qy', 'bad', 'unknown']
    assert results[0].verdict is Verdict.PROCEED
    assert not results[0].failed
    assert results[1].failed
    assert isinstance(results[1].error, ValueError)
    assert results[2].verdict is None
    assert not results[2].failed


@pytest.mark.parametrize('limit, expected', [(None, 5), (2, 2), (1, 1)])
async def test_batches_are_limited_by_workers(resource_set_factory, settings, cluster, limit, expected):
    running = set()
    peaks = []

    class SlowResource:
        name = 'slow'

        async def reconcile(self, cause):
            running.add(cause.cluster.id)
            peaks.append(len(running))
            await asyncio.sleep(0.01)
            running.discard(cause.cluster.id)
            return Verdict.PROCEED

    settings.batching.worker_limit = limit
    controller = Controller([resource_set_factory('2.1.0', [SlowResource()])], settings=settings)
    clusters = [dataclasses.replace(cluster, id=f'c{i}') for i in range(5)]
    results = await controller.run(clusters)

    assert len(results) == 5
    assert max(peaks) == expected


@pytest.mark.parametrize('limit', [0, -1])
async def test_non_positive_worker_limits_are_rejected(resource_set_factory, settings, cluster, limit):
    settings.batching.worker_limit = limit
    controller = Controller([resource_set_factory('2.1.0')], settings=settings)
    with pytest.raises(InvalidConfigError, match=r"The worker limit must be positive"):
        await asyncio.wait_for(controller.run([cluster]), timeout=1.0)
