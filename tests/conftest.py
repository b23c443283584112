import dataclasses
import inspect
import logging
import re

import pytest

from clusterkeeper._cogs.configs.configuration import OperatorSettings
from clusterkeeper._cogs.structs.clusters import ClusterSpec, Node
from clusterkeeper._core.resources.base import Cause, Reason


# Make all tests in this directory and below asyncio-compatible by default.
# Due to how pytest-async checks for these markers, they should be added as early as possible.
@pytest.hookimpl(hookwrapper=True)
def pytest_pycollect_makeitem(collector, name, obj):
    if collector.funcnamefilter(name) and inspect.iscoroutinefunction(obj):
        pytest.mark.asyncio(obj)
    yield


@pytest.fixture(autouse=True)
def _all_logs_captured(caplog):
    caplog.set_level(logging.DEBUG)


@pytest.fixture()
def settings():
    return OperatorSettings()


@pytest.fixture()
def logger():
    return logging.getLogger('clusterkeeper.tests')


@pytest.fixture()
def cluster():
    return ClusterSpec(
        id='al9qy',
        customer='acme',
        version='2.1.0',
        api_domain='api.al9qy.k8s.example.com',
        etcd_domain='etcd.al9qy.k8s.example.com',
        masters=[Node(id='m7mxz', cpus=2, memory='4G', disk=20)],
        workers=[Node(id='wbz8a', cpus=4, memory='8G', disk=50),
                 Node(id='wzc4k', cpus=4, memory='8G', disk=50)],
    )


@pytest.fixture()
def cause(cluster, settings, logger):
    return Cause(
        cluster=cluster,
        reason=Reason.UPSERT,
        updates_allowed=True,
        settings=settings,
        logger=logger,
    )


@pytest.fixture()
def delete_cause(cause):
    return dataclasses.replace(cause, reason=Reason.DELETE)


@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    def assert_logs_fn(patterns=(), prohibited=(), strict=False):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            # The expected pattern is at position 0.
            # Looking-ahead: if one of the following patterns matches, while the
            # 0th does not, then the log message is missing, and we fail the test.
            for idx, pattern in enumerate(remaining_patterns):
                m = re.search(pattern, message)
                if m:
                    if idx == 0:
                        remaining_patterns[:1] = []
                        break  # out of `remaining_patterns` cycle
                    else:
                        skipped_patterns = remaining_patterns[:idx]
                        raise AssertionError(f"Few patterns were skipped: {skipped_patterns!r}")
                elif strict:
                    raise AssertionError(f"Unexpected log message: {message!r}")

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                m = re.search(pattern, message)
                if m:
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        # If all patterns have been matched in order, we are done.
        # if some are left, but the messages are over, then we fail.
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn
