import functools
import logging

import click.testing
import pytest

from clusterkeeper._cogs.structs.credentials import ConnectionInfo
from clusterkeeper.cli import main

MANIFEST = """
apiVersion: provider.clusterkeeper.dev/v1alpha1
kind: KVMConfig
metadata:
  name: al9qy
spec:
  cluster:
    id: al9qy
    customer: {id: acme}
    kubernetes: {api: {domain: api.al9qy.k8s.example.com, securePort: 443}}
    etcd: {domain: etcd.al9qy.k8s.example.com}
    masters: [{id: m7mxz}]
    workers: [{id: wbz8a}]
  kvm:
    masters: [{cpus: 2, memory: 4G, disk: 20}]
    workers: [{cpus: 4, memory: 8G, disk: 50}]
  versionBundle: {version: 2.1.0}
---
apiVersion: provider.clusterkeeper.dev/v1alpha1
kind: KVMConfig
metadata:
  name: xy12z
spec:
  cluster:
    id: xy12z
    customer: {id: acme}
    kubernetes: {api: {domain: api.xy12z.k8s.example.com}}
    masters: [{id: m1}]
  kvm:
    masters: [{cpus: 1, memory: 2G, disk: 10}]
  versionBundle: {version: 2.0.0}
"""

BROKEN = """
spec:
  cluster: {id: broken}
"""


@pytest.fixture(autouse=True)
def _restore_root_logging():
    logger = logging.getLogger()
    original_handlers = logger.handlers[:]
    original_level = logger.level
    yield
    logger.handlers[:] = original_handlers
    logger.setLevel(original_level)


@pytest.fixture()
def manifest(tmp_path):
    path = tmp_path / 'clusters.yaml'
    path.write_text(MANIFEST, encoding='utf-8')
    return str(path)


@pytest.fixture()
def broken(tmp_path):
    path = tmp_path / 'broken.yaml'
    path.write_text(BROKEN, encoding='utf-8')
    return str(path)


@pytest.fixture()
def connection():
    return ConnectionInfo(server='https://localhost:6443', token='token')


@pytest.fixture()
def runner():
    return click.testing.CliRunner()


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)


@pytest.fixture()
def login(mocker, connection):
    return mocker.patch('clusterkeeper._cogs.clients.logins.login', return_value=connection)
