"""
The engine generations compiled into this release.

Every generation is a version bundle plus the desired-state templates of it.
The older generations are kept as long as there are guest clusters
of their versions: they are reconciled by the same old rules until
their owners upgrade them to the newer versions.
"""
import dataclasses
from typing import Optional, Sequence

from clusterkeeper._cogs.configs import configuration
from clusterkeeper._cogs.structs import bundles
from clusterkeeper._core.actions import execution
from clusterkeeper._core.reactor import processing, resourcesets
from clusterkeeper._kits import templates

NAME = 'clusterkeeper'

COMPONENTS = [
    bundles.Component(name='calico', version='3.0.2'),
    bundles.Component(name='containerlinux', version='1576.5.0'),
    bundles.Component(name='docker', version='17.09.0'),
    bundles.Component(name='etcd', version='3.3.1'),
    bundles.Component(name='coredns', version='1.0.5'),
    bundles.Component(name='kubernetes', version='1.9.2'),
    bundles.Component(name='nginx-ingress-controller', version='0.10.2'),
]


@dataclasses.dataclass(frozen=True)
class Generation:
    bundle: bundles.Bundle
    templates: templates.Templates


GENERATIONS: Sequence[Generation] = [
    Generation(
        bundle=bundles.Bundle(
            name=NAME,
            version='2.0.0',
            components=COMPONENTS,
            changelogs=[
                bundles.Changelog(
                    component='kubernetes',
                    description="Updated to 1.9.2.",
                    kind=bundles.ChangelogKind.CHANGED,
                ),
            ],
        ),
        templates=templates.Templates(
            endpoint_updater_image='quay.io/giantswarm/k8s-endpoint-updater:df982fc73b71e60fc70a7444c068b52441ddb30e',
            kvm_image='quay.io/giantswarm/k8s-kvm:0.2.0-b7c5ac9b9e2cbca3fcf1e2ba8fa0f8ed72ae0ed4',
            kvm_health_image='quay.io/giantswarm/k8s-kvm-health:ddf211dfed52086ade32ab8c45e44eb0273319ef',
            coreos_version='1576.5.0',
        ),
    ),
    Generation(
        bundle=bundles.Bundle(
            name=NAME,
            version='2.0.1',
            components=COMPONENTS,
            changelogs=[
                bundles.Changelog(
                    component='kvm-node-controller',
                    description="Updated KVM node controller with pod status bugfix.",
                    kind=bundles.ChangelogKind.CHANGED,
                ),
                bundles.Changelog(
                    component='etcd',
                    description="Updated to 3.3.1.",
                    kind=bundles.ChangelogKind.CHANGED,
                ),
                bundles.Changelog(
                    component='qemu',
                    description="Fixed formula for calculating qemu memory overhead.",
                    kind=bundles.ChangelogKind.FIXED,
                ),
                bundles.Changelog(
                    component='monitoring',
                    description="Added configuration for monitoring endpoint IP addresses.",
                    kind=bundles.ChangelogKind.ADDED,
                ),
            ],
        ),
        templates=templates.Templates(
            endpoint_updater_image='quay.io/giantswarm/k8s-endpoint-updater:df982fc73b71e60fc70a7444c068b52441ddb30e',
            kvm_image='quay.io/giantswarm/k8s-kvm:0.3.0-b7c5ac9b9e2cbca3fcf1e2ba8fa0f8ed72ae0ed4',
            kvm_health_image='quay.io/giantswarm/k8s-kvm-health:ddf211dfed52086ade32ab8c45e44eb0273319ef',
            coreos_version='1576.5.0',
        ),
    ),
    Generation(
        bundle=bundles.Bundle(
            name=NAME,
            version='2.1.0',
            components=COMPONENTS,
            changelogs=[
                bundles.Changelog(
                    component='kvm-operator',
                    description="Spread the masters & workers of a cluster over distinct hosts.",
                    kind=bundles.ChangelogKind.ADDED,
                ),
            ],
        ),
        templates=templates.Templates(
            endpoint_updater_image='quay.io/giantswarm/k8s-endpoint-updater:df982fc73b71e60fc70a7444c068b52441ddb30e',
            kvm_image='quay.io/giantswarm/k8s-kvm:0.3.0-b7c5ac9b9e2cbca3fcf1e2ba8fa0f8ed72ae0ed4',
            kvm_health_image='quay.io/giantswarm/k8s-kvm-health:ddf211dfed52086ade32ab8c45e44eb0273319ef',
            coreos_version='1576.5.0',
            pod_anti_affinity=True,
        ),
    ),
]


def find(version: str) -> Optional[Generation]:
    for generation in GENERATIONS:
        if generation.bundle.version == version:
            return generation
    return None


def make_controller(
        settings: Optional[configuration.OperatorSettings] = None,
        *,
        strict: bool = False,
) -> processing.Controller:
    """ The controller with all the known generations, one resource set per generation. """
    settings = settings if settings is not None else configuration.OperatorSettings()
    try:
        bundles.validate_all(generation.bundle for generation in GENERATIONS)
    except bundles.InvalidBundleError as e:
        raise execution.InvalidConfigError(f"The compiled generations are broken: {e}") from e
    resource_sets = [
        resourcesets.make_resource_set(
            name=f'{generation.bundle.name}-{generation.bundle.version}',
            bundle=generation.bundle,
            templates=generation.templates,
            settings=settings,
        )
        for generation in GENERATIONS
    ]
    return processing.Controller(resource_sets, settings=settings, strict=strict)
