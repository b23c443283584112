"""
Version bundles: the static descriptors of the engine generations.

A bundle tells which version of the cluster specifications an engine
generation understands, which components (with their versions) it rolls out,
and what has changed compared to the previous generations.

The bundles are compiled into the code, never loaded or mutated at runtime.
They are used for routing the cluster specifications to the engines
(by the exact version match), and for reporting to the humans.
"""
import dataclasses
import enum
import re
from typing import Any, Dict, Iterable, Tuple

# Strict semver without the leading "v": "1.2.3", "1.2.3-alpha.1", "1.2.3+build.5".
SEMVER_PATTERN = re.compile(
    r'^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)'
    r'(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?'
    r'(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$'
)


class InvalidBundleError(Exception):
    """ Raised when a version bundle is malformed (a programming error). """


class ChangelogKind(str, enum.Enum):
    ADDED = 'added'
    CHANGED = 'changed'
    DEPRECATED = 'deprecated'
    FIXED = 'fixed'
    REMOVED = 'removed'
    SECURITY = 'security'

    def __str__(self) -> str:
        return str(self.value)


@dataclasses.dataclass(frozen=True)
class Component:
    name: str
    version: str


@dataclasses.dataclass(frozen=True)
class Changelog:
    component: str
    description: str
    kind: ChangelogKind


@dataclasses.dataclass(frozen=True)
class Bundle:
    name: str
    version: str
    components: Tuple[Component, ...] = ()
    changelogs: Tuple[Changelog, ...] = ()

    def __post_init__(self) -> None:
        # Allow lists in the literal declarations, but keep the bundle immutable.
        object.__setattr__(self, 'components', tuple(self.components))
        object.__setattr__(self, 'changelogs', tuple(self.changelogs))

    def validate(self) -> None:
        if not self.name:
            raise InvalidBundleError("The bundle name must not be empty.")
        if not SEMVER_PATTERN.match(self.version):
            raise InvalidBundleError(f"The bundle version must be semver, got {self.version!r}.")
        if not self.components:
            raise InvalidBundleError(f"The bundle {self.version} must list its components.")
        names = [component.name for component in self.components]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise InvalidBundleError(f"The bundle {self.version} has duplicated components: "
                                     f"{', '.join(duplicates)}")
        for component in self.components:
            if not component.name or not component.version:
                raise InvalidBundleError(f"The bundle {self.version} has an unnamed "
                                         f"or unversioned component: {component!r}")
        for changelog in self.changelogs:
            if not changelog.component or not changelog.description:
                raise InvalidBundleError(f"The bundle {self.version} has an incomplete "
                                         f"changelog: {changelog!r}")

    def handles(self, version: str) -> bool:
        """ Exact match only: no normalization, no ranges, no prefixes. """
        return self.version == version

    def as_dict(self) -> Dict[str, Any]:
        """ A plain serialisable form, e.g. for YAML/JSON reports. """
        return {
            'name': self.name,
            'version': self.version,
            'components': [
                {'name': c.name, 'version': c.version}
                for c in self.components
            ],
            'changelogs': [
                {'component': c.component, 'description': c.description, 'kind': str(c.kind)}
                for c in self.changelogs
            ],
        }


def validate_all(bundles: Iterable[Bundle]) -> None:
    """ Validate each bundle, and check that the versions are not duplicated. """
    seen = set()
    for bundle in bundles:
        bundle.validate()
        if bundle.version in seen:
            raise InvalidBundleError(f"The bundle version {bundle.version} is duplicated.")
        seen.add(bundle.version)
