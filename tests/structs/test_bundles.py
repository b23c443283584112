import pytest

from clusterkeeper._cogs.structs.bundles import Bundle, Changelog, ChangelogKind, Component, \
                                               InvalidBundleError, validate_all

COMPONENTS = [Component(name='kubernetes', version='1.9.2'), Component(name='etcd', version='3.3.1')]


def test_lists_are_converted_to_tuples():
    bundle = Bundle(name='kk', version='1.0.0', components=COMPONENTS)
    assert isinstance(bundle.components, tuple)
    assert isinstance(bundle.changelogs, tuple)


@pytest.mark.parametrize('version', ['1.0.0', '2.10.3', '1.0.0-alpha.1', '1.0.0+build.5'])
def test_valid_bundles(version):
    bundle = Bundle(name='kk', version=version, components=COMPONENTS)
    bundle.validate()


@pytest.mark.parametrize('version', ['', '1.0', 'v1.0.0', '01.0.0', '1.0.0.0', 'latest'])
def test_invalid_versions(version):
    bundle = Bundle(name='kk', version=version, components=COMPONENTS)
    with pytest.raises(InvalidBundleError, match=r"semver"):
        bundle.validate()


def test_empty_names():
    bundle = Bundle(name='', version='1.0.0', components=COMPONENTS)
    with pytest.raises(InvalidBundleError, match=r"name"):
        bundle.validate()


def test_no_components():
    bundle = Bundle(name='kk', version='1.0.0')
    with pytest.raises(InvalidBundleError, match=r"components"):
        bundle.validate()


def test_duplicated_components():
    bundle = Bundle(name='kk', version='1.0.0', components=COMPONENTS + [COMPONENTS[0]])
    with pytest.raises(InvalidBundleError, match=r"duplicated components: kubernetes"):
        bundle.validate()


def test_incomplete_changelogs():
    bundle = Bundle(name='kk', version='1.0.0', components=COMPONENTS,
                    changelogs=[Changelog(component='etcd', description='', kind=ChangelogKind.FIXED)])
    with pytest.raises(InvalidBundleError, match=r"changelog"):
        bundle.validate()


@pytest.mark.parametrize('version, expected', [
    ('1.0.0', True),
    ('1.0', False),
    ('v1.0.0', False),
    ('1.0.0 ', False),
    ('1.0.1', False),
])
def test_handling_is_an_exact_match(version, expected):
    bundle = Bundle(name='kk', version='1.0.0', components=COMPONENTS)
    assert bundle.handles(version) is expected


def test_serialisation():
    bundle = Bundle(name='kk', version='1.0.0', components=COMPONENTS[:1],
                    changelogs=[Changelog(component='etcd', description='Updated.',
                                          kind=ChangelogKind.CHANGED)])
    assert bundle.as_dict() == {
        'name': 'kk',
        'version': '1.0.0',
        'components': [{'name': 'kubernetes', 'version': '1.9.2'}],
        'changelogs': [{'component': 'etcd', 'description': 'Updated.', 'kind': 'changed'}],
    }


def test_duplicated_versions_across_bundles():
    bundle1 = Bundle(name='kk', version='1.0.0', components=COMPONENTS)
    bundle2 = Bundle(name='kk2', version='1.0.0', components=COMPONENTS)
    with pytest.raises(InvalidBundleError, match=r"duplicated"):
        validate_all([bundle1, bundle2])
