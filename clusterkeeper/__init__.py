"""
The main clusterkeeper module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the engine's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from clusterkeeper._cogs.clients.auth import (
    authentication,
)
from clusterkeeper._cogs.clients.errors import (
    APIError,
    APIClientError,
    APIServerError,
    APINotFoundError,
    APIConflictError,
    APIForbiddenError,
    APIUnauthorizedError,
)
from clusterkeeper._cogs.clients.logins import (
    login,
    login_with_kubeconfig,
    login_with_service_account,
)
from clusterkeeper._cogs.configs.configuration import (
    OperatorSettings,
)
from clusterkeeper._cogs.helpers.typedefs import (
    Logger,
)
from clusterkeeper._cogs.helpers.versions import (
    version as __version__,
)
from clusterkeeper._cogs.structs.bodies import (
    RawBody,
)
from clusterkeeper._cogs.structs.bundles import (
    Bundle,
    Changelog,
    ChangelogKind,
    Component,
    InvalidBundleError,
)
from clusterkeeper._cogs.structs.clusters import (
    ClusterSpec,
    InvalidClusterError,
    Node,
)
from clusterkeeper._cogs.structs.credentials import (
    ConnectionInfo,
    LoginError,
)
from clusterkeeper._cogs.structs.patches import (
    Patch,
)
from clusterkeeper._core.actions.execution import (
    PermanentError,
    TemporaryError,
    InvalidConfigError,
    NoResourceSetError,
    AmbiguousResourceSetError,
)
from clusterkeeper._core.actions.loggers import (
    configure,
    LogFormat,
    ClusterLogger,
)
from clusterkeeper._core.reactor.processing import (
    Controller,
    PassResult,
)
from clusterkeeper._core.reactor.resourcesets import (
    ResourceSet,
    make_resource_set,
)
from clusterkeeper._core.resources.base import (
    Cause,
    CRUDOps,
    CRUDResource,
    Observation,
    Reason,
    Verdict,
)
from clusterkeeper._kits.generations import (
    GENERATIONS,
    Generation,
    make_controller,
)
from clusterkeeper._kits.templates import (
    Templates,
)

__all__ = [
    'authentication', 'login', 'login_with_kubeconfig', 'login_with_service_account',
    'ConnectionInfo', 'LoginError',
    'APIError', 'APIClientError', 'APIServerError',
    'APINotFoundError', 'APIConflictError', 'APIForbiddenError', 'APIUnauthorizedError',
    'OperatorSettings',
    'Logger', 'configure', 'LogFormat', 'ClusterLogger',
    'RawBody', 'Patch',
    'Bundle', 'Changelog', 'ChangelogKind', 'Component', 'InvalidBundleError',
    'ClusterSpec', 'Node', 'InvalidClusterError',
    'PermanentError', 'TemporaryError', 'InvalidConfigError',
    'NoResourceSetError', 'AmbiguousResourceSetError',
    'Controller', 'PassResult', 'ResourceSet', 'make_resource_set',
    'Cause', 'CRUDOps', 'CRUDResource', 'Observation', 'Reason', 'Verdict',
    'GENERATIONS', 'Generation', 'make_controller', 'Templates',
]
