"""
Detecting the package's own version (for the User-Agent and the CLI).

The version is determined only once at startup when the code is loaded.
"""
from typing import Optional

version: Optional[str] = None

try:
    import importlib.metadata
except ImportError:
    pass
else:
    try:
        name, *_ = __name__.split('.')  # usually "clusterkeeper", unless renamed/forked.
        version = importlib.metadata.version(name)
    except Exception:
        pass  # not installed, e.g. running from a source checkout.
