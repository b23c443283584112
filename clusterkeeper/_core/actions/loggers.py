"""
Per-cluster logging: every message of a pass carries the cluster's reference.

The reference is used both for prefixing the plain-text messages
(``[al9qy] found the namespace``) and as a structured field in JSON logs
(``{"cluster": {"id": "al9qy", ...}, ...}``), so that the messages
of the concurrent passes of different clusters could be told apart.
"""
import copy
import enum
import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Optional, TextIO, Tuple, Union

from pythonjsonlogger.core import RESERVED_ATTRS as _pjl_RESERVED_ATTRS
from pythonjsonlogger.json import JsonFormatter as _pjl_JsonFormatter

from clusterkeeper._cogs.helpers import typedefs
from clusterkeeper._cogs.structs import clusters

logger = logging.getLogger('clusterkeeper.clusters')

# A key for cluster references in JSON logs, as seen by the log parsers.
DEFAULT_JSON_REFKEY = 'cluster'


class LogFormat(enum.Enum):
    """ Log formats, as specified on CLI. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-24.24s [%(levelname)-8.8s] %(message)s'
    JSON = '-json-'  # not used for formatting, only for detection


class ClusterFormatter(logging.Formatter):
    pass


class ClusterTextFormatter(ClusterFormatter, logging.Formatter):
    pass


class ClusterJsonFormatter(ClusterFormatter, _pjl_JsonFormatter):
    def __init__(
            self,
            *args: Any,
            refkey: Optional[str] = None,
            **kwargs: Any,
    ) -> None:
        # Avoid type checking, as the args are not in the parent consructor.
        reserved_attrs = set(kwargs.pop('reserved_attrs', _pjl_RESERVED_ATTRS))
        reserved_attrs |= {'cluster_ref'}
        kwargs |= dict(reserved_attrs=reserved_attrs)
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, **kwargs)
        self._refkey: str = refkey or DEFAULT_JSON_REFKEY

    def add_fields(
            self,
            log_record: dict[str, object],
            record: logging.LogRecord,
            message_dict: dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if self._refkey and hasattr(record, 'cluster_ref'):
            log_record[self._refkey] = getattr(record, 'cluster_ref')

        if 'severity' not in log_record:
            log_record['severity'] = (
                "debug" if record.levelno <= logging.DEBUG else
                "info" if record.levelno <= logging.INFO else
                "warn" if record.levelno <= logging.WARNING else
                "error" if record.levelno <= logging.ERROR else
                "fatal")


class ClusterPrefixingMixin(ClusterFormatter):
    def format(self, record: logging.LogRecord) -> str:
        if hasattr(record, 'cluster_ref'):
            ref = getattr(record, 'cluster_ref')
            record = copy.copy(record)  # shallow
            record.msg = f"[{ref.get('id', '')}] {record.msg}"
        return super().format(record)


class ClusterPrefixingTextFormatter(ClusterPrefixingMixin, ClusterTextFormatter):
    pass


class ClusterPrefixingJsonFormatter(ClusterPrefixingMixin, ClusterJsonFormatter):
    pass


class ClusterLogger(typedefs.LoggerAdapter):
    """
    A logger/adapter to carry the cluster identifiers for formatting.

    Constructed once per pass of each individual cluster,
    and passed to all the reconcilers of that pass via their cause.
    """

    def __init__(self, *, cluster: clusters.ClusterSpec) -> None:
        super().__init__(logger, dict(cluster_ref=dict(cluster.ref)))

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> Tuple[str, MutableMapping[str, Any]]:
        # Native logging overwrites the message's extra with the adapter's extra.
        # We merge them, so that both message's & adapter's extras are available.
        kwargs["extra"] = (self.extra or {}) | kwargs.get('extra', {})
        return msg, kwargs


# Used to identify and remove our own handlers on re-configuration (e.g. in tests or CLI re-runs).
if TYPE_CHECKING:
    class _ClusterKeeperStreamHandler(logging.StreamHandler[TextIO]):
        pass
else:
    class _ClusterKeeperStreamHandler(logging.StreamHandler):
        pass


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        log_prefix: Optional[bool] = False,
        log_refkey: Optional[str] = None,
) -> None:
    log_level = 'DEBUG' if debug or verbose else 'WARNING' if quiet else 'INFO'
    formatter = make_formatter(log_format=log_format, log_prefix=log_prefix, log_refkey=log_refkey)
    handler = _ClusterKeeperStreamHandler()
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.handlers[:] = [h for h in root.handlers if not isinstance(h, _ClusterKeeperStreamHandler)]
    root.addHandler(handler)
    root.setLevel(log_level)

    # Prevent the low-level logging unless in the debug mode. Keep only the engine's messages.
    for name in ['asyncio', 'aiohttp']:
        lib_logger = logging.getLogger(name)
        lib_logger.propagate = bool(debug)
        if not debug:
            lib_logger.handlers[:] = [logging.NullHandler()]


def make_formatter(
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        log_prefix: Optional[bool] = False,
        log_refkey: Optional[str] = None,
) -> ClusterFormatter:
    log_prefix = log_prefix if log_prefix is not None else bool(log_format is not LogFormat.JSON)
    match log_format:
        case LogFormat.JSON:
            if log_prefix:
                return ClusterPrefixingJsonFormatter(refkey=log_refkey)
            else:
                return ClusterJsonFormatter(refkey=log_refkey)
        case LogFormat():
            if log_prefix:
                return ClusterPrefixingTextFormatter(log_format.value)
            else:
                return ClusterTextFormatter(log_format.value)
        case str():
            if log_prefix:
                return ClusterPrefixingTextFormatter(log_format)
            else:
                return ClusterTextFormatter(log_format)
        case _:
            raise ValueError(f"Unsupported log format: {log_format!r}")
