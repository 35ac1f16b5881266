"""Load a data file from a local path or a remote URL.

The Loader picks a connector (local file, raw socket, URL stream or HTTP
client), applies timeout, user agent and proxy settings, and returns a
uniform Response.
"""

from file_loader.capabilities import Capabilities
from file_loader.config import LoaderConfig, ProxyOptions
from file_loader.constants import VERSION
from file_loader.errors import (
    CannotLoadLocalFileError,
    ConnectionFailedError,
    FieldMissingError,
    FileLoaderError,
    HttpStatusError,
    InvalidDateTimeError,
    InvalidOptionError,
    LocalFileNotReadableError,
    NoValidConnectorFoundError,
    RemoteUpdateNotPossibleError,
)
from file_loader.factory import ConnectorFactory
from file_loader.http_status import HttpError, classify
from file_loader.loader import Loader
from file_loader.models import Body, ConnectorKind, RawResult, Response
from file_loader.stream_context import ConnectionContext, build_stream_context


__version__ = VERSION

__all__ = [
    "Body",
    "CannotLoadLocalFileError",
    "Capabilities",
    "ConnectionContext",
    "ConnectionFailedError",
    "ConnectorFactory",
    "ConnectorKind",
    "FieldMissingError",
    "FileLoaderError",
    "HttpError",
    "HttpStatusError",
    "InvalidDateTimeError",
    "InvalidOptionError",
    "Loader",
    "LoaderConfig",
    "LocalFileNotReadableError",
    "NoValidConnectorFoundError",
    "ProxyOptions",
    "RawResult",
    "RemoteUpdateNotPossibleError",
    "Response",
    "__version__",
    "build_stream_context",
    "classify",
]
