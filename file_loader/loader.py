"""Loader: fetch a data file and its modification time.

The loader owns the configuration and the target (a local path, or a data
URL plus a version URL). Every call resolves a connector through the
factory, fetches synchronously and returns a fresh result.
"""

import re
import time
from collections.abc import Iterable, Iterator, Mapping
from datetime import UTC
from email.utils import formatdate

import structlog
from dateutil import parser as date_parser

from file_loader.capabilities import Capabilities
from file_loader.config import LoaderConfig
from file_loader.connectors.base import Connector, LineStreamMixin
from file_loader.connectors.local import LocalFileConnector
from file_loader.errors import (
    CannotLoadLocalFileError,
    FieldMissingError,
    FileLoaderError,
    InvalidDateTimeError,
    InvalidOptionError,
    RemoteUpdateNotPossibleError,
)
from file_loader.factory import ConnectorFactory, Mode
from file_loader.metrics import LoaderMetrics
from file_loader.models import ConnectorKind, RawResult, Response
from file_loader.redact import redact_url_credentials
from file_loader.settings import LoaderSettings, get_settings


_INTEGER = re.compile(r"-?\d+")


def parse_modification_time(payload: bytes, source: str) -> int:
    """Parse a version payload into a Unix timestamp.

    Accepts an integer timestamp or any date string dateutil understands;
    dates without a timezone are taken as UTC.

    Args:
        payload: Raw body of the version resource.
        source: Where the payload came from, for the error message.

    Returns:
        Unix timestamp in seconds.

    Raises:
        InvalidDateTimeError: If the payload is empty or not a date.
    """
    text = payload.decode("utf-8", errors="replace").strip()
    if not text:
        raise InvalidDateTimeError(source, text)

    if _INTEGER.fullmatch(text):
        return int(text)

    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError) as e:
        raise InvalidDateTimeError(source, text[:100]) from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return int(parsed.timestamp())


class Loader:
    """Load a file from a local or remote location."""

    def __init__(
        self,
        options: Mapping[str, object] | None = None,
        *,
        config: LoaderConfig | None = None,
        mode: Mode = None,
        factory: ConnectorFactory | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            options: Initial proxy options, keyed by option name.
            config: Configuration to use; defaults if None.
            mode: Connector kind, a pre-built connector, or None for auto.
            factory: Connector factory; one probing the runtime if None.
            logger: Logger to use; the module logger if None.

        Raises:
            InvalidOptionError: Unknown option key in ``options``.
        """
        self.config = config or LoaderConfig()
        base_log = logger or structlog.get_logger()
        self._log = base_log.bind(component="loader")
        self._factory = factory or ConnectorFactory(log=base_log)
        self._metrics = LoaderMetrics.get_instance()
        self._mode: Mode = mode
        self._local_file: str | None = None
        self._remote_data_url: str | None = None
        self._remote_version_url: str | None = None

        if options is not None:
            self.set_options(options)

    @classmethod
    def from_settings(
        cls, settings: LoaderSettings | None = None, **kwargs: object
    ) -> "Loader":
        """Create a loader configured from the environment.

        Proxy settings found in ``http_proxy`` / ``https_proxy`` are applied.
        """
        if settings is None:
            settings = get_settings()

        config = LoaderConfig(timeout=settings.timeout, user_agent=settings.user_agent)
        kwargs.setdefault("factory", ConnectorFactory(Capabilities.probe(settings)))
        loader = cls(config=config, **kwargs)  # type: ignore[arg-type]
        loader.set_options(settings.proxy_options())
        return loader

    # Options

    def set_option(self, key: str, value: object) -> None:
        """Set a loader option.

        Raises:
            InvalidOptionError: Unknown key; the configuration is unchanged.
        """
        self.config.set_option(key, value)

    def set_options(
        self, options: Mapping[str, object] | Iterable[tuple[str, object]]
    ) -> None:
        """Set multiple loader options at once."""
        self.config.set_options(options)

    def get_option(self, key: str) -> object:
        """Get a loader option value.

        Raises:
            InvalidOptionError: Unknown key.
        """
        return self.config.get_option(key)

    def autodetect_proxy_settings(
        self, settings: LoaderSettings | None = None
    ) -> dict[str, object]:
        """Load proxy options from the ``http_proxy`` / ``https_proxy`` environment.

        Returns:
            The options that were applied.
        """
        if settings is None:
            settings = get_settings()

        options = settings.proxy_options()
        self.set_options(options)
        if options:
            self._log.info(
                "proxy_autodetected",
                proxy_host=options.get("ProxyHost"),
                proxy_port=options.get("ProxyPort"),
            )
        return options

    def set_timeout(self, timeout: int) -> None:
        """Set the connect/read timeout in seconds.

        Raises:
            InvalidOptionError: If the timeout is out of range.
        """
        try:
            self.config.timeout = timeout
        except ValueError as e:
            raise InvalidOptionError("timeout", timeout) from e

    def get_timeout(self) -> int:
        return self.config.timeout

    def get_user_agent(self) -> str:
        """Return the user agent with the library version filled in."""
        return self.config.get_user_agent()

    # Target

    def set_mode(self, mode: Mode) -> None:
        """Select a connector kind, a pre-built connector, or None for auto."""
        self._mode = mode

    @property
    def mode(self) -> Mode:
        return self._mode

    def set_local_file(self, filename: str) -> None:
        """Set the local file to load.

        Raises:
            FieldMissingError: If the filename is empty.
        """
        if not filename:
            raise FieldMissingError("localFile")
        self._local_file = filename

    @property
    def local_file(self) -> str | None:
        return self._local_file

    def set_remote_data_url(self, url: str) -> None:
        """Set the URL of the remote data file.

        Raises:
            FieldMissingError: If the URL is empty.
        """
        if not url:
            raise FieldMissingError("remoteDataUrl")
        self._remote_data_url = url

    def get_remote_data_url(self) -> str | None:
        return self._remote_data_url

    def set_remote_version_url(self, url: str) -> None:
        """Set the URL returning the remote file's modification time.

        Raises:
            FieldMissingError: If the URL is empty.
        """
        if not url:
            raise FieldMissingError("remoteVerUrl")
        self._remote_version_url = url

    def get_remote_version_url(self) -> str | None:
        return self._remote_version_url

    # Operations

    def get_connector(self) -> Connector:
        """Resolve the connector for the current mode and target."""
        return self._factory.build(self.config, self._mode, self._local_file)

    def load(self) -> Response:
        """Load the data file.

        Returns:
            Response with the file content as body.

        Raises:
            FileLoaderError: On any configuration, transport or HTTP error.
        """
        connector = self.get_connector()
        if connector.kind == ConnectorKind.LOCAL:
            target = self._local_file or ""
        else:
            target = self._require_remote_data_url()

        raw = self._fetch(connector, target, operation="load")
        return Response.from_raw(raw)

    def get_modification_time(self) -> int:
        """Get the modification time of the data file.

        Returns:
            Unix timestamp: the local file's mtime, or the parsed content of
            the remote version URL.

        Raises:
            InvalidDateTimeError: If the remote version is not a date.
            FileLoaderError: On any other configuration, transport or HTTP error.
        """
        connector = self.get_connector()
        if isinstance(connector, LocalFileConnector):
            return connector.get_modification_time()

        url = self._require_remote_version_url()
        raw = self._fetch(connector, url, operation="modification_time")
        return parse_modification_time(raw.body_bytes, redact_url_credentials(url))

    def get_mtime(self) -> Response:
        """Get the modification time as a response with an RFC 2822 date body."""
        timestamp = self.get_modification_time()
        body = formatdate(timestamp, localtime=True).encode("ascii")
        return Response(
            200,
            headers=[("Content-Type", "text/plain"), ("Content-Length", str(len(body)))],
            body=body,
        )

    def iter_lines(self) -> Iterator[str]:
        """Read the data file line by line.

        The underlying handle is released when the iterator is exhausted,
        closed, or garbage collected.

        Raises:
            FileLoaderError: If the resolved connector cannot stream lines.
        """
        connector = self.get_connector()
        if not connector.supports_line_streaming or not isinstance(
            connector, LineStreamMixin
        ):
            msg = f"connector {connector.kind.value} does not support line streaming"
            raise FileLoaderError(msg)

        if connector.kind == ConnectorKind.LOCAL:
            target = self._local_file or ""
        else:
            target = self._require_remote_data_url()
        return connector.iter_lines(target)

    def _require_remote_data_url(self) -> str:
        if not self._remote_data_url:
            raise FieldMissingError("remoteDataUrl")
        return self._remote_data_url

    def _require_remote_version_url(self) -> str:
        if not self._remote_version_url:
            raise FieldMissingError("remoteVerUrl")
        return self._remote_version_url

    def _fetch(self, connector: Connector, target: str, operation: str) -> RawResult:
        """Run one fetch with logging and metrics.

        Raises:
            CannotLoadLocalFileError: Local connector returned no data.
            RemoteUpdateNotPossibleError: Remote connector returned no data.
        """
        start_time_ns = time.perf_counter_ns()
        kind = connector.kind.value
        log = self._log.bind(
            operation=operation,
            connector=kind,
            url=redact_url_credentials(target),
        )

        try:
            raw = connector.fetch(target)
            if raw is None:
                if connector.kind == ConnectorKind.LOCAL:
                    raise CannotLoadLocalFileError(target)
                raise RemoteUpdateNotPossibleError(target)
        except FileLoaderError as e:
            self._metrics.record_failure(type(e).__name__)
            log.warning("fetch_failed", error=str(e), error_code=e.code)
            raise

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_request(kind, raw.status_code, raw.body_size)
        self._metrics.record_duration(duration_ms)

        log.info(
            "fetch_complete",
            status_code=raw.status_code,
            bytes=raw.body_size,
            duration_ms=round(duration_ms, 2),
        )
        return raw
