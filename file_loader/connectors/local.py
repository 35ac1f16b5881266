"""Connector that reads a file from the local filesystem."""

import io
import os
from email.utils import formatdate
from pathlib import Path

import structlog

from file_loader.connectors.base import LineStreamMixin
from file_loader.constants import HTTP_STATUS_OK
from file_loader.errors import FieldMissingError, LocalFileNotReadableError
from file_loader.models import ConnectorKind, RawResult


logger = structlog.get_logger()


class LocalFileConnector(LineStreamMixin):
    """Serve a configured local path as if it were an HTTP 200 response.

    The ``uri`` argument of ``fetch`` is ignored. Readability is checked
    right before every access, never cached.
    """

    kind = ConnectorKind.LOCAL
    supports_line_streaming = True

    def __init__(
        self, path: str, log: structlog.stdlib.BoundLogger | None = None
    ) -> None:
        """Initialize the connector.

        Args:
            path: Local file to serve.
            log: Logger to use; the module logger if None.

        Raises:
            FieldMissingError: If the path is empty.
        """
        if not path:
            raise FieldMissingError("localFile")

        self.path = path
        self._log = (log or logger).bind(
            component="connector", connector=self.kind.value
        )

    def _check_readable(self) -> Path:
        path = Path(self.path)
        if not path.exists():
            raise LocalFileNotReadableError(self.path, "does not exist")
        if not path.is_file():
            raise LocalFileNotReadableError(self.path, "is not a file")
        if not os.access(path, os.R_OK):
            raise LocalFileNotReadableError(self.path, "is not readable")
        return path

    def fetch(self, uri: str = "") -> RawResult:
        """Read the configured file in full.

        Raises:
            LocalFileNotReadableError: If the file cannot be read.
        """
        path = self._check_readable()
        try:
            data = path.read_bytes()
            mtime = path.stat().st_mtime
        except OSError as e:
            raise LocalFileNotReadableError(self.path, "could not be read") from e

        self._log.debug("local_file_read", path=self.path, bytes=len(data))

        return RawResult(
            status_code=HTTP_STATUS_OK,
            reason_phrase="OK",
            headers=[
                ("Content-Length", str(len(data))),
                ("Last-Modified", formatdate(mtime, usegmt=True)),
            ],
            body_bytes=data,
            url=self.path,
        )

    def get_modification_time(self) -> int:
        """Return the file's last-modified time as a Unix timestamp.

        Raises:
            LocalFileNotReadableError: If the file cannot be read.
        """
        path = self._check_readable()
        return int(path.stat().st_mtime)

    def _open_lines(self, uri: str) -> io.BufferedReader:
        return self._check_readable().open("rb")
