"""Connector protocol and shared line-streaming support."""

import io
from collections.abc import Iterator
from types import TracebackType
from typing import Any, Protocol, runtime_checkable

import structlog

from file_loader.constants import MAX_LINE_LENGTH
from file_loader.errors import FileLoaderError
from file_loader.models import ConnectorKind, RawResult


logger = structlog.get_logger()


@runtime_checkable
class Connector(Protocol):
    """Protocol for transports that fetch one URI.

    Any object with a ``kind``, a ``supports_line_streaming`` flag and a
    ``fetch`` method can be handed to the factory as an explicit mode.
    """

    kind: ConnectorKind
    supports_line_streaming: bool

    def fetch(self, uri: str) -> RawResult | None:
        """Fetch a URI.

        Args:
            uri: Target URI (ignored by the local connector).

        Returns:
            RawResult, or None if the transport produced no data.

        Raises:
            FileLoaderError: On configuration, transport or HTTP errors.
        """
        ...


class LineStreamMixin:
    """Incremental line-by-line reads over an owned handle.

    Subclasses implement ``_open_lines`` to return a buffered binary handle
    positioned at the first body line. The handle is released by ``close``,
    on leaving a ``with`` block, and when ``iter_lines`` finishes or is
    abandoned.
    """

    supports_line_streaming = True
    _handle: io.BufferedReader | None = None
    _log: Any = logger

    def _open_lines(self, uri: str) -> io.BufferedReader:
        raise NotImplementedError

    def init(self, uri: str) -> bool:
        """Open the stream for line reads.

        Returns:
            True if the stream was opened.
        """
        self.close()
        try:
            self._handle = self._open_lines(uri)
        except (OSError, FileLoaderError) as e:
            self._log.warning("line_stream_init_failed", uri=uri, error=str(e))
            return False
        return True

    def is_valid(self) -> bool:
        """Check that the stream is open and not at its end."""
        if self._handle is None or self._handle.closed:
            return False
        return self._handle.peek(1) != b""

    def next_line(self) -> str:
        """Read one line, without its terminator."""
        if self._handle is None:
            msg = "line stream is not initialized"
            raise FileLoaderError(msg)

        line = self._handle.readline(MAX_LINE_LENGTH)
        if line.endswith(b"\n"):
            line = line[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
        return line.decode("utf-8", errors="replace")

    def close(self) -> None:
        """Release the open handle, if any."""
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.close()

    def iter_lines(self, uri: str) -> Iterator[str]:
        """Yield the lines of a URI, closing the handle on every exit path.

        Raises:
            FileLoaderError: If the stream cannot be opened.
        """
        self.close()
        self._handle = self._open_lines(uri)
        try:
            while self.is_valid():
                yield self.next_line()
        finally:
            self.close()

    def __enter__(self) -> "LineStreamMixin":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
