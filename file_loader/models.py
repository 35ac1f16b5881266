"""Data models for fetch results and responses."""

import io
from collections.abc import Iterator
from enum import Enum
from http import HTTPStatus
from types import TracebackType
from typing import BinaryIO

import httpx
from pydantic import BaseModel, ConfigDict, Field

from file_loader.constants import HTTP_STATUS_MAX, HTTP_STATUS_MIN


class ConnectorKind(str, Enum):
    """Transport used to serve a request.

    The values are the historical mode tags, so plain strings such as
    ``"socket"`` compare equal to the members.
    """

    LOCAL = "local"
    SOCKET = "socket"
    STREAM = "URL-wrapper"
    CURL_LIKE = "cURL"


class RawResult(BaseModel):
    """Raw outcome of one connector fetch."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(
        ge=HTTP_STATUS_MIN, le=HTTP_STATUS_MAX, description="HTTP status code"
    )
    reason_phrase: str = Field(default="", description="Status line reason")
    headers: list[tuple[str, str]] = Field(
        default_factory=list, description="Header pairs in received order"
    )
    body_bytes: bytes = Field(default=b"", description="Response body")
    url: str = Field(default="", description="Requested URI or local path")

    @property
    def body_size(self) -> int:
        """Get the size of the body in bytes."""
        return len(self.body_bytes)


def default_reason_phrase(status_code: int) -> str:
    """Standard reason phrase for a status code, or an empty string."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


class Body:
    """Response body over a binary stream.

    Reading consumes the stream; ``rewind`` allows a second read when the
    underlying stream is seekable.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    @classmethod
    def from_bytes(cls, data: bytes) -> "Body":
        return cls(io.BytesIO(data))

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def readline(self, limit: int = -1) -> bytes:
        return self._stream.readline(limit)

    def get_contents(self) -> bytes:
        """Read everything remaining in the stream."""
        return self._stream.read()

    def seekable(self) -> bool:
        return not self._stream.closed and self._stream.seekable()

    def rewind(self) -> None:
        """Move back to the start of the stream.

        Raises:
            io.UnsupportedOperation: If the stream is not seekable.
        """
        if not self.seekable():
            msg = "body stream is not seekable"
            raise io.UnsupportedOperation(msg)
        self._stream.seek(0)

    @property
    def size(self) -> int | None:
        """Total size in bytes, if known."""
        if not self.seekable():
            return None
        position = self._stream.tell()
        end = self._stream.seek(0, io.SEEK_END)
        self._stream.seek(position)
        return end

    @property
    def closed(self) -> bool:
        return self._stream.closed

    def close(self) -> None:
        self._stream.close()

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._stream)


class Response:
    """HTTP-shaped response returned by every connector.

    Attributes:
        status_code: Status in [100, 599].
        reason_phrase: Status line reason.
        headers: Case-insensitive headers, duplicates kept in order.
        body: Readable body stream.
    """

    def __init__(
        self,
        status_code: int,
        headers: list[tuple[str, str]] | dict[str, str] | None = None,
        body: Body | bytes | None = None,
        reason_phrase: str = "",
    ) -> None:
        if not HTTP_STATUS_MIN <= status_code <= HTTP_STATUS_MAX:
            msg = f"Status code {status_code} outside [{HTTP_STATUS_MIN}, {HTTP_STATUS_MAX}]"
            raise ValueError(msg)

        self.status_code = status_code
        self.reason_phrase = reason_phrase or default_reason_phrase(status_code)
        self.headers = httpx.Headers(headers or [])
        if isinstance(body, Body):
            self.body = body
        else:
            self.body = Body.from_bytes(body or b"")

    @classmethod
    def from_raw(cls, raw: RawResult) -> "Response":
        """Wrap a connector result."""
        return cls(
            status_code=raw.status_code,
            headers=raw.headers,
            body=raw.body_bytes,
            reason_phrase=raw.reason_phrase,
        )

    @property
    def is_success(self) -> bool:
        """Check if the status is 2xx."""
        return HTTPStatus.OK <= self.status_code < HTTPStatus.MULTIPLE_CHOICES

    def get_header_line(self, name: str) -> str:
        """All values of a header joined by commas."""
        return ", ".join(self.headers.get_list(name))

    def get_contents(self) -> bytes:
        """Read the remaining body."""
        return self.body.get_contents()

    @property
    def text(self) -> str:
        """Decode the remaining body as UTF-8."""
        return self.get_contents().decode("utf-8", errors="replace")

    def close(self) -> None:
        self.body.close()

    def __enter__(self) -> "Response":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Response [{self.status_code} {self.reason_phrase}]>"
