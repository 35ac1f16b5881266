"""Unit tests for Response, Body and RawResult."""

import io

import pytest
from pydantic import ValidationError

from file_loader.models import Body, ConnectorKind, RawResult, Response


class ForwardOnlyStream(io.RawIOBase):
    """Readable stream that cannot seek."""

    def __init__(self, data: bytes) -> None:
        self._data = io.BytesIO(data)

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray) -> int:  # type: ignore[override]
        chunk = self._data.read(len(buffer))
        buffer[: len(chunk)] = chunk
        return len(chunk)


class TestResponse:
    """Tests for Response."""

    @pytest.mark.parametrize("status_code", [99, 600, 0])
    def test_status_out_of_range(self, status_code: int) -> None:
        """Test that statuses outside [100, 599] are rejected."""
        with pytest.raises(ValueError, match="outside"):
            Response(status_code)

    def test_headers_case_insensitive_with_duplicates(self) -> None:
        """Test header lookups and duplicate preservation."""
        response = Response(
            200,
            headers=[
                ("Set-Cookie", "a=1"),
                ("Content-Type", "text/plain"),
                ("Set-Cookie", "b=2"),
            ],
        )

        assert response.headers["content-type"] == "text/plain"
        assert response.headers.get_list("SET-COOKIE") == ["a=1", "b=2"]
        assert response.get_header_line("set-cookie") == "a=1, b=2"
        assert response.get_header_line("X-Missing") == ""

    def test_default_reason_phrase(self) -> None:
        """Test that the reason phrase defaults to the standard one."""
        assert Response(200).reason_phrase == "OK"
        assert Response(404).reason_phrase == "Not Found"
        assert Response(200, reason_phrase="Fine").reason_phrase == "Fine"

    def test_body_read_once(self) -> None:
        """Test that the body is consumed by reading."""
        response = Response(200, body=b"abc")

        assert response.get_contents() == b"abc"
        assert response.get_contents() == b""

        response.body.rewind()
        assert response.text == "abc"

    def test_is_success(self) -> None:
        """Test the 2xx check."""
        assert Response(200).is_success is True
        assert Response(204).is_success is True
        assert Response(304).is_success is False
        assert Response(404).is_success is False

    def test_from_raw(self) -> None:
        """Test wrapping a connector result."""
        raw = RawResult(
            status_code=200,
            reason_phrase="OK",
            headers=[("Content-Length", "4")],
            body_bytes=b"data",
            url="http://example.com/data",
        )

        response = Response.from_raw(raw)

        assert response.status_code == 200
        assert response.headers["content-length"] == "4"
        assert response.get_contents() == b"data"

    def test_context_manager_closes_body(self) -> None:
        """Test that leaving the with block closes the body."""
        with Response(200, body=b"abc") as response:
            assert response.body.closed is False

        assert response.body.closed is True

    def test_repr(self) -> None:
        """Test the debug representation."""
        assert repr(Response(404)) == "<Response [404 Not Found]>"


class TestBody:
    """Tests for Body."""

    def test_size_keeps_position(self) -> None:
        """Test that size does not move the read position."""
        body = Body.from_bytes(b"hello world")
        body.read(6)

        assert body.size == 11
        assert body.read() == b"world"

    def test_non_seekable_stream(self) -> None:
        """Test that rewind is refused on a forward-only stream."""
        body = Body(ForwardOnlyStream(b"line\n"))

        assert body.seekable() is False
        assert body.size is None
        assert body.get_contents() == b"line\n"
        with pytest.raises(io.UnsupportedOperation):
            body.rewind()

    def test_iterates_lines(self) -> None:
        """Test iterating over the body yields lines."""
        body = Body.from_bytes(b"one\ntwo\n")

        assert list(body) == [b"one\n", b"two\n"]


class TestRawResult:
    """Tests for RawResult."""

    def test_status_range_validated(self) -> None:
        """Test that the status is kept within [100, 599]."""
        with pytest.raises(ValidationError):
            RawResult(status_code=700)

    def test_body_size(self) -> None:
        """Test the body size."""
        assert RawResult(status_code=200, body_bytes=b"12345").body_size == 5


class TestConnectorKind:
    """Tests for ConnectorKind."""

    def test_mode_tags(self) -> None:
        """Test that the historical mode tags map to members."""
        assert ConnectorKind("local") is ConnectorKind.LOCAL
        assert ConnectorKind("socket") is ConnectorKind.SOCKET
        assert ConnectorKind("URL-wrapper") is ConnectorKind.STREAM
        assert ConnectorKind("cURL") is ConnectorKind.CURL_LIKE
        assert ConnectorKind.SOCKET == "socket"
