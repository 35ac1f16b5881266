"""Connector that speaks HTTP/1.0 over a raw socket."""

import io
import re
import socket
import ssl
from typing import NamedTuple
from urllib.parse import quote, urlsplit

import structlog

from file_loader.config import LoaderConfig
from file_loader.connectors.base import LineStreamMixin
from file_loader.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_HTTP_PORT,
    DEFAULT_HTTPS_PORT,
    HTTP_STATUS_MAX,
    HTTP_STATUS_MIN,
    HTTP_STATUS_OK,
    MAX_LINE_LENGTH,
    PROXY_AUTH_NTLM,
    PROXY_PROTOCOL_HTTPS,
    REQUEST_HEADERS,
)
from file_loader.errors import ConnectionFailedError, InvalidOptionError
from file_loader.models import ConnectorKind, RawResult
from file_loader.redact import redact_url_credentials
from file_loader.stream_context import (
    BASIC_AND_NTLM,
    ConnectionContext,
    build_stream_context,
)


logger = structlog.get_logger()

_STATUS_LINE = re.compile(r"^HTTP/\d(?:\.\d)?\s+(\d{3})(?:\s+(.*))?$", re.IGNORECASE)

_PATH_SAFE = "/%:@!$&'()*+,;="
_QUERY_SAFE = _PATH_SAFE + "?"


class _Target(NamedTuple):
    scheme: str
    host: str
    port: int
    host_header: str
    path: str
    absolute_uri: str


def parse_target(uri: str) -> _Target:
    """Split a URI into the pieces needed for the request.

    Raises:
        ConnectionFailedError: If the URI has no host.
    """
    parts = urlsplit(uri)
    if not parts.hostname:
        msg = f"invalid URL, no host in {redact_url_credentials(uri)}"
        raise ConnectionFailedError(msg, uri)

    try:
        host = parts.hostname.encode("idna").decode("ascii")
    except UnicodeError as e:
        msg = f"invalid host name in {redact_url_credentials(uri)}"
        raise ConnectionFailedError(msg, uri) from e

    scheme = parts.scheme.lower() or "http"
    default_port = DEFAULT_HTTPS_PORT if scheme == "https" else DEFAULT_HTTP_PORT
    port = parts.port or default_port

    host_header = host
    if parts.port is not None and parts.port != default_port:
        host_header = f"{host}:{parts.port}"

    # Existing escapes are kept; other unsafe characters become UTF-8 %XX
    path = quote(parts.path or "/", safe=_PATH_SAFE)
    if parts.query:
        path += "?" + quote(parts.query, safe=_QUERY_SAFE)

    return _Target(
        scheme=scheme,
        host=host,
        port=port,
        host_header=host_header,
        path=path,
        absolute_uri=f"{scheme}://{host_header}{path}",
    )


def parse_status_line(line: str) -> tuple[int, str] | None:
    """Parse ``HTTP/1.x 200 OK`` into (200, "OK").

    Returns:
        Status code and reason, or None if the line is not a status line.
    """
    match = _STATUS_LINE.match(line.strip())
    if match is None:
        return None
    code = int(match.group(1))
    if not HTTP_STATUS_MIN <= code <= HTTP_STATUS_MAX:
        return None
    return code, (match.group(2) or "").strip()


def encode_head(head: str, user_agent: str) -> bytes:
    """Encode a request head for the wire.

    Target and proxy values are ASCII by construction, so only the user
    agent can fall outside latin-1.

    Raises:
        InvalidOptionError: If the head cannot be sent unchanged.
    """
    try:
        return head.encode("latin-1")
    except UnicodeEncodeError as e:
        raise InvalidOptionError("user_agent", user_agent) from e


def split_head(raw: bytes) -> tuple[bytes, bytes]:
    """Split a raw response at the first blank line.

    Both ``\\r\\n\\r\\n`` and ``\\n\\n`` end the header block; the body is
    returned untouched.
    """
    candidates = [
        (index, len(separator))
        for separator in (b"\r\n\r\n", b"\n\n")
        if (index := raw.find(separator)) != -1
    ]
    if not candidates:
        return raw, b""
    index, length = min(candidates)
    return raw[:index], raw[index + length :]


class SocketConnector(LineStreamMixin):
    """Fetch a URI with a hand-written HTTP/1.0 request over a socket.

    A non-200 status yields a result with an empty body instead of an
    exception; interpreting the status is left to the caller.
    """

    kind = ConnectorKind.SOCKET
    supports_line_streaming = True

    def __init__(
        self,
        config: LoaderConfig,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the connector.

        Args:
            config: Loader configuration, read at fetch time.
            log: Logger to use; the module logger if None.
        """
        self._config = config
        self._log = (log or logger).bind(
            component="connector", connector=self.kind.value
        )

    def fetch(self, uri: str) -> RawResult | None:
        """Fetch a URI.

        Returns:
            RawResult, or None if the server sent nothing parseable.

        Raises:
            ConnectionFailedError: If the socket cannot be opened.
            InvalidOptionError: Unsupported proxy option value.
        """
        context = build_stream_context(self._config, BASIC_AND_NTLM)
        target = parse_target(uri)

        stream = self._connect(target, context, uri)
        try:
            raw = stream.read()
        except OSError as e:
            msg = f"could not read the response: {e}"
            raise ConnectionFailedError(msg, uri) from e
        finally:
            stream.close()

        if not raw:
            self._log.warning("empty_response", url=redact_url_credentials(uri))
            return None

        return self._parse_response(raw, uri)

    def _open_lines(self, uri: str) -> io.BufferedReader:
        context = build_stream_context(self._config, BASIC_AND_NTLM)
        target = parse_target(uri)

        stream = self._connect(target, context, uri)
        try:
            # Skip the header block so only body lines are streamed
            while stream.readline(MAX_LINE_LENGTH) not in (b"\r\n", b"\n", b""):
                pass
        except OSError as e:
            stream.close()
            msg = f"could not read the response: {e}"
            raise ConnectionFailedError(msg, uri) from e
        return stream

    def _connect(
        self, target: _Target, context: ConnectionContext, uri: str
    ) -> io.BufferedReader:
        """Open the connection and send the request.

        Returns:
            Buffered reader over the response; closing it closes the socket.

        Raises:
            ConnectionFailedError: If connecting, the tunnel or sending fails.
            InvalidOptionError: If the user agent cannot be sent as latin-1.
        """
        tunnel = context.uses_proxy and target.scheme == "https"
        request = encode_head(
            self._build_request(
                target, context, absolute=context.uses_proxy and not tunnel
            ),
            context.user_agent,
        )

        if context.uses_proxy and context.proxy_host is not None:
            default_port = (
                DEFAULT_HTTPS_PORT
                if context.proxy_protocol == PROXY_PROTOCOL_HTTPS
                else DEFAULT_HTTP_PORT
            )
            address = (context.proxy_host, context.proxy_port or default_port)
        else:
            address = (target.host, target.port)

        try:
            sock = socket.create_connection(address, timeout=context.timeout)
        except OSError as e:
            msg = "could not initialize the socket to load the data"
            raise ConnectionFailedError(msg, uri) from e

        # The socket is closed on every failure below, whatever is raised
        try:
            if context.uses_proxy and context.proxy_protocol == PROXY_PROTOCOL_HTTPS:
                sock = ssl.create_default_context().wrap_socket(
                    sock, server_hostname=context.proxy_host
                )

            if tunnel:
                self._open_tunnel(sock, target, context, uri)

            if target.scheme == "https":
                sock = ssl.create_default_context().wrap_socket(
                    sock, server_hostname=target.host
                )

            sock.sendall(request)
            stream = sock.makefile("rb")
        except OSError as e:
            sock.close()
            msg = f"could not send the request: {e}"
            raise ConnectionFailedError(msg, uri) from e
        except BaseException:
            sock.close()
            raise

        # The reader keeps the connection open until it is closed
        sock.close()

        self._log.debug(
            "request_sent",
            url=redact_url_credentials(uri),
            via_proxy=context.uses_proxy,
        )
        return stream

    def _build_request(
        self, target: _Target, context: ConnectionContext, absolute: bool
    ) -> str:
        request = REQUEST_HEADERS.format(
            path=target.absolute_uri if absolute else target.path,
            host=target.host_header,
            user_agent=context.user_agent,
        )
        if absolute and context.proxy_authorization is not None:
            request = (
                request[:-2]
                + f"Proxy-Authorization: {context.proxy_authorization}\r\n\r\n"
            )
        elif absolute and context.proxy_auth == PROXY_AUTH_NTLM:
            self._log.warning(
                "ntlm_proxy_auth_unsupported",
                proxy_url=redact_url_credentials(context.proxy_url or ""),
            )
        return request

    def _open_tunnel(
        self,
        sock: socket.socket,
        target: _Target,
        context: ConnectionContext,
        uri: str,
    ) -> None:
        """Ask the proxy for a CONNECT tunnel to the target."""
        authority = f"{target.host}:{target.port}"
        request = f"CONNECT {authority} HTTP/1.0\r\nHost: {authority}\r\n"
        if context.proxy_authorization is not None:
            request += f"Proxy-Authorization: {context.proxy_authorization}\r\n"
        sock.sendall((request + "\r\n").encode("latin-1"))

        reply = b""
        while b"\r\n\r\n" not in reply and b"\n\n" not in reply:
            chunk = sock.recv(DEFAULT_CHUNK_SIZE)
            if not chunk:
                break
            reply += chunk

        head, _ = split_head(reply)
        first_line = head.decode("latin-1").splitlines()[0] if head else ""
        status = parse_status_line(first_line)
        if status is None or status[0] != HTTP_STATUS_OK:
            msg = f"proxy refused the tunnel: {first_line or 'no response'}"
            raise ConnectionFailedError(msg, uri)

    def _parse_response(self, raw: bytes, uri: str) -> RawResult | None:
        head, body = split_head(raw)
        lines = head.decode("latin-1").replace("\r\n", "\n").split("\n")

        status = parse_status_line(lines[0])
        if status is None:
            self._log.warning(
                "invalid_status_line",
                url=redact_url_credentials(uri),
                status_line=lines[0][:200],
            )
            return None
        status_code, reason = status

        headers: list[tuple[str, str]] = []
        for line in lines[1:]:
            if not line.strip():
                continue
            name, _, value = line.partition(":")
            headers.append((name.strip(), value.strip()))

        if status_code != HTTP_STATUS_OK:
            self._log.info(
                "non_ok_status",
                url=redact_url_credentials(uri),
                status_code=status_code,
            )
            body = b""

        return RawResult(
            status_code=status_code,
            reason_phrase=reason,
            headers=headers,
            body_bytes=body,
            url=uri,
        )
