"""Connector that reads a URI through the standard URL opener."""

import http.client
import urllib.error
import urllib.request

import structlog

from file_loader.config import LoaderConfig
from file_loader.errors import ConnectionFailedError
from file_loader.http_status import classify
from file_loader.models import ConnectorKind, RawResult
from file_loader.redact import redact_headers, redact_url_credentials
from file_loader.stream_context import (
    BASIC_ONLY,
    ConnectionContext,
    build_stream_context,
)


logger = structlog.get_logger()


class StreamConnector:
    """Fetch a URI as a buffered stream from ``urllib.request``.

    Error statuses are read like any other response, then mapped to an
    exception. Only Basic proxy authentication is available here.
    """

    kind = ConnectorKind.STREAM
    supports_line_streaming = False

    def __init__(
        self,
        config: LoaderConfig,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._config = config
        self._log = (log or logger).bind(
            component="connector", connector=self.kind.value
        )

    def fetch(self, uri: str) -> RawResult | None:
        """Fetch a URI.

        Returns:
            RawResult for a non-error status.

        Raises:
            ConnectionFailedError: If the connection cannot be established.
            HttpStatusError: For 4xx/5xx responses.
            InvalidOptionError: Unsupported proxy option value.
        """
        context = build_stream_context(self._config, BASIC_ONLY)
        opener = self._build_opener(context)
        headers = context.request_headers()
        request = urllib.request.Request(
            uri, headers=dict(headers), method=context.method
        )

        log = self._log.bind(
            url=redact_url_credentials(uri), headers=redact_headers(headers)
        )

        try:
            response = opener.open(request, timeout=context.timeout)
        except urllib.error.HTTPError as e:
            # The error response still carries status, headers and body
            response = e
        except (
            urllib.error.URLError,
            http.client.HTTPException,
            OSError,
            ValueError,
        ) as e:
            msg = f"could not initialize the connection to load the data: {e}"
            raise ConnectionFailedError(msg, uri) from e

        try:
            with response:
                status_code = response.status
                reason = response.reason
                response_headers = list(response.headers.items())
                body = response.read()
        except (http.client.HTTPException, OSError) as e:
            msg = f"could not read the response: {e}"
            raise ConnectionFailedError(msg, uri) from e

        if status_code is None:
            log.warning("missing_status")
            return None

        http_error = classify(status_code)
        if http_error is not None:
            log.info("http_error_status", status_code=status_code)
            raise http_error.to_exception()

        return RawResult(
            status_code=status_code,
            reason_phrase=str(reason or ""),
            headers=response_headers,
            body_bytes=body,
            url=uri,
        )

    def _build_opener(
        self, context: ConnectionContext
    ) -> urllib.request.OpenerDirector:
        # An empty mapping also disables proxies from the environment
        proxies: dict[str, str] = {}
        if context.proxy_url is not None:
            proxies = {"http": context.proxy_url, "https": context.proxy_url}
        return urllib.request.build_opener(urllib.request.ProxyHandler(proxies))
