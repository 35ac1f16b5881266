"""Connector backed by a full-featured HTTP client (httpx)."""

import time

import httpx
import structlog

from file_loader.config import LoaderConfig
from file_loader.constants import PROXY_AUTH_NTLM
from file_loader.errors import ConnectionFailedError
from file_loader.http_status import classify
from file_loader.models import ConnectorKind, RawResult
from file_loader.redact import redact_headers, redact_url_credentials
from file_loader.stream_context import (
    BASIC_AND_NTLM,
    ConnectionContext,
    build_stream_context,
)


logger = structlog.get_logger()


class CurlLikeConnector:
    """Fetch a URI with an ``httpx.Client``.

    Applies the connect/read timeout, user agent and proxy settings, and
    always maps the final status through the classifier.
    """

    kind = ConnectorKind.CURL_LIKE
    supports_line_streaming = False

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

    def fetch(self, uri: str) -> RawResult:
        """Fetch a URI.

        Returns:
            RawResult for a non-error status.

        Raises:
            ConnectionFailedError: On timeouts and transport failures.
            HttpStatusError: For 4xx/5xx responses.
            InvalidOptionError: Unsupported proxy option value.
        """
        context = build_stream_context(self._config, BASIC_AND_NTLM)
        headers = [("User-Agent", context.user_agent)]
        log = self._log.bind(
            url=redact_url_credentials(uri), headers=redact_headers(headers)
        )

        start_time_ns = time.perf_counter_ns()
        try:
            with httpx.Client(
                timeout=httpx.Timeout(context.timeout),
                headers=headers,
                proxy=self._build_proxy(context),
                follow_redirects=True,
                trust_env=False,
            ) as client:
                response = client.get(uri)
        except httpx.TimeoutException as e:
            msg = f"Request timed out: {e}"
            raise ConnectionFailedError(msg, uri) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            msg = f"Connection failed: {e}"
            raise ConnectionFailedError(msg, uri) from e

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        log.debug(
            "client_response",
            status_code=response.status_code,
            bytes=len(response.content),
            duration_ms=round(duration_ms, 2),
        )

        http_error = classify(response.status_code)
        if http_error is not None:
            log.info("http_error_status", status_code=response.status_code)
            raise http_error.to_exception()

        return RawResult(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            headers=response.headers.multi_items(),
            body_bytes=response.content,
            url=str(response.url),
        )

    def _build_proxy(self, context: ConnectionContext) -> httpx.Proxy | None:
        """Translate the connection context into an httpx proxy.

        httpx only negotiates Basic proxy credentials; with NTLM the
        credentials are withheld and the proxy is left to challenge.
        """
        if context.proxy_url is None:
            return None

        auth = None
        if context.proxy_user is not None:
            if context.proxy_auth == PROXY_AUTH_NTLM:
                self._log.warning(
                    "ntlm_proxy_auth_unsupported",
                    proxy_url=redact_url_credentials(context.proxy_url),
                )
            else:
                auth = (context.proxy_user, context.proxy_password or "")

        return httpx.Proxy(context.proxy_url, auth=auth)
