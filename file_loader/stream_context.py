"""Connection context shared by the remote connectors.

Validates the proxy options once, in one place, and turns them into the
transport-level settings every remote connector applies.
"""

import base64
from collections.abc import Collection

import structlog
from pydantic import BaseModel, ConfigDict, Field

from file_loader.config import LoaderConfig
from file_loader.constants import (
    PROXY_AUTH_BASIC,
    PROXY_AUTH_METHODS,
    PROXY_PROTOCOL_HTTP,
    PROXY_PROTOCOLS,
)
from file_loader.errors import InvalidOptionError
from file_loader.redact import redact_url_credentials


logger = structlog.get_logger()

# Proxy auth methods each transport can negotiate
BASIC_AND_NTLM = PROXY_AUTH_METHODS
BASIC_ONLY = frozenset({PROXY_AUTH_BASIC})


class ConnectionContext(BaseModel):
    """Transport-level options for one request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: str = "GET"
    user_agent: str
    timeout: int
    ignore_errors: bool = Field(
        default=True, description="Keep 4xx/5xx bodies readable"
    )
    proxy_protocol: str | None = None
    proxy_host: str | None = None
    proxy_port: int | None = None
    proxy_url: str | None = None
    request_fulluri: bool = Field(
        default=False, description="Send the absolute URI in the request line"
    )
    proxy_auth: str | None = None
    proxy_user: str | None = None
    proxy_password: str | None = None
    proxy_authorization: str | None = Field(
        default=None, description="Value of the Proxy-Authorization header"
    )

    @property
    def uses_proxy(self) -> bool:
        """Check if requests go through a proxy."""
        return self.proxy_url is not None

    def request_headers(self) -> list[tuple[str, str]]:
        """Headers every connector adds to its request."""
        headers = [("User-Agent", self.user_agent)]
        if self.proxy_authorization is not None:
            headers.append(("Proxy-Authorization", self.proxy_authorization))
        return headers


def basic_proxy_authorization(user: str, password: str) -> str:
    """Build a Basic Proxy-Authorization header value."""
    token = base64.b64encode(f"{user}:{password}".encode()).decode("ascii")
    return f"Basic {token}"


def build_stream_context(
    config: LoaderConfig,
    allowed_auth: Collection[str] = BASIC_AND_NTLM,
) -> ConnectionContext:
    """Build the connection context for the current configuration.

    Called once per fetch; nothing is cached, so option changes between
    calls always apply.

    Args:
        config: Loader configuration.
        allowed_auth: Proxy auth methods the calling transport supports.

    Returns:
        ConnectionContext for the request.

    Raises:
        InvalidOptionError: Unsupported ProxyProtocol or ProxyAuth value.
    """
    options = config.options

    protocol = options.proxy_protocol
    if protocol is None:
        protocol = PROXY_PROTOCOL_HTTP
    elif protocol not in PROXY_PROTOCOLS:
        raise InvalidOptionError("ProxyProtocol", protocol)

    auth = options.proxy_auth
    if auth is None:
        auth = PROXY_AUTH_BASIC
    elif auth not in allowed_auth:
        raise InvalidOptionError("ProxyAuth", auth)

    base = {"user_agent": config.get_user_agent(), "timeout": config.timeout}

    if options.proxy_host is None:
        return ConnectionContext(**base)

    proxy_url = f"{protocol}://{options.proxy_host}"
    if options.proxy_port is not None:
        proxy_url += f":{options.proxy_port}"

    user = options.proxy_user
    password = None
    authorization = None
    if user is not None:
        password = options.proxy_password if options.proxy_password is not None else ""
        if auth == PROXY_AUTH_BASIC:
            authorization = basic_proxy_authorization(user, password)

    logger.debug(
        "proxy_configured",
        component="stream_context",
        proxy_url=redact_url_credentials(proxy_url),
        proxy_auth=auth,
        has_credentials=user is not None,
    )

    return ConnectionContext(
        **base,
        proxy_protocol=protocol,
        proxy_host=options.proxy_host,
        proxy_port=options.proxy_port,
        proxy_url=proxy_url,
        request_fulluri=True,
        proxy_auth=auth,
        proxy_user=user,
        proxy_password=password,
        proxy_authorization=authorization,
    )
