"""Factory selecting the connector for a request."""

import structlog

from file_loader.capabilities import Capabilities
from file_loader.config import LoaderConfig
from file_loader.connectors.base import Connector
from file_loader.connectors.client import CurlLikeConnector
from file_loader.connectors.local import LocalFileConnector
from file_loader.connectors.sockets import SocketConnector
from file_loader.connectors.stream import StreamConnector
from file_loader.errors import FieldMissingError, NoValidConnectorFoundError
from file_loader.models import ConnectorKind


logger = structlog.get_logger()

Mode = ConnectorKind | Connector | str | None


def _wants(mode: Mode, kind: ConnectorKind) -> bool:
    """Check if a mode is unset or names the given kind."""
    if mode is None:
        return True
    return isinstance(mode, str) and mode == kind


class ConnectorFactory:
    """Pick or validate a connector.

    Selection order, first match wins: local file, socket, URL stream,
    HTTP client, explicit connector instance. The order runs from the most
    controllable transport to the most capable one.
    """

    def __init__(
        self,
        capabilities: Capabilities | None = None,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            capabilities: Transport capabilities; probed from the runtime if None.
            log: Logger handed to the connectors it builds.
        """
        self._capabilities = capabilities
        self._log = log or logger

    @property
    def capabilities(self) -> Capabilities:
        if self._capabilities is None:
            self._capabilities = Capabilities.probe()
        return self._capabilities

    def build(
        self,
        config: LoaderConfig,
        mode: Mode = None,
        local_file: str | None = None,
    ) -> Connector:
        """Build the connector for a request.

        Args:
            config: Loader configuration shared with remote connectors.
            mode: Connector kind, a pre-built connector, or None for auto.
            local_file: Local path, if the target is a local file.

        Returns:
            The selected connector.

        Raises:
            FieldMissingError: Local mode with an empty path.
            NoValidConnectorFoundError: No connector matches.
        """
        log = self._log.bind(component="factory")
        capabilities = self.capabilities

        if _wants(mode, ConnectorKind.LOCAL) and (
            local_file is not None or mode is not None
        ):
            if not local_file:
                raise FieldMissingError("localFile")
            connector: Connector = LocalFileConnector(local_file, log=self._log)
        elif _wants(mode, ConnectorKind.SOCKET) and capabilities.sockets:
            connector = SocketConnector(config, log=self._log)
        elif _wants(mode, ConnectorKind.STREAM) and capabilities.url_open:
            connector = StreamConnector(config, log=self._log)
        elif _wants(mode, ConnectorKind.CURL_LIKE) and capabilities.http_client:
            connector = CurlLikeConnector(config, log=self._log)
        elif isinstance(mode, Connector):
            connector = mode
        else:
            log.warning("no_valid_connector", mode=str(mode))
            raise NoValidConnectorFoundError(mode)

        log.debug("connector_selected", connector=connector.kind.value)
        return connector
