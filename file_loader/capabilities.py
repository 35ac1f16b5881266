"""Runtime transport capabilities consulted by the connector factory."""

import importlib.util
import socket
from dataclasses import dataclass

from file_loader.settings import LoaderSettings, get_settings


@dataclass(frozen=True)
class Capabilities:
    """Which transports the runtime can use.

    Tests pass an explicit instance to simulate any platform; production
    code calls ``probe``.
    """

    sockets: bool = True
    url_open: bool = True
    http_client: bool = True

    @classmethod
    def probe(cls, settings: LoaderSettings | None = None) -> "Capabilities":
        """Inspect the running interpreter.

        Args:
            settings: Settings to consult; read from the environment if None.

        Returns:
            Capabilities of this runtime.
        """
        if settings is None:
            settings = get_settings()

        return cls(
            sockets=hasattr(socket, "create_connection"),
            url_open=settings.allow_url_open
            and importlib.util.find_spec("urllib.request") is not None,
            http_client=importlib.util.find_spec("httpx") is not None,
        )
