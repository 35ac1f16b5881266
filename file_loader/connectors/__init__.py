"""Transport connectors.

Each connector implements one way of fetching a URI:
- LocalFileConnector: a file on the local filesystem
- SocketConnector: hand-written HTTP/1.0 over a raw socket
- StreamConnector: the standard library URL opener
- CurlLikeConnector: an httpx client
"""

from file_loader.connectors.base import Connector, LineStreamMixin
from file_loader.connectors.client import CurlLikeConnector
from file_loader.connectors.local import LocalFileConnector
from file_loader.connectors.sockets import SocketConnector
from file_loader.connectors.stream import StreamConnector


__all__ = [
    "Connector",
    "CurlLikeConnector",
    "LineStreamMixin",
    "LocalFileConnector",
    "SocketConnector",
    "StreamConnector",
]
