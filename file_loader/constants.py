"""Constants for the file loader.

Centralizes the version, wire template and HTTP constants shared by the
loader and its connectors.
"""

# Library version, substituted for the placeholder in the user agent
VERSION = "3.0.0"
USER_AGENT_VERSION_PLACEHOLDER = "%v"
DEFAULT_USER_AGENT = "FileLoader/%v"

# Default timeout for connect and read (seconds)
DEFAULT_TIMEOUT_SECONDS = 5

# Request sent by the socket connector: path, host, user agent
REQUEST_HEADERS = (
    "GET {path} HTTP/1.0\r\nHost: {host}\r\nUser-Agent: {user_agent}\r\n"
    "Connection: Close\r\n\r\n"
)

DEFAULT_HTTP_PORT = 80
DEFAULT_HTTPS_PORT = 443

# HTTP Status Code Ranges
HTTP_STATUS_MIN = 100
HTTP_STATUS_MAX = 599
HTTP_STATUS_OK = 200
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_SERVER_ERROR_MIN = 500

# Proxy option values
PROXY_PROTOCOL_HTTP = "http"
PROXY_PROTOCOL_HTTPS = "https"
PROXY_AUTH_BASIC = "basic"
PROXY_AUTH_NTLM = "ntlm"

PROXY_PROTOCOLS = frozenset({PROXY_PROTOCOL_HTTP, PROXY_PROTOCOL_HTTPS})
PROXY_AUTH_METHODS = frozenset({PROXY_AUTH_BASIC, PROXY_AUTH_NTLM})

# Maximum line length for line streaming reads
MAX_LINE_LENGTH = 65535

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192
