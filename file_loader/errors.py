"""Error types raised by the loader and its connectors.

Every error carries a numeric ``code`` so callers can branch on the kind of
failure without matching on messages.
"""

LOCAL_FILE_MISSING = 100
INVALID_DATETIME = 600
LOCAL_FILE_NOT_READABLE = 700
REMOTE_UPDATE_NOT_POSSIBLE = 800
VERSION_URL_MISSING = 1000
DATA_URL_MISSING = 1100
INVALID_OPTION = 1200

_MISSING_FIELD_CODES = {
    "localFile": LOCAL_FILE_MISSING,
    "remoteDataUrl": DATA_URL_MISSING,
    "remoteVerUrl": VERSION_URL_MISSING,
}


class FileLoaderError(Exception):
    """Base class for all loader failures.

    Attributes:
        code: Numeric error code identifying the failure kind.
    """

    def __init__(self, message: str, code: int = 0) -> None:
        super().__init__(message)
        self.code = code


class InvalidOptionError(FileLoaderError):
    """Unknown option key, or unsupported value for an enumerated option."""

    def __init__(self, key: str, value: object = None) -> None:
        if value is None:
            message = f'Invalid option key "{key}".'
        else:
            message = f'Invalid/unsupported value "{value}" for option "{key}".'
        super().__init__(message, INVALID_OPTION)
        self.key = key
        self.value = value


class FieldMissingError(FileLoaderError):
    """A required target field was empty."""

    def __init__(self, field: str) -> None:
        super().__init__(
            f"the parameter {field} can not be empty",
            _MISSING_FIELD_CODES.get(field, 0),
        )
        self.field = field


class NoValidConnectorFoundError(FileLoaderError):
    """The connector factory exhausted every fallback."""

    def __init__(self, mode: object = None) -> None:
        super().__init__("no valid connector found")
        self.mode = mode


class LocalFileNotReadableError(FileLoaderError):
    """Local path missing, not a regular file, or not readable."""

    def __init__(self, path: str, reason: str = "is not readable") -> None:
        super().__init__(
            f"The given local file [{path}] {reason}", LOCAL_FILE_NOT_READABLE
        )
        self.path = path


class CannotLoadLocalFileError(LocalFileNotReadableError):
    """The local connector returned no data."""

    def __init__(self, path: str) -> None:
        super().__init__(path, "could not be loaded")


class ConnectionFailedError(FileLoaderError):
    """The transport could not establish or complete the exchange."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message, REMOTE_UPDATE_NOT_POSSIBLE)
        self.url = url


class RemoteUpdateNotPossibleError(ConnectionFailedError):
    """A remote connector returned no data."""

    def __init__(self, url: str | None = None) -> None:
        super().__init__("Cannot load the remote file", url)


class InvalidDateTimeError(FileLoaderError):
    """The modification time payload is not a timestamp or a date."""

    def __init__(self, source: str, payload: str = "") -> None:
        super().__init__(f"Bad datetime format from {source}", INVALID_DATETIME)
        self.source = source
        self.payload = payload


class HttpStatusError(FileLoaderError):
    """HTTP 4xx/5xx response.

    Attributes:
        status_code: HTTP status code of the response, also used as ``code``.
    """

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message, status_code)
        self.status_code = status_code
