"""HTTP status classification.

Maps a numeric status code to a typed error, or ``None`` for codes that are
not errors. Every remote connector uses this one mapping.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from file_loader.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_SERVER_ERROR_MIN,
)
from file_loader.errors import HttpStatusError


KNOWN_STATUS_MESSAGES: dict[int, str] = {
    401: "HTTP client error 401: Unauthorized",
    403: "HTTP client error 403: Forbidden",
    404: "HTTP client error 404: Not Found",
    429: "HTTP client error 429: Too Many Requests",
    500: "HTTP server error 500: Internal Server Error",
}


class HttpError(BaseModel):
    """Classified HTTP error status."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: Annotated[int, Field(ge=HTTP_STATUS_BAD_REQUEST)]
    message: Annotated[str, Field(min_length=1)]

    @property
    def is_server_error(self) -> bool:
        """Check if the status is a 5xx server error."""
        return self.status_code >= HTTP_STATUS_SERVER_ERROR_MIN

    def to_exception(self) -> HttpStatusError:
        """Build the exception to raise for this status."""
        return HttpStatusError(self.status_code, self.message)


def classify(status_code: int) -> HttpError | None:
    """Classify an HTTP status code.

    Args:
        status_code: HTTP status code.

    Returns:
        HttpError for 4xx/5xx codes, None otherwise.
    """
    status_code = int(status_code)

    if status_code < HTTP_STATUS_BAD_REQUEST:
        return None

    message = KNOWN_STATUS_MESSAGES.get(status_code)
    if message is None:
        if status_code >= HTTP_STATUS_SERVER_ERROR_MIN:
            message = f"HTTP server error {status_code}"
        else:
            message = f"HTTP client error {status_code}"

    return HttpError(status_code=status_code, message=message)


def raise_for_status(status_code: int) -> None:
    """Raise HttpStatusError if the status code is an error.

    Raises:
        HttpStatusError: For 4xx/5xx status codes.
    """
    error = classify(status_code)
    if error is not None:
        raise error.to_exception()
