"""Configuration models for the loader."""

from collections.abc import Iterable, Mapping
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from file_loader.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    USER_AGENT_VERSION_PLACEHOLDER,
    VERSION,
)
from file_loader.errors import InvalidOptionError


class ProxyOptions(BaseModel):
    """Proxy-related loader options.

    Field aliases are the public option keys (``ProxyHost``, ``ProxyPort``...).
    Enumerated values are checked when a connection context is built, so an
    unsupported value is reported before any network I/O.
    """

    model_config = ConfigDict(
        extra="forbid", validate_assignment=True, populate_by_name=True
    )

    proxy_protocol: str | None = Field(default=None, alias="ProxyProtocol")
    proxy_host: str | None = Field(default=None, alias="ProxyHost")
    proxy_port: Annotated[int, Field(ge=1, le=65535)] | None = Field(
        default=None, alias="ProxyPort"
    )
    proxy_auth: str | None = Field(default=None, alias="ProxyAuth")
    proxy_user: str | None = Field(default=None, alias="ProxyUser")
    proxy_password: str | None = Field(default=None, alias="ProxyPassword")


# Public option key -> model field name
OPTION_FIELDS: dict[str, str] = {
    str(info.alias): name for name, info in ProxyOptions.model_fields.items()
}
OPTION_KEYS = tuple(OPTION_FIELDS)


class LoaderConfig(BaseModel):
    """Mutable configuration owned by a Loader.

    Connectors hold a reference to the same instance and read it at fetch
    time, so setter changes apply to the next call.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    timeout: Annotated[int, Field(ge=1, le=3600)] = DEFAULT_TIMEOUT_SECONDS
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    options: ProxyOptions = Field(default_factory=ProxyOptions)

    def get_user_agent(self) -> str:
        """Format the user agent, substituting the library version."""
        return self.user_agent.replace(USER_AGENT_VERSION_PLACEHOLDER, VERSION)

    def set_option(self, key: str, value: object) -> None:
        """Set one option.

        Args:
            key: Public option key, e.g. ``ProxyHost``.
            value: New value, or None to unset.

        Raises:
            InvalidOptionError: Unknown key or a value of the wrong type.
        """
        field_name = OPTION_FIELDS.get(key)
        if field_name is None:
            raise InvalidOptionError(key)

        try:
            setattr(self.options, field_name, value)
        except ValidationError as e:
            raise InvalidOptionError(key, value) from e

    def set_options(
        self, options: Mapping[str, object] | Iterable[tuple[str, object]]
    ) -> None:
        """Set several options at once, in order."""
        items = options.items() if isinstance(options, Mapping) else options
        for key, value in items:
            self.set_option(key, value)

    def get_option(self, key: str) -> object:
        """Get one option value.

        Raises:
            InvalidOptionError: Unknown key.
        """
        field_name = OPTION_FIELDS.get(key)
        if field_name is None:
            raise InvalidOptionError(key)
        return getattr(self.options, field_name)

    def get_options(self) -> dict[str, object]:
        """Return all options keyed by their public names."""
        return self.options.model_dump(by_alias=True)
