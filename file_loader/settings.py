"""Loader settings powered by Pydantic BaseSettings."""

from urllib.parse import unquote, urlsplit

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from file_loader.constants import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT


class LoaderSettings(BaseSettings):
    """Environment configuration for the loader."""

    model_config = SettingsConfigDict(
        env_prefix="FILE_LOADER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    timeout: int = Field(default=DEFAULT_TIMEOUT_SECONDS, ge=1, le=3600)
    user_agent: str = DEFAULT_USER_AGENT
    allow_url_open: bool = Field(
        default=True, description="Allow the URL-opener stream connector"
    )
    http_proxy: str | None = Field(default=None, validation_alias="HTTP_PROXY")
    https_proxy: str | None = Field(default=None, validation_alias="HTTPS_PROXY")

    def proxy_options(self) -> dict[str, object]:
        """Translate the proxy environment into loader options.

        ``https_proxy`` takes precedence over ``http_proxy`` when both are set.

        Returns:
            Option mapping (``ProxyHost``, ``ProxyPort``...), empty if no
            proxy is configured.
        """
        proxy = self.https_proxy or self.http_proxy
        if not proxy:
            return {}

        if "://" not in proxy:
            proxy = f"http://{proxy}"

        parts = urlsplit(proxy)
        if not parts.hostname:
            return {}

        options: dict[str, object] = {
            "ProxyProtocol": parts.scheme,
            "ProxyHost": parts.hostname,
        }
        if parts.port is not None:
            options["ProxyPort"] = parts.port
        if parts.username is not None:
            options["ProxyUser"] = unquote(parts.username)
            options["ProxyPassword"] = unquote(parts.password or "")
        return options


def get_settings() -> LoaderSettings:
    """Get a settings instance."""
    return LoaderSettings()
