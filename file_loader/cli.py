"""CLI commands for the file loader."""

import logging
import sys
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import click

from file_loader.capabilities import Capabilities
from file_loader.config import LoaderConfig
from file_loader.constants import PROXY_AUTH_METHODS, PROXY_PROTOCOLS, VERSION
from file_loader.errors import FileLoaderError
from file_loader.factory import ConnectorFactory
from file_loader.loader import Loader
from file_loader.models import ConnectorKind
from file_loader.observability.logging import (
    configure_logging,
    get_logger,
    request_context,
)
from file_loader.settings import get_settings


LOG_FORMATS = ("json", "console")


@dataclass
class CliOptions:
    """Options shared by the load and mtime commands."""

    url: str | None = None
    version_url: str | None = None
    local_file: str | None = None
    mode: str | None = None
    timeout: int | None = None
    proxy_protocol: str | None = None
    proxy_host: str | None = None
    proxy_port: int | None = None
    proxy_auth: str | None = None
    proxy_user: str | None = None
    proxy_password: str | None = None
    autodetect_proxy: bool = False
    log_format: str = "console"
    verbose: bool = False


def _loader_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the target, transport and logging options to a command."""
    options = [
        click.option("--url", help="URL of the remote data file."),
        click.option(
            "--version-url",
            help="URL returning the remote file's modification time.",
        ),
        click.option("--local-file", help="Path of a local data file."),
        click.option(
            "--mode",
            type=click.Choice([kind.value for kind in ConnectorKind]),
            help="Force a connector instead of automatic selection.",
        ),
        click.option("--timeout", type=int, help="Timeout in seconds."),
        click.option(
            "--proxy-protocol",
            type=click.Choice(sorted(PROXY_PROTOCOLS)),
            help="Protocol used to reach the proxy.",
        ),
        click.option("--proxy-host", help="Proxy host name."),
        click.option("--proxy-port", type=int, help="Proxy port."),
        click.option(
            "--proxy-auth",
            type=click.Choice(sorted(PROXY_AUTH_METHODS)),
            help="Proxy authentication method.",
        ),
        click.option("--proxy-user", help="Proxy user name."),
        click.option("--proxy-password", help="Proxy password."),
        click.option(
            "--autodetect-proxy",
            is_flag=True,
            help="Read proxy settings from http_proxy / https_proxy.",
        ),
        click.option(
            "--log-format",
            type=click.Choice(LOG_FORMATS),
            default="console",
            help="Log output format (default: console).",
        ),
        click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _setup_logging(options: CliOptions, command: str) -> Any:
    """Configure logging and return a logger bound to the command."""
    log_level = logging.DEBUG if options.verbose else logging.WARNING
    configure_logging(level=log_level, json_format=options.log_format == "json")
    return get_logger("cli").bind(command=command)


def _build_loader(options: CliOptions) -> Loader:
    """Build a loader from the command line and the environment.

    Raises:
        FileLoaderError: On an invalid option or an empty target.
    """
    settings = get_settings()
    loader = Loader(
        config=LoaderConfig(timeout=settings.timeout, user_agent=settings.user_agent),
        mode=options.mode,
        factory=ConnectorFactory(Capabilities.probe(settings)),
    )

    if options.autodetect_proxy:
        loader.autodetect_proxy_settings(settings)

    explicit = {
        "ProxyProtocol": options.proxy_protocol,
        "ProxyHost": options.proxy_host,
        "ProxyPort": options.proxy_port,
        "ProxyAuth": options.proxy_auth,
        "ProxyUser": options.proxy_user,
        "ProxyPassword": options.proxy_password,
    }
    loader.set_options({k: v for k, v in explicit.items() if v is not None})

    if options.timeout is not None:
        loader.set_timeout(options.timeout)
    if options.local_file is not None:
        loader.set_local_file(options.local_file)
    if options.url is not None:
        loader.set_remote_data_url(options.url)
    if options.version_url is not None:
        loader.set_remote_version_url(options.version_url)

    return loader


def _fail(log: Any, error: FileLoaderError) -> NoReturn:
    log.warning("command_failed", error=str(error), error_code=error.code)
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=VERSION)
def cli() -> None:
    """Load a data file from a local path or a remote URL."""


@cli.command()
@_loader_options
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the body to this file instead of stdout.",
)
def load(output_path: Path | None, **kwargs: Any) -> None:
    """Load the data file and write its body."""
    options = CliOptions(**kwargs)
    with request_context(str(uuid.uuid4())):
        _run_load(options, output_path)


def _run_load(options: CliOptions, output_path: Path | None) -> None:
    log = _setup_logging(options, "load")

    try:
        loader = _build_loader(options)
        with loader.load() as response:
            body = response.get_contents()
    except FileLoaderError as e:
        _fail(log, e)

    if output_path is not None:
        output_path.write_bytes(body)
        click.echo(f"Wrote {len(body)} bytes to {output_path}", err=True)
    else:
        stdout = click.get_binary_stream("stdout")
        stdout.write(body)
        stdout.flush()
    log.debug("command_complete", bytes=len(body))


@cli.command()
@_loader_options
@click.option(
    "--rfc2822",
    is_flag=True,
    help="Print an RFC 2822 date instead of a Unix timestamp.",
)
def mtime(rfc2822: bool, **kwargs: Any) -> None:
    """Print the modification time of the data file."""
    options = CliOptions(**kwargs)
    with request_context(str(uuid.uuid4())):
        _run_mtime(options, rfc2822)


def _run_mtime(options: CliOptions, rfc2822: bool) -> None:
    log = _setup_logging(options, "mtime")

    try:
        loader = _build_loader(options)
        if rfc2822:
            with loader.get_mtime() as response:
                click.echo(response.text)
        else:
            click.echo(loader.get_modification_time())
    except FileLoaderError as e:
        _fail(log, e)


if __name__ == "__main__":
    cli()
