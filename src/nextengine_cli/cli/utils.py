"""CLI utility functions and decorators."""

import logging
import sys
from functools import wraps
from typing import Callable, TypeVar

import typer
from pydantic import ValidationError

from nextengine_cli.api.exceptions import NextEngineAPIError
from nextengine_cli.auth.auth_chain import AuthChainError
from nextengine_cli.cli.errors import format_error
from nextengine_cli.cli.progress import console
from nextengine_cli.config import ConfigFileError, Settings, load_settings

F = TypeVar("F", bound=Callable)


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; DEBUG when verbose, warnings otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # httpx logs every request at INFO; keep it for --verbose only
    logging.getLogger("httpx").setLevel(logging.INFO if verbose else logging.WARNING)


def handle_api_errors(f: F) -> F:
    """Decorator to handle broker errors in CLI commands.

    This decorator catches and handles:
    - AuthChainError: login page, login redirect or token exchange failed
    - NextEngineAPIError: tokens still rejected, or the HTTP request failed
    - ConfigFileError / ValidationError: env or parameter file problems
    - TimeoutError: another process holds the state lock

    Each is shown as a formatted panel on stderr, then the command exits 1.

    Usage:
        @app.command()
        @handle_api_errors
        def my_command(ctx: typer.Context):
            ...
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        ctx = kwargs.get("ctx")
        verbose = bool(ctx and ctx.obj and ctx.obj.get("verbose"))

        try:
            return f(*args, **kwargs)
        except (
            AuthChainError,
            NextEngineAPIError,
            ConfigFileError,
            ValidationError,
            TimeoutError,
        ) as e:
            format_error(e, console, verbose=verbose)
            raise typer.Exit(1)

    return wrapper  # type: ignore


def get_settings(ctx: typer.Context) -> Settings:
    """Build the settings once per command from the global options."""
    options = ctx.obj or {}
    return load_settings(options.get("env_file"))
