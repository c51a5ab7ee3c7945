"""Main CLI entry point for Next Engine CLI."""

from pathlib import Path
from typing import Annotated

import typer

from nextengine_cli.cli.commands import auth
from nextengine_cli.cli.progress import api_spinner
from nextengine_cli.cli.utils import configure_logging, get_settings, handle_api_errors
from nextengine_cli.config import DEFAULT_PARAMS_FILE, ENV_PATH
from nextengine_cli.services.broker import BrokerService

app = typer.Typer(
    name="nextengine",
    help="ネクストエンジンAPIをキャッシュ済みトークンで呼び出すCLI",
    no_args_is_help=True,
)

app.command("login")(auth.do_login)
app.command("logout")(auth.do_logout)
app.command("status")(auth.status)


@app.callback()
def main(
    ctx: typer.Context,
    env_file: Annotated[
        Path,
        typer.Option("--env-file", "-e", help="key=value file with credentials and servers"),
    ] = ENV_PATH,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log each step to stderr"),
    ] = False,
):
    """Global options."""
    configure_logging(verbose)
    ctx.obj = {"env_file": env_file, "verbose": verbose}


@app.command("invoke")
@handle_api_errors
def invoke(
    ctx: typer.Context,
    path: Annotated[
        str,
        typer.Argument(help="API path, e.g. api_v1_master_goods/search"),
    ],
    params_file: Annotated[
        Path,
        typer.Argument(help="key=value file with request parameters"),
    ] = Path(DEFAULT_PARAMS_FILE),
):
    """
    Call an API path and print the raw response.

    Logs in first when no tokens are cached, and logs in again once if
    the API rejects the cached tokens.

    Examples:
        nextengine invoke api_v1_login_user/info
        nextengine invoke api_v1_master_goods/search goods_params
    """
    service = BrokerService(get_settings(ctx))

    with api_spinner("APIリクエスト中..."):
        body = service.invoke(path, params_file)

    typer.echo(body)


if __name__ == "__main__":
    app()
