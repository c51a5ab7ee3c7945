"""Authentication CLI commands."""

import typer
from rich.console import Console

from nextengine_cli.cli.progress import api_spinner, print_success, print_warning
from nextengine_cli.cli.utils import get_settings, handle_api_errors
from nextengine_cli.services.broker import BrokerService

console = Console(stderr=True)


@handle_api_errors
def do_login(ctx: typer.Context):
    """
    Log in and cache a fresh access/refresh token pair.

    Any cached tokens and cookies are discarded first.
    """
    service = BrokerService(get_settings(ctx))

    with api_spinner("ログイン中..."):
        tokens = service.login()

    print_success("ログインしました。")
    console.print(f"  access_token: [dim]{tokens.masked()}[/dim]")


@handle_api_errors
def do_logout(ctx: typer.Context):
    """Remove cached tokens and cookies."""
    service = BrokerService(get_settings(ctx))

    if service.logout():
        print_success("ログアウトしました。")
    else:
        print_warning("削除するトークンがありません。")


@handle_api_errors
def status(ctx: typer.Context):
    """Show whether tokens are cached."""
    service = BrokerService(get_settings(ctx))
    token_status = service.status()

    if not token_status.is_logged_in:
        console.print("[red]未ログイン[/red]")
        console.print("\nログイン: [cyan]nextengine login[/cyan]")
        raise typer.Exit(1)

    console.print("[green]ログイン済み[/green]")
    console.print(f"access_token: [dim]{token_status.tokens.masked()}[/dim]")
    console.print(f"[dim]{token_status.token_file}[/dim]")
