"""User-friendly error messages with actionable suggestions."""

from dataclasses import dataclass

import httpx
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from nextengine_cli.api.exceptions import (
    NextEngineAPIError,
    TokenInvalidError,
    TransportError,
)
from nextengine_cli.auth.auth_chain import ExchangeError, LoginError, ScrapeError
from nextengine_cli.config import ConfigFileError

# Longest raw response excerpt shown in a diagnostic
MAX_BODY_CHARS = 2000


@dataclass
class ErrorInfo:
    """Structured error information for display."""

    title: str
    message: str
    suggestion: str
    command: str | None = None


# Error taxonomy with Japanese messages
ERROR_MESSAGES = {
    "scrape_failed": ErrorInfo(
        title="ログインページ解析失敗",
        message="authenticity_tokenの取得に失敗しました。",
        suggestion="ログインページのURLもしくはDOM要素が変わっています。BASE_SERVER を確認してください。",
    ),
    "login_failed": ErrorInfo(
        title="ログイン失敗",
        message="uidとstateの取得に失敗しました。ログインに失敗しています。",
        suggestion="env ファイルの LOGIN_ID と LOGIN_PASSWORD を確認してください。",
    ),
    "exchange_failed": ErrorInfo(
        title="トークン取得失敗",
        message="access_tokenとrefresh_tokenの取得に失敗しました。APIリクエストに失敗しています。",
        suggestion="env ファイルの CLIENT_ID と CLIENT_SECRET を確認してください。",
    ),
    "token_invalid": ErrorInfo(
        title="トークンエラー",
        message="再ログイン後もトークンが無効と判定されました。",
        suggestion="しばらく待ってから再ログインしてください。",
        command="nextengine login",
    ),
    "network_timeout": ErrorInfo(
        title="タイムアウト",
        message="サーバーからの応答がありませんでした。",
        suggestion="ネットワーク接続を確認して、もう一度実行してください。",
    ),
    "network_error": ErrorInfo(
        title="通信エラー",
        message="サーバーへの接続に失敗しました。",
        suggestion="API_SERVER と BASE_SERVER、ネットワーク接続を確認してください。",
    ),
    "config_missing": ErrorInfo(
        title="ファイルが見つかりません",
        message="設定ファイルまたはパラメータファイルを読み込めませんでした: {path}",
        suggestion="key=value 形式のファイルを作成してください。",
    ),
    "config_invalid": ErrorInfo(
        title="設定エラー",
        message="設定値が不足しているか不正です: {fields}",
        suggestion="env ファイルまたは NEXTENGINE_* 環境変数を確認してください。",
    ),
    "state_locked": ErrorInfo(
        title="処理中",
        message="別のプロセスがトークンを更新中です。",
        suggestion="しばらく待ってから再実行してください。",
    ),
    "unknown": ErrorInfo(
        title="予期しないエラー",
        message="予期しないエラーが発生しました。",
        suggestion="繰り返し発生する場合はログアウトして再ログインしてください。",
        command="nextengine logout && nextengine login",
    ),
}


def get_error_type(error: Exception) -> str:
    """Determine error type from exception."""
    if isinstance(error, ScrapeError):
        return "scrape_failed"
    elif isinstance(error, LoginError):
        return "login_failed"
    elif isinstance(error, ExchangeError):
        return "exchange_failed"
    elif isinstance(error, TokenInvalidError):
        return "token_invalid"
    elif isinstance(error, ConfigFileError):
        return "config_missing"
    elif isinstance(error, ValidationError):
        return "config_invalid"
    elif isinstance(error, TimeoutError):
        return "state_locked"

    # Check for network errors
    if isinstance(error, TransportError):
        if isinstance(error.__cause__, httpx.TimeoutException):
            return "network_timeout"
        return "network_error"
    elif isinstance(error, NextEngineAPIError):
        return "network_error"

    return "unknown"


def _invalid_fields(error: ValidationError) -> str:
    return ", ".join(".".join(str(p) for p in e["loc"]) for e in error.errors()) or "?"


def format_error(
    error: Exception,
    console: Console,
    verbose: bool = False,
) -> None:
    """Format and display a user-friendly error message.

    The raw response that caused the error, if any, is always shown.
    """
    error_type = get_error_type(error)
    info = ERROR_MESSAGES.get(error_type, ERROR_MESSAGES["unknown"])

    message = info.message
    if "{path}" in message:
        message = message.format(path=getattr(error, "path", "?"))
    if "{fields}" in message and isinstance(error, ValidationError):
        message = message.format(fields=_invalid_fields(error))

    content_lines = [
        f"[white]{escape(message)}[/white]",
        "",
        f"[yellow]対処:[/yellow] {escape(info.suggestion)}",
    ]

    if info.command:
        content_lines.append("")
        content_lines.append(f"[cyan]{info.command}[/cyan]")

    url = getattr(error, "url", None)
    body = getattr(error, "body", None)
    if url:
        content_lines.append("")
        content_lines.append(f"[dim]URL: {escape(url)}[/dim]")
    if body:
        excerpt = body if len(body) <= MAX_BODY_CHARS else body[:MAX_BODY_CHARS] + "…"
        content_lines.append("")
        content_lines.append("[dim]レスポンス:[/dim]")
        content_lines.append(f"[dim]{escape(excerpt)}[/dim]")

    # Show technical details in verbose mode
    if verbose:
        content_lines.append("")
        content_lines.append("[dim]" + "─" * 40 + "[/dim]")
        content_lines.append(f"[dim]Type: {type(error).__name__}[/dim]")
        content_lines.append(f"[dim]Details: {escape(str(error))}[/dim]")

    content = "\n".join(content_lines)

    console.print()
    console.print(Panel(
        content,
        title=f"[red bold]エラー: {info.title}[/red bold]",
        border_style="red",
        padding=(1, 2),
    ))
    console.print()
