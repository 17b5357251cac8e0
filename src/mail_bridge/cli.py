"""Command-line interface for mail-bridge."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from mail_bridge.config import Settings
from mail_bridge.mail.client import MailClient
from mail_bridge.mail.models import EmailMessage, OperationResult

app = typer.Typer(
    name="mail-bridge",
    help="Script macOS Mail.app from the command line",
    no_args_is_help=True,
)
console = Console()

SubjectOption = Annotated[str, typer.Option("--subject", "-s", help="Text the subject contains")]
SenderOption = Annotated[str, typer.Option("--sender", "-f", help="Text the sender contains")]
LimitOption = Annotated[
    int | None,
    typer.Option("--limit", "-n", help="Maximum messages to show"),
]


def get_settings() -> Settings:
    """Load application settings."""
    return Settings()


def get_client() -> MailClient:
    """Build a Mail.app client and start logging."""
    from mail_bridge.logging import setup_logging

    settings = get_settings()
    setup_logging(
        log_dir=settings.log_dir,
        log_level=settings.log_level,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    return MailClient(settings=settings)


def _print_messages(messages: list[EmailMessage], title: str) -> None:
    if not messages:
        console.print("[yellow]No messages found[/yellow]")
        return

    table = Table(title=title)
    table.add_column("", style="yellow", width=1)
    table.add_column("From", style="cyan", max_width=30)
    table.add_column("Subject", style="white", max_width=50)
    table.add_column("Date", style="dim")
    table.add_column("Mailbox", style="blue")

    for msg in messages:
        table.add_row(
            "" if msg.is_read else "●",
            msg.sender,
            msg.subject,
            msg.date_sent,
            msg.mailbox,
        )

    console.print(table)


def _print_names(names: list[str], title: str) -> None:
    if not names:
        console.print(f"[yellow]No {title.lower()} found[/yellow]")
        return

    table = Table(title=title)
    table.add_column("Name", style="cyan")
    for name in names:
        table.add_row(name)
    console.print(table)


def _report(result: OperationResult) -> None:
    if result.success:
        console.print(f"[green]{result.message}[/green]")
        return
    console.print(f"[red]{result.message}[/red]")
    raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from mail_bridge import __version__

    console.print(f"mail-bridge v{__version__}")


@app.command()
def access() -> None:
    """Check that Mail.app can be scripted from this terminal."""
    result = get_client().request_mail_access()
    if result.granted:
        console.print(f"[green]{result.message}[/green]")
        return
    console.print(f"[red]{result.message}[/red]")
    raise typer.Exit(1)


@app.command()
def accounts() -> None:
    """List configured Mail.app accounts."""
    _print_names(get_client().get_accounts(), "Accounts")


@app.command()
def mailboxes(
    account: Annotated[
        str | None,
        typer.Option("--account", "-a", help="Only this account's mailboxes"),
    ] = None,
) -> None:
    """List mailboxes."""
    client = get_client()
    if account:
        _print_names(client.get_mailboxes_for_account(account), f"Mailboxes ({account})")
    else:
        _print_names(client.get_mailboxes(), "Mailboxes")


@app.command()
def unread(limit: LimitOption = None) -> None:
    """Show unread messages across all accounts."""
    _print_messages(get_client().get_unread_mails(limit), "Unread Messages")


@app.command()
def search(
    term: Annotated[str, typer.Argument(help="Text the subject contains")],
    limit: LimitOption = None,
) -> None:
    """Search message subjects."""
    _print_messages(get_client().search_mails(term, limit), f"Search: {term}")


@app.command()
def latest(
    account: Annotated[str, typer.Argument(help="Account name")],
    limit: LimitOption = None,
) -> None:
    """Show the newest messages in an account's INBOX."""
    _print_messages(get_client().get_latest_mails(account, limit), f"Latest: {account}")


@app.command()
def send(
    to: Annotated[str, typer.Option("--to", "-t", help="Recipient address")],
    subject: Annotated[str, typer.Option("--subject", "-s", help="Subject line")],
    body: Annotated[str | None, typer.Option("--body", "-b", help="Message body")] = None,
    body_file: Annotated[
        Path | None,
        typer.Option("--body-file", help="Read the message body from a file", exists=True),
    ] = None,
    cc: Annotated[str | None, typer.Option("--cc", help="CC address")] = None,
    bcc: Annotated[str | None, typer.Option("--bcc", help="BCC address")] = None,
) -> None:
    """Send a message through Mail.app."""
    from mail_bridge.mail.applescript import MailSendError, MailValidationError

    if body_file is not None:
        body = body_file.read_text(encoding="utf-8")

    try:
        confirmation = get_client().send_mail(to, subject, body or "", cc=cc, bcc=bcc)
    except (MailValidationError, MailSendError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]{confirmation}[/green]")


@app.command()
def archive(
    account: Annotated[str, typer.Argument(help="Account name")],
    subject: SubjectOption,
    sender: SenderOption,
) -> None:
    """Move a message to the account's archive mailbox."""
    _report(get_client().archive_email(account, subject, sender))


@app.command()
def delete(
    account: Annotated[str, typer.Argument(help="Account name")],
    subject: SubjectOption,
    sender: SenderOption,
) -> None:
    """Move a message to the account's trash."""
    _report(get_client().delete_email(account, subject, sender))


@app.command("mark-read")
def mark_read(
    account: Annotated[str, typer.Argument(help="Account name")],
    subject: SubjectOption,
    sender: SenderOption,
) -> None:
    """Mark a message as read."""
    _report(get_client().mark_as_read(account, subject, sender))


@app.command()
def replied(
    account: Annotated[str, typer.Argument(help="Account name")],
    subject: SubjectOption,
    sender: SenderOption,
) -> None:
    """Check whether a message has been answered."""
    result = get_client().check_if_replied(account, subject, sender)
    if result.replied:
        console.print(f"[green]{result.message}[/green] (sent {result.reply_sent_at})")
    else:
        console.print(f"[yellow]{result.message}[/yellow]")
