"""Command-line interface for the logout calculator."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from .config import CalculatorSettings
from .db import (
    clear_history,
    database_connection,
    delete_history_entry,
    fetch_history,
    save_history_entry,
)
from .paths import get_db_path
from .reporting import ResultPrinter
from .schedule import ALTERNATING, GAPS, NoTimestampsError, calculate

logger = logging.getLogger(__name__)

app = typer.Typer(help="Work out when you can log off today.")
history_app = typer.Typer(help="Inspect and manage saved calculations.")
app.add_typer(history_app, name="history")


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@app.command()
def calc(
    input_path: Optional[str] = typer.Option(
        None,
        "--input",
        "-i",
        help="File holding the pasted login log, or '-' to read stdin.",
    ),
    text: Optional[str] = typer.Option(None, "--text", help="Login log passed inline."),
    login: Optional[str] = typer.Option(
        None, "--login", help="Login time (HH:MM) when no log is given. Defaults to now."
    ),
    hours: Optional[str] = typer.Option(None, "--hours", help="Required work hours (default 6)."),
    break_minutes: Optional[str] = typer.Option(
        None, "--break-minutes", help="Break allowance in minutes for manual mode."
    ),
    gaps: Optional[float] = typer.Option(
        None,
        "--gaps",
        min=0.0,
        help="Treat gaps of at least this many minutes as breaks instead of pairing IN/OUT.",
    ),
    save: bool = typer.Option(False, "--save", help="Save the result to history."),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the history SQLite database."
    ),
    watch: bool = typer.Option(False, "--watch", help="Recalculate until interrupted."),
    interval: float = typer.Option(
        30.0, "--interval", min=1.0, help="Seconds between recalculations with --watch."
    ),
) -> None:
    """Estimate the logout time from a login log or a manual login time."""
    log_text = _read_log(input_path, text)
    if not (log_text and log_text.strip()) and not login:
        login = datetime.now().strftime("%H:%M")

    settings = CalculatorSettings.from_inputs(
        work_hours=hours,
        break_minutes=break_minutes,
        refresh_seconds=interval,
        min_gap_minutes=gaps,
    )
    pairing = GAPS if gaps is not None else ALTERNATING
    printer = ResultPrinter()

    while True:
        try:
            result = calculate(
                text=log_text, login_time=login, settings=settings, pairing=pairing
            )
        except NoTimestampsError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1)

        if result is None:
            typer.echo("Nothing to calculate: login time must look like HH:MM.", err=True)
            return

        printer.print_result(result)
        if save:
            with database_connection(db_path or get_db_path()) as conn:
                entry = save_history_entry(conn, result)
            typer.echo(f"Saved to history as #{entry.id}.")
            save = False

        if not watch:
            return
        try:
            time.sleep(settings.refresh_interval.total_seconds())
        except KeyboardInterrupt:
            logger.info("Stopped watching.")
            return
        typer.echo()


@history_app.command("list")
def history_list(
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the history SQLite database."
    ),
) -> None:
    """Show saved calculations, newest first."""
    with database_connection(db_path or get_db_path()) as conn:
        entries = fetch_history(conn)
    ResultPrinter().print_history(entries)


@history_app.command("delete")
def history_delete(
    entry_id: int = typer.Argument(..., help="Identifier shown by 'history list'."),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the history SQLite database."
    ),
) -> None:
    """Delete one saved calculation."""
    with database_connection(db_path or get_db_path()) as conn:
        try:
            delete_history_entry(conn, entry_id)
        except ValueError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1)
    typer.echo(f"Deleted entry #{entry_id}.")


@history_app.command("clear")
def history_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the history SQLite database."
    ),
) -> None:
    """Remove every saved calculation."""
    if not yes and not typer.confirm("Are you sure you want to clear all work history?"):
        raise typer.Abort()
    with database_connection(db_path or get_db_path()) as conn:
        removed = clear_history(conn)
    typer.echo(f"Cleared {removed} entries.")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the API."),
    port: int = typer.Option(
        8766, "--port", min=1, max=65535, help="TCP port for the API."
    ),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the history SQLite database."
    ),
    open_browser: bool = typer.Option(
        False,
        "--open-browser/--no-open-browser",
        help="Open the interactive API docs in your default browser.",
    ),
) -> None:
    """Serve the calculator and history over a local JSON API."""
    from .server_runner import run_server

    run_server(
        host=host,
        port=port,
        db_path=db_path or get_db_path(),
        open_browser=open_browser,
    )


def _read_log(input_path: Optional[str], text: Optional[str]) -> Optional[str]:
    if input_path == "-":
        return typer.get_text_stream("stdin").read()
    if input_path:
        path = Path(input_path)
        if not path.exists():
            typer.echo(f"Input file not found: {path}", err=True)
            raise typer.Exit(code=1)
        return path.read_text(encoding="utf-8")
    return text
