"""
CLI entry point for flipdeck.
"""

# Standard library imports
import logging
from pathlib import Path
from typing import Optional

# Third-party imports
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

# Local application imports
from flipdeck.app import FlashcardApp
from flipdeck.cli._study_logic import study_logic
from flipdeck.cli.prompts import RichUserInterface
from flipdeck.config import load_settings
from flipdeck.exceptions import StorageError
from flipdeck.models import Deck
from flipdeck.study import filter_cards


console = Console()

app = typer.Typer(
    name="flipdeck",
    help="Flipdeck: flashcard decks with a flip-card study mode.",
    add_completion=False,
    rich_markup_mode="markdown",
)
deck_app = typer.Typer(name="deck", help="Create, rename, delete and select decks.")
card_app = typer.Typer(name="card", help="Add, edit, delete and list cards.")
app.add_typer(deck_app)
app.add_typer(card_app)


# Common typer options reused across commands
_db_option = typer.Option(  # noqa: B008
    None,
    "--db",
    help="Path to the DuckDB storage file. "
    "Falls back to FLIPDECK_DB, then FLIPDECK_DB_PATH.",
    envvar="FLIPDECK_DB",
)

_yes_option = typer.Option(
    False, "--yes", "-y", help="Bypass confirmation prompt."
)

_deck_option = typer.Option(  # noqa: B008
    None,
    "--deck",
    help="Deck id or name. Defaults to the active deck.",
)


@app.callback()
def _configure(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug logging."
    ),
):
    """Flipdeck: flashcard decks with a flip-card study mode."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _open_app(db: Optional[Path], assume_yes: bool = False) -> FlashcardApp:
    """Open the app on the configured storage with a terminal UI."""
    settings = load_settings(db)
    ui = RichUserInterface(console, assume_yes=assume_yes)
    try:
        return FlashcardApp.from_settings(settings, ui=ui)
    except StorageError as e:
        console.print(f"[bold red]Storage error:[/bold red] {e}")
        raise typer.Exit(code=1) from e


def _report_unsaved(flash_app: FlashcardApp) -> None:
    """Tell the user when the last write did not reach storage."""
    error = flash_app.persistence.last_error
    if error is not None:
        console.print(
            f"[bold red]Warning: changes could not be saved:[/bold red] {error}"
        )
        raise typer.Exit(code=1)


def _resolve_deck(flash_app: FlashcardApp, ref: Optional[str]) -> Deck:
    """
    Find a deck by id, then by exact name; None means the active deck.

    Exits with code 1 if nothing matches.
    """
    if ref is None:
        deck = flash_app.store.active_deck
        if deck is None:
            console.print("[bold red]Error: No active deck.[/bold red]")
            raise typer.Exit(code=1)
        return deck

    deck = flash_app.store.get_deck(ref)
    if deck is None:
        deck = next((d for d in flash_app.store.decks if d.name == ref), None)
    if deck is None:
        console.print(
            f"[bold red]Error: Deck '{escape(ref)}' not found.[/bold red]"
        )
        raise typer.Exit(code=1)
    return deck


def _require_text(value: str, message: str) -> str:
    """Trim value and exit with message if it is blank."""
    text = value.strip()
    if not text:
        console.print(f"[bold red]Error: {message}[/bold red]")
        raise typer.Exit(code=1)
    return text


# ---------------------------------------------------------------------------
# Deck listing
# ---------------------------------------------------------------------------


@app.command()
def decks(
    db: Optional[Path] = _db_option,
):
    """List decks with their card counts; the active deck is starred."""
    with _open_app(db) as flash_app:
        summaries = flash_app.store.deck_summaries()
        if not summaries:
            console.print("[yellow]No decks yet. Create one![/yellow]")
            return

        table = Table(title="Decks")
        table.add_column("", style="bold green")
        table.add_column("Deck Name", style="cyan")
        table.add_column("Cards", style="magenta")
        table.add_column("Id", style="dim")
        for summary in summaries:
            table.add_row(
                "*" if summary.is_active else "",
                escape(summary.deck.name),
                str(summary.card_count),
                summary.deck.id,
            )
        console.print(table)


# ---------------------------------------------------------------------------
# Deck commands
# ---------------------------------------------------------------------------


@deck_app.command("create")
def deck_create(
    name: str = typer.Argument(..., help="Name of the new deck."),  # noqa: B008
    db: Optional[Path] = _db_option,
):
    """Create a deck and make it the active deck."""
    deck_name = _require_text(name, "Deck name cannot be empty.")
    with _open_app(db) as flash_app:
        deck = flash_app.create_deck(deck_name)
        _report_unsaved(flash_app)
        console.print(
            f"[green]Created deck[/green] [bold]{escape(deck.name)}[/bold] "
            f"[dim]({deck.id})[/dim]"
        )


@deck_app.command("rename")
def deck_rename(
    deck: str = typer.Argument(..., help="Deck id or name."),  # noqa: B008
    new_name: str = typer.Argument(..., help="New deck name."),  # noqa: B008
    db: Optional[Path] = _db_option,
):
    """Rename a deck."""
    deck_name = _require_text(new_name, "Deck name cannot be empty.")
    with _open_app(db) as flash_app:
        target = _resolve_deck(flash_app, deck)
        flash_app.rename_deck(target.id, deck_name)
        _report_unsaved(flash_app)
        console.print(f"[green]Renamed deck to[/green] {escape(deck_name)}")


@deck_app.command("delete")
def deck_delete(
    deck: str = typer.Argument(..., help="Deck id or name."),  # noqa: B008
    yes: bool = _yes_option,
    db: Optional[Path] = _db_option,
):
    """Permanently delete a deck and all of its cards."""
    with _open_app(db, assume_yes=yes) as flash_app:
        target = _resolve_deck(flash_app, deck)
        if not flash_app.confirm_delete_deck(target.id):
            console.print("Delete operation cancelled.")
            raise typer.Exit()
        _report_unsaved(flash_app)
        console.print(f"[green]Deleted deck[/green] {escape(target.name)}")


@deck_app.command("select")
def deck_select(
    deck: str = typer.Argument(..., help="Deck id or name."),  # noqa: B008
    db: Optional[Path] = _db_option,
):
    """Make a deck the active deck."""
    with _open_app(db) as flash_app:
        target = _resolve_deck(flash_app, deck)
        flash_app.select_deck(target.id)
        _report_unsaved(flash_app)
        console.print(
            f"Active deck: [bold cyan]{escape(target.name)}[/bold cyan]"
        )


# ---------------------------------------------------------------------------
# Card commands
# ---------------------------------------------------------------------------


@card_app.command("add")
def card_add(
    front: str = typer.Argument(..., help="Front (question) text."),  # noqa: B008
    back: str = typer.Argument(..., help="Back (answer) text."),  # noqa: B008
    deck: Optional[str] = _deck_option,
    db: Optional[Path] = _db_option,
):
    """Add a card to a deck."""
    front_text = _require_text(front, "Both front and back fields must be filled.")
    back_text = _require_text(back, "Both front and back fields must be filled.")
    with _open_app(db) as flash_app:
        target = _resolve_deck(flash_app, deck)
        card = flash_app.create_card(front_text, back_text, deck_id=target.id)
        _report_unsaved(flash_app)
        if card is not None:
            console.print(
                f"[green]Added card[/green] [dim]{card.id}[/dim] "
                f"to {escape(target.name)}"
            )


@card_app.command("edit")
def card_edit(
    card_id: str = typer.Argument(..., help="Id of the card to edit."),  # noqa: B008
    front: str = typer.Argument(..., help="New front text."),  # noqa: B008
    back: str = typer.Argument(..., help="New back text."),  # noqa: B008
    deck: Optional[str] = _deck_option,
    db: Optional[Path] = _db_option,
):
    """Replace the text of a card."""
    front_text = _require_text(front, "Both front and back fields must be filled.")
    back_text = _require_text(back, "Both front and back fields must be filled.")
    with _open_app(db) as flash_app:
        target = _resolve_deck(flash_app, deck)
        card = flash_app.update_card(
            card_id, front_text, back_text, deck_id=target.id
        )
        if card is None:
            console.print(
                f"[bold red]Error: Card '{escape(card_id)}' not found "
                f"in {escape(target.name)}.[/bold red]"
            )
            raise typer.Exit(code=1)
        _report_unsaved(flash_app)
        console.print(f"[green]Updated card[/green] [dim]{card.id}[/dim]")


@card_app.command("delete")
def card_delete(
    card_id: str = typer.Argument(..., help="Id of the card to delete."),  # noqa: B008
    yes: bool = _yes_option,
    deck: Optional[str] = _deck_option,
    db: Optional[Path] = _db_option,
):
    """Permanently delete a card."""
    with _open_app(db, assume_yes=yes) as flash_app:
        target = _resolve_deck(flash_app, deck)
        if flash_app.store.get_card_by_id(target.id, card_id) is None:
            console.print(
                f"[bold red]Error: Card '{escape(card_id)}' not found "
                f"in {escape(target.name)}.[/bold red]"
            )
            raise typer.Exit(code=1)
        if not flash_app.confirm_delete_card(card_id, deck_id=target.id):
            console.print("Delete operation cancelled.")
            raise typer.Exit()
        _report_unsaved(flash_app)
        console.print(f"[green]Deleted card[/green] [dim]{card_id}[/dim]")


@card_app.command("list")
def card_list(
    deck: Optional[str] = _deck_option,
    search: Optional[str] = typer.Option(  # noqa: B008
        None, "--search", "-s", help="Only cards containing this text."
    ),
    db: Optional[Path] = _db_option,
):
    """List the cards of a deck, optionally filtered by a search keyword."""
    with _open_app(db) as flash_app:
        target = _resolve_deck(flash_app, deck)
        keyword = search or ""
        cards = filter_cards(flash_app.store.get_cards_for_deck(target.id), keyword)

        table = Table(title=f"Cards in {escape(target.name)}")
        table.add_column("Id", style="dim")
        table.add_column("Front", style="cyan")
        table.add_column("Back", style="magenta")
        for card in cards:
            table.add_row(card.id, escape(card.front), escape(card.back))
        console.print(table)
        if keyword.strip():
            console.print(f"({len(cards)} matching cards)")


# ---------------------------------------------------------------------------
# Study command
# ---------------------------------------------------------------------------


@app.command()
def study(
    db: Optional[Path] = _db_option,
    search: Optional[str] = typer.Option(  # noqa: B008
        None, "--search", "-s", help="Start with this search keyword."
    ),
):
    """Study the active deck with flip cards."""
    try:
        study_logic(db_path=db, console=console, search_keyword=search)
    except StorageError as e:
        console.print(f"[bold red]Storage error:[/bold red] {e}")
        raise typer.Exit(code=1) from e


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Run the CLI application.

    If an unexpected exception occurs, print a bold red error message to the
    console and exit the process with status code 1.
    """
    try:
        app()
    except Exception as e:
        console.print(f"[bold red]UNEXPECTED ERROR: {e}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
