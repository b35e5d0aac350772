"""
Command-line flip-card study loop.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from flipdeck.app import FlashcardApp
from flipdeck.models import AppSnapshot, DisplayKind

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "[dim]Enter/f flip · n next · p previous · s shuffle · /text search "
    "(/ clears) · a add · e edit · d delete · q quit[/dim]"
)


def render_study_area(console: Console, snapshot: AppSnapshot) -> None:
    """
    Print the study area for one snapshot: an empty-state message or the
    current card, front or back depending on the flip state.
    """
    display = snapshot.display
    if snapshot.match_count is not None:
        console.print(
            f"[dim]Search '{escape(snapshot.search_keyword.strip())}': "
            f"{snapshot.match_count} matching cards[/dim]"
        )

    if display.kind == DisplayKind.NO_ACTIVE_DECK:
        console.print("[yellow]Select a deck or add cards.[/yellow]")
        return
    if display.kind == DisplayKind.DECK_EMPTY:
        console.print("[yellow]No cards in this deck. Add one![/yellow]")
        return
    if display.kind == DisplayKind.FILTERED_EMPTY:
        console.print("[yellow]No cards found matching search term.[/yellow]")
        return

    card = display.card
    if card is None:
        return
    console.rule(
        f"[bold]Card {display.current_index + 1} of {display.total}[/bold]"
    )
    if display.is_flipped:
        console.print(Panel(escape(card.back), title="Back", border_style="blue"))
    else:
        console.print(
            Panel(escape(card.front), title="Front", border_style="green")
        )


def _handle_command(app: FlashcardApp, console: Console, command: str) -> bool:
    """
    Apply one typed command. Returns False when the loop should stop.
    """
    if command.startswith("/"):
        app.on_search_input(command[1:])
        # One submitted line is one quiet period.
        app.flush_search()
        return True

    key = command.strip().lower()
    current = app.session.current_card

    if key in ("", "f"):
        app.flip()
    elif key == "n":
        if not app.next_card():
            console.print("[dim]Already at the last card.[/dim]")
    elif key == "p":
        if not app.previous_card():
            console.print("[dim]Already at the first card.[/dim]")
    elif key == "s":
        if app.store.get_cards_for_active_deck():
            app.shuffle()
    elif key == "a":
        app.prompt_create_card()
    elif key == "e":
        if current is not None:
            app.prompt_edit_card(current.id)
    elif key == "d":
        if current is not None:
            app.confirm_delete_card(current.id)
    elif key == "q":
        return False
    else:
        console.print(f"[bold red]Unknown command: {escape(command)}[/bold red]")
    return True


def start_study_flow(
    app: FlashcardApp,
    console: Console,
    search_keyword: Optional[str] = None,
) -> None:
    """
    Run the interactive study loop until the user quits.

    Args:
        app: The FlashcardApp whose active deck is studied.
        console: Console used for rendering and input.
        search_keyword: Optional initial search filter.
    """
    if search_keyword:
        app.set_search_keyword(search_keyword)

    snapshot = app.snapshot()
    if snapshot.active_deck is None:
        console.print("[bold yellow]No decks yet. Create one![/bold yellow]")
        return

    console.print(
        f"[bold cyan]Studying deck: {escape(snapshot.active_deck.name)}[/bold cyan]"
    )
    console.print(HELP_TEXT)

    while True:
        app.poll()
        render_study_area(console, app.snapshot())
        try:
            command = console.input("[bold]> [/bold]")
        except (KeyboardInterrupt, EOFError):
            break
        if not _handle_command(app, console, command):
            break

    console.print("[bold cyan]Study session finished. Well done![/bold cyan]")
