from pathlib import Path
from typing import Optional

from rich.console import Console

from flipdeck.app import FlashcardApp
from flipdeck.cli.prompts import RichUserInterface
from flipdeck.cli.study_ui import start_study_flow
from flipdeck.config import load_settings


def study_logic(
    db_path: Optional[Path],
    console: Console,
    search_keyword: Optional[str] = None,
):
    """
    Open the stored decks and run the interactive study loop on the active
    deck.

    Parameters:
        db_path (Optional[Path]): Storage file; None falls back to settings.
        console (Console): Console for rendering and prompts.
        search_keyword (Optional[str]): Initial search filter.
    """
    settings = load_settings(db_path)
    ui = RichUserInterface(console)
    with FlashcardApp.from_settings(settings, ui=ui) as flash_app:
        start_study_flow(flash_app, console, search_keyword=search_keyword)
