"""
Terminal implementation of the UserInterface capability.
"""

import logging
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from flipdeck.models import FormField

logger = logging.getLogger(__name__)


class RichUserInterface:
    """
    Asks questions on the terminal with rich and typer.

    With assume_yes every confirmation is answered yes without prompting
    (the CLI's --yes flag).
    """

    def __init__(self, console: Console, assume_yes: bool = False):
        self.console = console
        self.assume_yes = assume_yes

    def confirm(self, message: str) -> bool:
        if self.assume_yes:
            return True
        return typer.confirm(message, default=False)

    def prompt_form(self, fields: List[FormField]) -> Optional[Dict[str, str]]:
        """
        Prompt for each field in turn. Pressing Enter on a pre-filled field
        keeps its value; Ctrl-C or Ctrl-D cancels the whole form.

        Multiline fields read lines until an empty line and join them with
        newlines.
        """
        values: Dict[str, str] = {}
        for field in fields:
            try:
                answer = self._read_field(field)
            except (KeyboardInterrupt, EOFError):
                logger.debug(f"Form cancelled at field '{field.name}'.")
                self.console.print("[yellow]Cancelled.[/yellow]")
                return None
            values[field.name] = answer if answer else field.value
        return values

    def _read_field(self, field: FormField) -> str:
        hint = f" [dim]({escape(field.value)})[/dim]" if field.value else ""
        if not field.multiline:
            return self.console.input(f"[bold]{field.label}[/bold]{hint}: ")

        self.console.print(
            f"[bold]{field.label}[/bold]{hint} "
            "[dim]- finish with an empty line[/dim]"
        )
        lines: List[str] = []
        while True:
            line = self.console.input("  ")
            if not line:
                break
            lines.append(line)
        return "\n".join(lines)

    def notify(self, message: str) -> None:
        self.console.print(f"[yellow]{message}[/yellow]")
