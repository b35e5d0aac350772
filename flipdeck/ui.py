"""
Capability interface the core uses to reach the user.

The view layer implements it; the core never owns dialog or modal state.
"""

from typing import Dict, List, Optional, Protocol, runtime_checkable

from .models import FormField


@runtime_checkable
class UserInterface(Protocol):
    def confirm(self, message: str) -> bool:
        """Ask a yes/no question. True means the user agreed."""
        ...

    def prompt_form(self, fields: List[FormField]) -> Optional[Dict[str, str]]:
        """
        Ask for one value per field.

        Returns a mapping of field name to raw (untrimmed) value, or None if
        the user cancelled.
        """
        ...

    def notify(self, message: str) -> None:
        """Show a short informational or validation message."""
        ...
