"""Flipdeck - a local flashcard deck manager with a flip-card study mode."""

from .models import AppState, Card, Deck, StudySession, DisplayKind
from .constants import STORAGE_KEY
from .app import FlashcardApp
from .persistence import PersistenceAdapter
from .store import DeckStore
from .study import StudyProjector

__all__ = [
    "AppState",
    "Card",
    "Deck",
    "StudySession",
    "DisplayKind",
    "STORAGE_KEY",
    "FlashcardApp",
    "PersistenceAdapter",
    "DeckStore",
    "StudyProjector",
]
