import random
from typing import Dict, List, Optional

import pytest

from flipdeck.app import FlashcardApp
from flipdeck.models import FormField
from flipdeck.persistence import PersistenceAdapter
from flipdeck.storage import MemoryKeyValueStore
from flipdeck.store import DeckStore


class FakeClock:
    """Manually advanced monotonic clock for debounce tests."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUserInterface:
    """
    Scripted UserInterface: answers confirmations and forms from queues and
    records everything it was asked.
    """

    def __init__(self):
        self.confirm_answers: List[bool] = []
        self.form_answers: List[Optional[Dict[str, str]]] = []
        self.confirm_messages: List[str] = []
        self.forms: List[List[FormField]] = []
        self.notifications: List[str] = []

    def confirm(self, message: str) -> bool:
        self.confirm_messages.append(message)
        return self.confirm_answers.pop(0)

    def prompt_form(self, fields: List[FormField]) -> Optional[Dict[str, str]]:
        self.forms.append(fields)
        return self.form_answers.pop(0)

    def notify(self, message: str) -> None:
        self.notifications.append(message)


# --- Storage Fixtures ---


@pytest.fixture
def memory_kv() -> MemoryKeyValueStore:
    """Provides an empty in-memory key-value backend."""
    return MemoryKeyValueStore()


@pytest.fixture
def persistence(memory_kv: MemoryKeyValueStore) -> PersistenceAdapter:
    """Provides a PersistenceAdapter writing to the in-memory backend."""
    return PersistenceAdapter(memory_kv)


@pytest.fixture
def store(persistence: PersistenceAdapter) -> DeckStore:
    """Provides an empty DeckStore that persists through `persistence`."""
    return DeckStore(persistence.load(), persistence)


# --- App Fixtures ---


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_ui() -> FakeUserInterface:
    return FakeUserInterface()


@pytest.fixture
def flash_app(
    persistence: PersistenceAdapter,
    fake_ui: FakeUserInterface,
    fake_clock: FakeClock,
) -> FlashcardApp:
    """
    Provide a FlashcardApp over in-memory storage with a scripted UI, a fake
    clock (0.3s debounce) and a seeded RNG.
    """
    return FlashcardApp(
        persistence,
        ui=fake_ui,
        search_debounce_seconds=0.3,
        clock=fake_clock,
        rng=random.Random(1234),
    )


@pytest.fixture
def french_app(flash_app: FlashcardApp) -> FlashcardApp:
    """
    Provide a FlashcardApp whose active deck "French" holds the cards
    cat/chat, dog/chien and bird/oiseau, in that order.
    """
    flash_app.create_deck("French")
    flash_app.create_card("cat", "chat")
    flash_app.create_card("dog", "chien")
    flash_app.create_card("bird", "oiseau")
    return flash_app
