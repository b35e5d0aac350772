"""
Application facade tying the Domain Store, Study Projector, Persistence
Adapter and search debouncer together.

The view layer calls the intent methods of FlashcardApp and re-renders from
snapshot(); FlashcardApp reaches the user only through the UserInterface
capability it was given.
"""

import logging
import random
import time
from typing import Callable, Dict, List, Optional

from .config import Settings
from .constants import (
    CONFIRM_DELETE_CARD,
    CONFIRM_DELETE_DECK,
    EMPTY_CARD_FIELDS_MESSAGE,
    EMPTY_DECK_NAME_MESSAGE,
    SHUFFLED_MESSAGE,
    DEFAULT_SEARCH_DEBOUNCE_MS,
)
from .debounce import Debouncer
from .models import AppSnapshot, Card, Deck, FormField, StudySession
from .persistence import PersistenceAdapter
from .storage import DuckDBKeyValueStore
from .store import DeckStore
from .study import StudyProjector, describe_display
from .ui import UserInterface

logger = logging.getLogger(__name__)


class FlashcardApp:
    """
    Owns the application state object for one running instance.

    Lifecycle: constructed from PersistenceAdapter.load(); every durable
    mutation writes through eagerly, so no final save is needed on close.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        ui: Optional[UserInterface] = None,
        search_debounce_seconds: float = DEFAULT_SEARCH_DEBOUNCE_MS / 1000.0,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
        backend: Optional[DuckDBKeyValueStore] = None,
    ):
        """
        Parameters:
            persistence (PersistenceAdapter): Source of the initial state and
                target of every durable write.
            ui (Optional[UserInterface]): Needed only by the prompt_* and
                confirm_* flows and for notifications.
            search_debounce_seconds (float): Quiet period for
                on_search_input().
            clock (Callable[[], float]): Monotonic clock for the debouncer.
            rng (Optional[random.Random]): Randomness for shuffle().
            backend (Optional[DuckDBKeyValueStore]): Storage closed by
                close(), when the app opened it itself.
        """
        self.persistence = persistence
        self.ui = ui
        self._backend = backend
        self.store = DeckStore(persistence.load(), persistence)
        self.projector = StudyProjector(self.store, rng=rng)
        self.search_keyword = ""
        self._search_debouncer = Debouncer(
            self.set_search_keyword, search_debounce_seconds, clock=clock
        )
        self.refresh_session()
        logger.info(
            f"Flashcard app started with {len(self.store.decks)} decks."
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, ui: Optional[UserInterface] = None
    ) -> "FlashcardApp":
        """Open the DuckDB-backed storage described by settings."""
        backend = DuckDBKeyValueStore(settings.db_path)
        persistence = PersistenceAdapter(backend, key=settings.storage_key)
        return cls(
            persistence,
            ui=ui,
            search_debounce_seconds=settings.search_debounce_seconds,
            backend=backend,
        )

    def close(self) -> None:
        self._search_debouncer.cancel()
        if self._backend is not None:
            self._backend.close()

    def __enter__(self) -> "FlashcardApp":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # --- Read Access ---

    @property
    def session(self) -> StudySession:
        return self.projector.session

    def snapshot(self) -> AppSnapshot:
        """
        Deep copy of the current store and session state plus the derived
        display, safe for the view layer to hold on to.
        """
        state = self.store.state
        session = self.projector.session.model_copy(deep=True)
        active_deck_id = state.active_deck_id
        active_deck = self.store.active_deck
        match_count = (
            len(session.cards) if self.search_keyword.strip() else None
        )
        return AppSnapshot(
            decks=[deck.model_copy() for deck in state.decks],
            cards_by_deck_id={
                deck_id: [card.model_copy() for card in cards]
                for deck_id, cards in state.cards_by_deck_id.items()
            },
            active_deck_id=active_deck_id,
            active_deck=active_deck.model_copy() if active_deck else None,
            deck_summaries=self.store.deck_summaries(),
            session=session,
            search_keyword=self.search_keyword,
            match_count=match_count,
            display=describe_display(
                session,
                active_deck_id,
                len(self.store.get_cards_for_deck(active_deck_id)),
            ),
        )

    def refresh_session(self) -> StudySession:
        """Recompute the study session for the active deck and keyword."""
        return self.projector.recompute(
            self.store.active_deck_id, self.search_keyword
        )

    # --- Deck Intents ---

    def create_deck(self, name: str) -> Deck:
        deck = self.store.create_deck(name)
        self.refresh_session()
        return deck

    def rename_deck(self, deck_id: str, new_name: str) -> bool:
        return self.store.rename_deck(deck_id, new_name)

    def delete_deck(self, deck_id: str) -> bool:
        deleted = self.store.delete_deck(deck_id)
        if deleted:
            self.refresh_session()
        return deleted

    def select_deck(self, deck_id: str) -> bool:
        changed = self.store.set_active_deck(deck_id)
        if changed:
            self.refresh_session()
        return changed

    # --- Card Intents ---

    def _deck_or_active(self, deck_id: Optional[str]) -> Optional[str]:
        return deck_id if deck_id is not None else self.store.active_deck_id

    def create_card(
        self, front: str, back: str, deck_id: Optional[str] = None
    ) -> Optional[Card]:
        """Add a card to deck_id (the active deck by default)."""
        target = self._deck_or_active(deck_id)
        if target is None:
            return None
        card = self.store.create_card(target, front, back)
        if card is not None:
            self.refresh_session()
        return card

    def update_card(
        self,
        card_id: str,
        new_front: str,
        new_back: str,
        deck_id: Optional[str] = None,
    ) -> Optional[Card]:
        """
        Edit a card in place. The session copy is patched rather than
        recomputed, so the current position and flip state are kept.
        """
        target = self._deck_or_active(deck_id)
        if target is None:
            return None
        card = self.store.update_card(target, card_id, new_front, new_back)
        if card is not None:
            self.projector.apply_card_update(card)
        return card

    def delete_card(self, card_id: str, deck_id: Optional[str] = None) -> bool:
        target = self._deck_or_active(deck_id)
        if target is None:
            return False
        deleted = self.store.delete_card(target, card_id)
        if deleted:
            self.refresh_session()
        return deleted

    # --- Study Intents ---

    def flip(self) -> bool:
        return self.projector.flip()

    def next_card(self) -> bool:
        return self.projector.navigate(1)

    def previous_card(self) -> bool:
        return self.projector.navigate(-1)

    def shuffle(self) -> None:
        self.projector.shuffle()
        if self.ui is not None and self.projector.session.cards:
            self.ui.notify(SHUFFLED_MESSAGE)

    def set_search_keyword(self, keyword: str) -> StudySession:
        """Apply a search keyword immediately."""
        self.search_keyword = keyword
        return self.refresh_session()

    def on_search_input(self, keyword: str) -> None:
        """Debounced variant of set_search_keyword for per-keystroke input."""
        self._search_debouncer.submit(keyword)

    def poll(self) -> bool:
        """Let a due debounced search run. Returns True if it did."""
        return self._search_debouncer.poll()

    def flush_search(self) -> bool:
        return self._search_debouncer.flush()

    @property
    def search_pending(self) -> bool:
        return self._search_debouncer.pending

    # --- Dialog Flows ---

    def _require_ui(self) -> UserInterface:
        if self.ui is None:
            raise RuntimeError("This operation needs a UserInterface.")
        return self.ui

    def _prompt(self, fields: List[FormField]) -> Optional[Dict[str, str]]:
        values = self._require_ui().prompt_form(fields)
        if values is None:
            logger.debug("Form cancelled by user.")
        return values

    def prompt_create_deck(self) -> Optional[Deck]:
        values = self._prompt([FormField(name="name", label="Deck Name")])
        if values is None:
            return None
        name = values.get("name", "").strip()
        if not name:
            self._require_ui().notify(EMPTY_DECK_NAME_MESSAGE)
            return None
        return self.create_deck(name)

    def prompt_rename_deck(self, deck_id: str) -> bool:
        deck = self.store.get_deck(deck_id)
        if deck is None:
            return False
        values = self._prompt(
            [FormField(name="name", label="New Name", value=deck.name)]
        )
        if values is None:
            return False
        name = values.get("name", "").strip()
        if not name:
            self._require_ui().notify(EMPTY_DECK_NAME_MESSAGE)
            return False
        return self.rename_deck(deck_id, name)

    def confirm_delete_deck(self, deck_id: str) -> bool:
        if self.store.get_deck(deck_id) is None:
            return False
        if not self._require_ui().confirm(CONFIRM_DELETE_DECK):
            return False
        return self.delete_deck(deck_id)

    def _card_fields(self, card: Optional[Card] = None) -> List[FormField]:
        return [
            FormField(
                name="front",
                label="Front",
                value=card.front if card else "",
                multiline=True,
            ),
            FormField(
                name="back",
                label="Back",
                value=card.back if card else "",
                multiline=True,
            ),
        ]

    def _card_values(self, values: Dict[str, str]) -> Optional[tuple]:
        front = values.get("front", "").strip()
        back = values.get("back", "").strip()
        if not front or not back:
            self._require_ui().notify(EMPTY_CARD_FIELDS_MESSAGE)
            return None
        return front, back

    def prompt_create_card(self) -> Optional[Card]:
        """Ask for a new card in the active deck."""
        if self.store.active_deck_id is None:
            return None
        values = self._prompt(self._card_fields())
        if values is None:
            return None
        text = self._card_values(values)
        if text is None:
            return None
        return self.create_card(*text)

    def prompt_edit_card(
        self, card_id: str, deck_id: Optional[str] = None
    ) -> Optional[Card]:
        """Ask for new text for a card of deck_id (the active deck by default)."""
        deck_id = self._deck_or_active(deck_id)
        if deck_id is None:
            return None
        card = self.store.get_card_by_id(deck_id, card_id)
        if card is None:
            return None
        values = self._prompt(self._card_fields(card))
        if values is None:
            return None
        text = self._card_values(values)
        if text is None:
            return None
        return self.update_card(card_id, *text, deck_id=deck_id)

    def confirm_delete_card(
        self, card_id: str, deck_id: Optional[str] = None
    ) -> bool:
        deck_id = self._deck_or_active(deck_id)
        if deck_id is None or self.store.get_card_by_id(deck_id, card_id) is None:
            return False
        if not self._require_ui().confirm(CONFIRM_DELETE_CARD):
            return False
        return self.delete_card(card_id, deck_id=deck_id)
