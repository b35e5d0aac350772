"""
This module defines the DeckStore class, the single owner of decks and their
card collections. Every durable mutation is followed by an eager write
through the PersistenceAdapter.
"""

import logging
from typing import List, Optional

from .models import AppState, Card, Deck, DeckSummary, now_ms
from .persistence import PersistenceAdapter

logger = logging.getLogger(__name__)


class DeckStore:
    """
    Owns the ordered deck sequence, the deck id -> cards mapping and the
    active deck id.

    This class is responsible for:
    - Deck and card CRUD scoped by deck id.
    - Keeping decks and card collections in 1:1 correspondence.
    - Keeping the active deck id None or pointing at an existing deck.
    - Persisting after every durable mutation.

    Stale ids never raise: mutations become no-ops and lookups return None
    or an empty list. Names and card text are stored as given; trimming and
    rejecting blanks happens before the call.
    """

    def __init__(
        self,
        state: Optional[AppState] = None,
        persistence: Optional[PersistenceAdapter] = None,
    ):
        """
        Parameters:
            state (Optional[AppState]): Initial state, typically from
                PersistenceAdapter.load(). Defaults to the empty state.
            persistence (Optional[PersistenceAdapter]): Where durable
                mutations are written. None keeps the store in memory only.
        """
        self._state = state if state is not None else AppState.empty()
        self._persistence = persistence

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def decks(self) -> List[Deck]:
        return list(self._state.decks)

    @property
    def active_deck_id(self) -> Optional[str]:
        return self._state.active_deck_id

    @property
    def active_deck(self) -> Optional[Deck]:
        if self._state.active_deck_id is None:
            return None
        return self.get_deck(self._state.active_deck_id)

    def _persist(self) -> None:
        if self._persistence is not None:
            self._persistence.save(self._state)

    # --- Deck Operations ---

    def get_deck(self, deck_id: str) -> Optional[Deck]:
        for deck in self._state.decks:
            if deck.id == deck_id:
                return deck
        return None

    def create_deck(self, name: str) -> Deck:
        """
        Append a new deck with an empty card collection and make it active.

        Parameters:
            name (str): Already-trimmed, non-empty deck name.

        Returns:
            Deck: The created deck.
        """
        deck = Deck(name=name)
        self._state.decks.append(deck)
        self._state.cards_by_deck_id[deck.id] = []
        self._state.active_deck_id = deck.id
        logger.info(f"Created deck '{name}' ({deck.id}).")
        self._persist()
        return deck

    def rename_deck(self, deck_id: str, new_name: str) -> bool:
        """Rename a deck. Returns False (no write) if deck_id is unknown."""
        deck = self.get_deck(deck_id)
        if deck is None:
            logger.debug(f"rename_deck: no deck {deck_id}; ignoring.")
            return False
        deck.name = new_name
        self._persist()
        return True

    def delete_deck(self, deck_id: str) -> bool:
        """
        Remove a deck together with its whole card collection.

        If the deck was active, the first remaining deck becomes active, or
        None when no decks remain. Unconditional; confirmation is the
        caller's concern.

        Returns:
            bool: False if deck_id is unknown.
        """
        if self.get_deck(deck_id) is None:
            logger.debug(f"delete_deck: no deck {deck_id}; ignoring.")
            return False

        remaining = [deck for deck in self._state.decks if deck.id != deck_id]
        self._state.decks = remaining
        self._state.cards_by_deck_id.pop(deck_id, None)
        if self._state.active_deck_id == deck_id:
            self._state.active_deck_id = remaining[0].id if remaining else None
        logger.info(f"Deleted deck {deck_id}.")
        self._persist()
        return True

    def set_active_deck(self, deck_id: str) -> bool:
        """
        Select the active deck.

        Returns:
            bool: True if the selection changed; False when deck_id is
            already active or unknown.
        """
        if deck_id == self._state.active_deck_id:
            return False
        if self.get_deck(deck_id) is None:
            logger.debug(f"set_active_deck: no deck {deck_id}; ignoring.")
            return False
        self._state.active_deck_id = deck_id
        self._persist()
        return True

    def deck_summaries(self) -> List[DeckSummary]:
        """Decks in display order with their card counts and active flag."""
        return [
            DeckSummary(
                deck=deck.model_copy(),
                card_count=len(self._state.cards_by_deck_id.get(deck.id, [])),
                is_active=deck.id == self._state.active_deck_id,
            )
            for deck in self._state.decks
        ]

    # --- Card Operations ---

    def get_cards_for_deck(self, deck_id: Optional[str]) -> List[Card]:
        """Cards of deck_id in order; empty for unknown or None ids."""
        if deck_id is None:
            return []
        return list(self._state.cards_by_deck_id.get(deck_id, []))

    def get_cards_for_active_deck(self) -> List[Card]:
        return self.get_cards_for_deck(self._state.active_deck_id)

    def get_card_by_id(self, deck_id: str, card_id: str) -> Optional[Card]:
        for card in self._state.cards_by_deck_id.get(deck_id, []):
            if card.id == card_id:
                return card
        return None

    def create_card(self, deck_id: str, front: str, back: str) -> Optional[Card]:
        """
        Append a new card to a deck's collection.

        A deck whose collection is somehow missing gets an empty one first.
        An unknown deck_id is a no-op, since adding a collection for it
        would orphan the cards.

        Returns:
            Optional[Card]: The created card, or None if deck_id is unknown.
        """
        if self.get_deck(deck_id) is None:
            logger.debug(f"create_card: no deck {deck_id}; ignoring.")
            return None
        card = Card(front=front, back=back)
        self._state.cards_by_deck_id.setdefault(deck_id, []).append(card)
        logger.debug(f"Created card {card.id} in deck {deck_id}.")
        self._persist()
        return card

    def update_card(
        self, deck_id: str, card_id: str, new_front: str, new_back: str
    ) -> Optional[Card]:
        """
        Overwrite a card's text and bump its timestamp.

        Returns:
            Optional[Card]: The updated card, or None if not found.
        """
        card = self.get_card_by_id(deck_id, card_id)
        if card is None:
            logger.debug(
                f"update_card: no card {card_id} in deck {deck_id}; ignoring."
            )
            return None
        card.front = new_front
        card.back = new_back
        card.updated_at = now_ms()
        self._persist()
        return card

    def delete_card(self, deck_id: str, card_id: str) -> bool:
        """Remove a card by id. Returns False if it was not present."""
        cards = self._state.cards_by_deck_id.get(deck_id)
        if not cards or all(card.id != card_id for card in cards):
            logger.debug(
                f"delete_card: no card {card_id} in deck {deck_id}; ignoring."
            )
            return False
        self._state.cards_by_deck_id[deck_id] = [
            card for card in cards if card.id != card_id
        ]
        self._persist()
        return True
