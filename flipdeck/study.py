"""
Study session projection: the filtered, orderable working view over one
deck's cards, and the flip/navigate/shuffle transitions on it.
"""

import logging
import random
from typing import List, Optional, Sequence

from .models import Card, DisplayKind, StudyDisplay, StudySession
from .store import DeckStore

logger = logging.getLogger(__name__)


def filter_cards(cards: Sequence[Card], search_keyword: str) -> List[Card]:
    """
    Cards whose front or back contains the trimmed keyword, case-insensitive,
    in their original order. A blank keyword keeps every card.
    """
    keyword = search_keyword.strip()
    if not keyword:
        return list(cards)
    return [card for card in cards if card.matches(keyword)]


def describe_display(
    session: StudySession,
    active_deck_id: Optional[str],
    deck_card_count: int,
) -> StudyDisplay:
    """
    Classify what the study area shows for one render.

    Parameters:
        session (StudySession): Current projection.
        active_deck_id (Optional[str]): The store's active deck id.
        deck_card_count (int): Number of cards in the active deck itself,
            before filtering.

    Returns:
        StudyDisplay: NO_ACTIVE_DECK without an active deck, DECK_EMPTY when
        the deck has no cards, FILTERED_EMPTY when a search matched nothing,
        otherwise SHOWING_CARD with the current card and control states.
    """
    if active_deck_id is None:
        return StudyDisplay(kind=DisplayKind.NO_ACTIVE_DECK)

    total = len(session.cards)
    can_shuffle = deck_card_count > 0
    if deck_card_count == 0:
        return StudyDisplay(kind=DisplayKind.DECK_EMPTY)
    if total == 0:
        return StudyDisplay(
            kind=DisplayKind.FILTERED_EMPTY, can_shuffle=can_shuffle
        )

    index = session.current_index
    return StudyDisplay(
        kind=DisplayKind.SHOWING_CARD,
        card=session.cards[index],
        is_flipped=session.is_flipped,
        current_index=index,
        total=total,
        can_go_previous=index > 0,
        can_go_next=index < total - 1,
        can_flip=True,
        can_shuffle=can_shuffle,
    )


class StudyProjector:
    """
    Derives and mutates the ephemeral StudySession for a deck of the store.

    The session holds copies of the store's cards; the store stays the only
    source of truth. recompute() must run after any mutation that can change
    which cards are shown (card create/delete, deck switch or delete, new
    search keyword). Content edits go through apply_card_update() instead so
    position and flip state survive.
    """

    def __init__(self, store: DeckStore, rng: Optional[random.Random] = None):
        """
        Parameters:
            store (DeckStore): Where deck card collections are read from.
            rng (Optional[random.Random]): Randomness for shuffle(); a
                seeded instance makes shuffles reproducible in tests.
        """
        self._store = store
        self._rng = rng or random.Random()
        self.session = StudySession()
        self.search_keyword = ""

    def recompute(
        self, deck_id: Optional[str], search_keyword: str = ""
    ) -> StudySession:
        """
        Rebuild the session from deck_id's cards filtered by search_keyword.

        The previous index is kept when still in range, otherwise clamped to
        the last card (0 for an empty result). Flip state always resets.
        Idempotent for identical inputs.
        """
        filtered = filter_cards(
            self._store.get_cards_for_deck(deck_id), search_keyword
        )
        index = self.session.current_index
        if index >= len(filtered):
            index = max(0, len(filtered) - 1)

        self.search_keyword = search_keyword
        self.session = StudySession(
            cards=[card.model_copy() for card in filtered],
            current_index=index,
            is_flipped=False,
        )
        logger.debug(
            f"Recomputed session for deck {deck_id}: "
            f"{len(filtered)} cards, index {index}."
        )
        return self.session

    def flip(self) -> bool:
        """Toggle the flip state. No-op on an empty session."""
        if not self.session.cards:
            return False
        self.session.is_flipped = not self.session.is_flipped
        return True

    def navigate(self, direction: int) -> bool:
        """
        Move one card back (-1) or forward (+1) without wraparound.

        Returns:
            bool: True if the index moved; flip state resets only then.

        Raises:
            ValueError: If direction is not -1 or +1.
        """
        if direction not in (-1, 1):
            raise ValueError(f"direction must be -1 or 1, got {direction}")
        new_index = self.session.current_index + direction
        if not 0 <= new_index < len(self.session.cards):
            return False
        self.session.current_index = new_index
        self.session.is_flipped = False
        return True

    def shuffle(self) -> None:
        """
        Randomly permute the session's cards (Fisher-Yates via
        random.Random.shuffle), then go back to the first card face-up.
        The deck's stored order is untouched.
        """
        self._rng.shuffle(self.session.cards)
        self.session.current_index = 0
        self.session.is_flipped = False

    def apply_card_update(self, card: Card) -> bool:
        """
        Mirror an edited card's text into the session copy with the same id,
        keeping index and flip state.

        Returns:
            bool: True if the card is part of the session.
        """
        for held in self.session.cards:
            if held.id == card.id:
                held.front = card.front
                held.back = card.back
                held.updated_at = card.updated_at
                return True
        return False
