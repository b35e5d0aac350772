"""
Data models for decks, cards, the durable app record and the ephemeral
study session.

Field names are snake_case in Python; the durable record uses the camelCase
aliases (createdAt, updatedAt, cardsByDeckId, activeDeckId) on the wire.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def generate_id() -> str:
    """Return a fresh opaque unique identifier."""
    return uuid.uuid4().hex


def now_ms() -> int:
    """Current UTC time as integer milliseconds since the Unix epoch."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class Deck(BaseModel):
    """
    A named collection of cards.

    Only the name is mutable after creation; it is never re-validated here,
    callers trim and reject blank names before reaching the store.
    """

    model_config = ConfigDict(
        validate_assignment=True, populate_by_name=True, extra="ignore"
    )

    id: str = Field(
        default_factory=generate_id,
        description="Opaque unique deck identifier. Auto-generated.",
    )
    name: str = Field(..., description="Display name of the deck.")
    created_at: int = Field(
        default_factory=now_ms,
        alias="createdAt",
        description="Creation time in epoch milliseconds.",
    )


class Card(BaseModel):
    """
    A front/back text pair owned by exactly one deck.
    """

    model_config = ConfigDict(
        validate_assignment=True, populate_by_name=True, extra="ignore"
    )

    id: str = Field(
        default_factory=generate_id,
        description="Opaque unique card identifier. Auto-generated.",
    )
    front: str = Field(..., description="Question side of the card.")
    back: str = Field(..., description="Answer side of the card.")
    updated_at: int = Field(
        default_factory=now_ms,
        alias="updatedAt",
        description="Last create/update time in epoch milliseconds.",
    )

    def matches(self, keyword: str) -> bool:
        """
        Case-insensitive substring match of keyword against front or back.

        An empty keyword matches every card.
        """
        needle = keyword.lower()
        return needle in self.front.lower() or needle in self.back.lower()


class AppState(BaseModel):
    """
    The durable subset of application state.

    Invariants kept by DeckStore: every key of cards_by_deck_id is the id of
    exactly one deck and every deck has a collection; active_deck_id is None
    or the id of an existing deck.
    """

    model_config = ConfigDict(
        validate_assignment=True, populate_by_name=True, extra="ignore"
    )

    decks: List[Deck] = Field(default_factory=list)
    cards_by_deck_id: Dict[str, List[Card]] = Field(
        default_factory=dict, alias="cardsByDeckId"
    )
    active_deck_id: Optional[str] = Field(default=None, alias="activeDeckId")

    @field_validator("decks", mode="before")
    @classmethod
    def null_decks_as_empty(cls, v):
        """A stored null means no decks, like a missing key."""
        return [] if v is None else v

    @field_validator("cards_by_deck_id", mode="before")
    @classmethod
    def null_cards_as_empty(cls, v):
        return {} if v is None else v

    @classmethod
    def empty(cls) -> "AppState":
        """The initial state: no decks, no cards, no active deck."""
        return cls()


class StudySession(BaseModel):
    """
    Ephemeral, re-derivable view over the active deck's cards.

    Holds copies of the deck's cards, so content edits must be mirrored in
    explicitly. Never persisted.
    """

    model_config = ConfigDict(validate_assignment=True)

    cards: List[Card] = Field(default_factory=list)
    current_index: int = Field(default=0, ge=0)
    is_flipped: bool = False

    @property
    def current_card(self) -> Optional[Card]:
        if not self.cards:
            return None
        return self.cards[self.current_index]


class DisplayKind(str, Enum):
    """What the study area shows on a given render."""

    NO_ACTIVE_DECK = "no_active_deck"
    DECK_EMPTY = "deck_empty"
    FILTERED_EMPTY = "filtered_empty"
    SHOWING_CARD = "showing_card"


class StudyDisplay(BaseModel):
    """
    Render-ready description of the study area, including which controls are
    enabled.
    """

    model_config = ConfigDict(frozen=True)

    kind: DisplayKind
    card: Optional[Card] = None
    is_flipped: bool = False
    current_index: int = 0
    total: int = 0
    can_go_previous: bool = False
    can_go_next: bool = False
    can_flip: bool = False
    can_shuffle: bool = False


class DeckSummary(BaseModel):
    """One row of the deck list."""

    model_config = ConfigDict(frozen=True)

    deck: Deck
    card_count: int
    is_active: bool


class AppSnapshot(BaseModel):
    """
    Read-only copy of store and session state handed to the view layer after
    every operation.
    """

    model_config = ConfigDict(frozen=True)

    decks: List[Deck]
    cards_by_deck_id: Dict[str, List[Card]]
    active_deck_id: Optional[str]
    active_deck: Optional[Deck]
    deck_summaries: List[DeckSummary]
    session: StudySession
    search_keyword: str
    match_count: Optional[int] = Field(
        default=None,
        description="Number of matching cards when a search is active.",
    )
    display: StudyDisplay


class FormField(BaseModel):
    """A single input requested from the user through prompt_form."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    value: str = ""
    multiline: bool = False
