"""
Save/load contract between the in-memory AppState and durable key-value
storage.

Every failure is contained here: a failed save leaves in-memory state
authoritative and durable state stale, a corrupt payload is discarded and
replaced by the empty initial state on load.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from .constants import STORAGE_KEY
from .exceptions import StorageError
from .models import AppState
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


class PersistenceAdapter:
    """
    Serializes the durable fields of AppState (decks, cardsByDeckId,
    activeDeckId) into a single namespaced slot of a KeyValueStore.
    """

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY):
        self._store = store
        self.key = key
        self.last_error: Optional[Exception] = None

    def save(self, state: AppState) -> bool:
        """
        Write the durable record for state under the storage key.

        Never raises. Failures (quota exceeded, unavailable backend,
        unserializable values) are logged and reported through the return
        value; nothing is retried.

        Returns:
            bool: True when the write reached the backend.
        """
        try:
            payload = state.model_dump_json(by_alias=True)
            self._store.set_item(self.key, payload)
        except (StorageError, ValueError) as e:
            logger.error(f"Could not save state to storage key '{self.key}': {e}")
            self.last_error = e
            return False
        self.last_error = None
        logger.debug(
            f"Saved {len(state.decks)} decks under storage key '{self.key}'."
        )
        return True

    def load(self) -> AppState:
        """
        Read and validate the durable record.

        Returns the empty initial state when the key is missing or the
        backend cannot be read. A payload that is not JSON or does not have
        the record shape is treated as corrupt: the key is removed and the
        empty state returned. A valid payload is reconciled so that deck ids
        are unique (the first deck with an id wins), decks and card
        collections correspond 1:1 and activeDeckId points at an
        existing deck (falling back to the first deck, or None).
        """
        try:
            raw: Optional[str] = self._store.get_item(self.key)
        except StorageError as e:
            logger.error(f"Could not read storage key '{self.key}': {e}")
            return AppState.empty()

        if raw is None:
            logger.info(
                f"No stored state under '{self.key}'. Starting with an empty state."
            )
            return AppState.empty()

        try:
            state = AppState.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                f"Corrupt state under storage key '{self.key}' removed: {e}"
            )
            self._discard()
            return AppState.empty()

        return self._reconcile(state)

    def _discard(self) -> None:
        try:
            self._store.remove_item(self.key)
        except StorageError as e:
            logger.error(f"Could not remove corrupt storage key '{self.key}': {e}")

    @staticmethod
    def _reconcile(state: AppState) -> AppState:
        decks = []
        deck_ids = []
        for deck in state.decks:
            if deck.id in deck_ids:
                logger.warning(
                    f"Dropping duplicate deck '{deck.name}' with id '{deck.id}'."
                )
                continue
            decks.append(deck)
            deck_ids.append(deck.id)

        cards_by_deck_id = {}
        for deck_id in deck_ids:
            cards_by_deck_id[deck_id] = state.cards_by_deck_id.get(deck_id, [])

        orphaned = set(state.cards_by_deck_id) - set(deck_ids)
        if orphaned:
            logger.warning(
                f"Dropping card collections without a deck: {sorted(orphaned)}"
            )
        missing = set(deck_ids) - set(state.cards_by_deck_id)
        if missing:
            logger.warning(
                f"Adding empty card collections for decks: {sorted(missing)}"
            )

        active_deck_id = state.active_deck_id
        if active_deck_id not in deck_ids:
            active_deck_id = deck_ids[0] if deck_ids else None
            if state.active_deck_id is not None:
                logger.warning(
                    f"Stored active deck '{state.active_deck_id}' no longer exists; "
                    f"using {active_deck_id!r}."
                )

        return AppState(
            decks=decks,
            cards_by_deck_id=cards_by_deck_id,
            active_deck_id=active_deck_id,
        )
