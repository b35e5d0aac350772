"""
Static constants for flipdeck.

No runtime configuration here; see flipdeck.config for environment-driven
settings.
"""

# Namespaced key of the single durable slot holding the whole app record.
STORAGE_KEY: str = "flashcardsAppState_v1"

# Quiet period after the last search keystroke before the session recomputes.
DEFAULT_SEARCH_DEBOUNCE_MS: int = 300

CONFIRM_DELETE_DECK: str = (
    "WARNING: This will permanently delete the deck and all its cards. "
    "Are you sure?"
)
CONFIRM_DELETE_CARD: str = "Are you sure you want to delete this card?"

EMPTY_DECK_NAME_MESSAGE: str = "Deck name cannot be empty."
EMPTY_CARD_FIELDS_MESSAGE: str = "Both front and back fields must be filled."
SHUFFLED_MESSAGE: str = "Deck shuffled!"
