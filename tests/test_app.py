"""
Tests for the FlashcardApp facade: intents, snapshots, debounced search and
the dialog flows driven through a scripted UserInterface.
"""

import random
from unittest.mock import MagicMock

import pytest

from flipdeck.app import FlashcardApp
from flipdeck.config import Settings
from flipdeck.constants import (
    CONFIRM_DELETE_CARD,
    CONFIRM_DELETE_DECK,
    EMPTY_CARD_FIELDS_MESSAGE,
    EMPTY_DECK_NAME_MESSAGE,
    SHUFFLED_MESSAGE,
)
from flipdeck.exceptions import StorageWriteError
from flipdeck.models import DisplayKind
from flipdeck.persistence import PersistenceAdapter
from flipdeck.storage import KeyValueStore


def fronts(app: FlashcardApp) -> list:
    return [card.front for card in app.session.cards]


# --- Startup / Reload ---


def test_fresh_app_has_no_active_deck(flash_app):
    snapshot = flash_app.snapshot()
    assert snapshot.decks == []
    assert snapshot.active_deck is None
    assert snapshot.display.kind == DisplayKind.NO_ACTIVE_DECK


def test_state_survives_restart(french_app, persistence, fake_clock):
    french_app.create_deck("German")
    french_app.select_deck(french_app.store.decks[0].id)

    restarted = FlashcardApp(persistence, clock=fake_clock)

    assert [d.name for d in restarted.store.decks] == ["French", "German"]
    assert restarted.store.active_deck.name == "French"
    assert fronts(restarted) == ["cat", "dog", "bird"]


def test_from_settings_uses_duckdb_file(tmp_path):
    settings = Settings(db_path=tmp_path / "app.db", search_debounce_ms=0)

    with FlashcardApp.from_settings(settings) as app:
        app.create_deck("Persisted")

    with FlashcardApp.from_settings(settings) as app:
        assert app.store.active_deck.name == "Persisted"


# --- Deck Intents ---


def test_create_deck_shows_empty_deck(flash_app):
    flash_app.create_deck("Spanish")

    snapshot = flash_app.snapshot()

    assert snapshot.active_deck.name == "Spanish"
    assert snapshot.display.kind == DisplayKind.DECK_EMPTY


def test_select_deck_switches_session(french_app):
    french = french_app.store.active_deck_id
    german = french_app.create_deck("German")
    assert french_app.session.cards == []

    assert french_app.select_deck(french) is True
    assert fronts(french_app) == ["cat", "dog", "bird"]
    assert french_app.select_deck(french) is False
    assert french_app.select_deck("missing") is False

    french_app.select_deck(german.id)
    assert french_app.session.cards == []


def test_delete_active_deck_promotes_and_recomputes(french_app):
    french = french_app.store.active_deck_id
    german = french_app.create_deck("German")

    french_app.delete_deck(german.id)

    assert french_app.store.active_deck_id == french
    assert fronts(french_app) == ["cat", "dog", "bird"]


def test_delete_last_deck(french_app):
    french_app.delete_deck(french_app.store.active_deck_id)

    snapshot = french_app.snapshot()

    assert snapshot.decks == []
    assert snapshot.session.cards == []
    assert snapshot.display.kind == DisplayKind.NO_ACTIVE_DECK


def test_rename_keeps_study_position(french_app):
    french_app.next_card()
    french_app.flip()

    french_app.rename_deck(french_app.store.active_deck_id, "Francais")

    assert french_app.store.active_deck.name == "Francais"
    assert french_app.session.current_index == 1
    assert french_app.session.is_flipped is True


# --- Card Intents ---


def test_create_card_without_active_deck(flash_app):
    assert flash_app.create_card("q", "a") is None


def test_create_card_for_other_deck_leaves_session(french_app):
    french = french_app.store.active_deck_id
    german = french_app.create_deck("German")
    french_app.select_deck(french)

    french_app.create_card("Hund", "dog", deck_id=german.id)

    assert len(french_app.session.cards) == 3
    assert [c.front for c in french_app.store.get_cards_for_deck(german.id)] == [
        "Hund"
    ]


def test_update_card_keeps_position_and_flip(french_app):
    french_app.next_card()
    french_app.flip()
    card_id = french_app.session.current_card.id

    french_app.update_card(card_id, "puppy", "chiot")

    assert french_app.session.current_index == 1
    assert french_app.session.is_flipped is True
    assert french_app.session.current_card.back == "chiot"
    assert french_app.store.get_cards_for_active_deck()[1].front == "puppy"


def test_update_card_missing(french_app):
    assert french_app.update_card("missing", "q", "a") is None


def test_delete_card_clamps_index(french_app):
    french_app.next_card()
    french_app.next_card()
    last = french_app.session.current_card.id

    assert french_app.delete_card(last) is True

    assert french_app.session.current_index == 1
    assert french_app.session.current_card.front == "dog"


def test_delete_every_card_shows_deck_empty(french_app):
    for card in french_app.store.get_cards_for_active_deck():
        french_app.delete_card(card.id)

    assert french_app.snapshot().display.kind == DisplayKind.DECK_EMPTY


# --- Study Intents ---


def test_walk_through_deck(french_app):
    assert french_app.previous_card() is False
    assert french_app.flip() is True
    assert french_app.snapshot().display.is_flipped is True

    assert french_app.next_card() is True
    assert french_app.session.is_flipped is False
    assert french_app.next_card() is True
    assert french_app.next_card() is False
    assert french_app.session.current_card.front == "bird"


def test_shuffle_notifies_and_resets(french_app, fake_ui):
    french_app.next_card()

    french_app.shuffle()

    assert fake_ui.notifications == [SHUFFLED_MESSAGE]
    assert french_app.session.current_index == 0
    assert sorted(fronts(french_app)) == ["bird", "cat", "dog"]


def test_shuffle_empty_session_is_silent(flash_app, fake_ui):
    flash_app.create_deck("Empty")
    flash_app.shuffle()
    assert fake_ui.notifications == []


def test_shuffle_is_not_persisted(french_app, persistence):
    french_app.shuffle()
    reloaded = persistence.load()
    deck_id = french_app.store.active_deck_id
    assert [c.front for c in reloaded.cards_by_deck_id[deck_id]] == [
        "cat",
        "dog",
        "bird",
    ]


def test_create_card_discards_shuffled_order(french_app):
    french_app.shuffle()
    french_app.create_card("fish", "poisson")
    assert fronts(french_app) == ["cat", "dog", "bird", "fish"]


# --- Search ---


def test_set_search_keyword_filters_immediately(french_app):
    french_app.set_search_keyword("ch")

    snapshot = french_app.snapshot()

    assert [c.front for c in snapshot.session.cards] == ["cat", "dog"]
    assert snapshot.match_count == 2
    assert snapshot.search_keyword == "ch"


def test_search_without_matches(french_app):
    french_app.set_search_keyword("zzz")
    snapshot = french_app.snapshot()
    assert snapshot.display.kind == DisplayKind.FILTERED_EMPTY
    assert snapshot.match_count == 0


def test_blank_search_has_no_match_count(french_app):
    french_app.set_search_keyword("   ")
    snapshot = french_app.snapshot()
    assert snapshot.match_count is None
    assert len(snapshot.session.cards) == 3


def test_search_input_is_debounced(french_app, fake_clock):
    for text in ["b", "bi", "bir"]:
        french_app.on_search_input(text)
        fake_clock.advance(0.1)
        french_app.poll()

    assert french_app.search_pending is True
    assert len(french_app.session.cards) == 3

    fake_clock.advance(0.2)
    assert french_app.poll() is True

    assert fronts(french_app) == ["bird"]
    assert french_app.search_keyword == "bir"
    assert french_app.search_pending is False


def test_flush_search(french_app):
    french_app.on_search_input("dog")
    assert french_app.flush_search() is True
    assert fronts(french_app) == ["dog"]


def test_search_persists_across_deck_switch(french_app):
    french = french_app.store.active_deck_id
    french_app.set_search_keyword("cat")
    french_app.create_deck("German")
    french_app.create_card("Katze", "cat")
    assert fronts(french_app) == ["Katze"]

    french_app.select_deck(french)
    assert fronts(french_app) == ["cat"]


def test_close_cancels_pending_search(french_app):
    french_app.on_search_input("dog")
    french_app.close()
    assert french_app.search_pending is False


# --- Snapshot ---


def test_snapshot_is_detached(french_app):
    snapshot = french_app.snapshot()
    snapshot.session.cards[0].front = "changed"
    snapshot.decks[0].name = "changed"

    assert french_app.session.cards[0].front == "cat"
    assert french_app.store.decks[0].name == "French"


def test_snapshot_deck_summaries(french_app):
    french_app.create_deck("German")
    summaries = french_app.snapshot().deck_summaries
    assert [(s.deck.name, s.card_count, s.is_active) for s in summaries] == [
        ("French", 3, False),
        ("German", 0, True),
    ]


# --- Storage Failures ---


def test_failed_save_keeps_memory_state(fake_clock):
    kv = MagicMock(spec=KeyValueStore)
    kv.get_item.return_value = None
    kv.set_item.side_effect = StorageWriteError("quota exceeded")
    persistence = PersistenceAdapter(kv)
    app = FlashcardApp(persistence, clock=fake_clock, rng=random.Random(0))

    deck = app.create_deck("Unsaved")
    app.create_card("q", "a")

    assert app.store.active_deck_id == deck.id
    assert fronts(app) == ["q"]
    assert isinstance(persistence.last_error, StorageWriteError)


# --- Dialog Flows ---


def test_prompt_create_deck(flash_app, fake_ui):
    fake_ui.form_answers.append({"name": "  Italian  "})

    deck = flash_app.prompt_create_deck()

    assert deck.name == "Italian"
    assert fake_ui.forms[0][0].label == "Deck Name"


def test_prompt_create_deck_blank_name(flash_app, fake_ui):
    fake_ui.form_answers.append({"name": "   "})

    assert flash_app.prompt_create_deck() is None

    assert fake_ui.notifications == [EMPTY_DECK_NAME_MESSAGE]
    assert flash_app.store.decks == []


def test_prompt_create_deck_cancelled(flash_app, fake_ui):
    fake_ui.form_answers.append(None)
    assert flash_app.prompt_create_deck() is None
    assert fake_ui.notifications == []


def test_prompt_rename_deck_prefills_name(french_app, fake_ui):
    deck_id = french_app.store.active_deck_id
    fake_ui.form_answers.append({"name": "Francais"})

    assert french_app.prompt_rename_deck(deck_id) is True

    assert fake_ui.forms[0][0].value == "French"
    assert french_app.store.active_deck.name == "Francais"


def test_prompt_rename_unknown_deck(french_app, fake_ui):
    assert french_app.prompt_rename_deck("missing") is False
    assert fake_ui.forms == []


def test_confirm_delete_deck(french_app, fake_ui):
    deck_id = french_app.store.active_deck_id

    fake_ui.confirm_answers.append(False)
    assert french_app.confirm_delete_deck(deck_id) is False
    assert french_app.store.get_deck(deck_id) is not None

    fake_ui.confirm_answers.append(True)
    assert french_app.confirm_delete_deck(deck_id) is True
    assert french_app.store.decks == []
    assert fake_ui.confirm_messages == [CONFIRM_DELETE_DECK] * 2


def test_prompt_create_card(french_app, fake_ui):
    fake_ui.form_answers.append({"front": " fish ", "back": " poisson "})

    card = french_app.prompt_create_card()

    assert (card.front, card.back) == ("fish", "poisson")
    assert [f.name for f in fake_ui.forms[0]] == ["front", "back"]
    assert all(f.multiline for f in fake_ui.forms[0])
    assert fronts(french_app)[-1] == "fish"


@pytest.mark.parametrize(
    "answer", [{"front": "q", "back": " "}, {"front": "", "back": "a"}]
)
def test_prompt_create_card_requires_both_sides(french_app, fake_ui, answer):
    fake_ui.form_answers.append(answer)

    assert french_app.prompt_create_card() is None

    assert fake_ui.notifications == [EMPTY_CARD_FIELDS_MESSAGE]
    assert len(french_app.session.cards) == 3


def test_prompt_create_card_without_deck(flash_app, fake_ui):
    assert flash_app.prompt_create_card() is None
    assert fake_ui.forms == []


def test_prompt_edit_card(french_app, fake_ui):
    card = french_app.session.cards[2]
    fake_ui.form_answers.append({"front": "parrot", "back": "perroquet"})

    updated = french_app.prompt_edit_card(card.id)

    assert updated.front == "parrot"
    assert [f.value for f in fake_ui.forms[0]] == ["bird", "oiseau"]


def test_confirm_delete_card(french_app, fake_ui):
    card = french_app.session.cards[0]
    fake_ui.confirm_answers.append(True)

    assert french_app.confirm_delete_card(card.id) is True

    assert fake_ui.confirm_messages == [CONFIRM_DELETE_CARD]
    assert fronts(french_app) == ["dog", "bird"]


def test_confirm_delete_missing_card_asks_nothing(french_app, fake_ui):
    assert french_app.confirm_delete_card("missing") is False
    assert fake_ui.confirm_messages == []


def test_dialog_flow_without_ui(persistence, fake_clock):
    app = FlashcardApp(persistence, clock=fake_clock)
    with pytest.raises(RuntimeError):
        app.prompt_create_deck()
