import uuid

import pytest

from app.ai.mapper import (
    from_session_card,
    map_card,
    map_flashcards,
    to_storage_columns,
)
from app.ai.normalizer import extract_flashcard_objects
from app.core.exceptions import EmptyResultError
from app.models.flashcard_session import CardDifficulty, GenerationMode, SessionCard
from app.schemas.ai import Flashcard


def test_generic_card_from_raw_text():
    raw = '{"flashcards":[{"front":"Hund","back":"dog","difficulty":"easy"}]}'
    cards = map_flashcards(extract_flashcard_objects(raw), GenerationMode.generic)

    assert len(cards) == 1
    card = cards[0]
    assert card.front == "Hund"
    assert card.back == "dog"
    assert card.additional_info == ""
    assert card.difficulty == CardDifficulty.easy
    assert isinstance(card.id, uuid.UUID)


def test_vocabulary_mode_reads_german_fields():
    card = map_card(
        {
            "german_word": "der Hund",
            "english_meaning": "the dog",
            "example_sentence": "Der Hund bellt.",
            "difficulty": "hard",
        },
        GenerationMode.vocabulary,
    )
    assert card.front == "der Hund"
    assert card.back == "the dog"
    assert card.additional_info == "Der Hund bellt."
    assert card.difficulty == CardDifficulty.hard


def test_vocabulary_mode_accepts_canonical_shape():
    card = map_card(
        {"front": "die Katze", "back": "the cat", "additional_info": "Die Katze schläft."},
        GenerationMode.vocabulary,
    )
    assert (card.front, card.back, card.additional_info) == (
        "die Katze", "the cat", "Die Katze schläft.",
    )


def test_generic_mode_ignores_vocabulary_keys():
    assert map_card({"german_word": "Hund", "english_meaning": "dog"}, GenerationMode.generic) is None


@pytest.mark.parametrize("difficulty", [None, "impossible", 3, "  MEDIUM "])
def test_unknown_difficulty_defaults_to_medium(difficulty):
    card = map_card({"front": "a", "back": "b", "difficulty": difficulty}, GenerationMode.generic)
    assert card.difficulty == CardDifficulty.medium


def test_values_are_stripped_and_numbers_stringified():
    card = map_card({"front": "  2 + 2  ", "back": 4}, GenerationMode.generic)
    assert card.front == "2 + 2"
    assert card.back == "4"


def test_unusable_items_are_dropped():
    items = [
        {"front": "kept", "back": "yes"},
        {"back": "orphan answer"},
        {"front": "   ", "back": "blank front"},
        "not an object",
        None,
    ]
    cards = map_flashcards(items, GenerationMode.generic)
    assert [c.front for c in cards] == ["kept"]


def test_card_missing_front_and_german_word_alone_fails_batch():
    items = [{"english_meaning": "dog", "example_sentence": "..."}]
    with pytest.raises(EmptyResultError):
        map_flashcards(items, GenerationMode.vocabulary)


def test_empty_array_fails():
    with pytest.raises(EmptyResultError):
        map_flashcards([], GenerationMode.generic)


def test_provider_ids_are_replaced_with_unique_ids():
    items = [
        {"id": "1", "front": "a", "back": "b"},
        {"id": "1", "front": "c", "back": "d"},
    ]
    cards = map_flashcards(items, GenerationMode.generic)
    assert cards[0].id != cards[1].id


def test_storage_mapping_round_trip():
    card = Flashcard(
        front="Photosynthesis",
        back="Light to chemical energy",
        additional_info="Happens in chloroplasts",
        difficulty=CardDifficulty.hard,
    )
    row = SessionCard(session_id=uuid.uuid4(), position=0, **to_storage_columns(card))

    assert from_session_card(row) == card
