"""Field mapping between provider card objects, canonical flashcards and storage rows.

Each generation mode names, in priority order, the provider keys that feed
the canonical ``front``/``back``/``additional_info`` fields. The prompt
builder renders its output schema from the same table, so whatever the
system prompt asks for is exactly what the mapper reads back.
"""

import logging
from dataclasses import dataclass
from typing import Any

from app.core.exceptions import EmptyResultError
from app.models.flashcard_session import CardDifficulty, GenerationMode, SessionCard
from app.schemas.ai import Flashcard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldMapping:
    front_keys: tuple[str, ...]
    back_keys: tuple[str, ...]
    info_keys: tuple[str, ...]
    front_hint: str
    back_hint: str
    info_hint: str


FIELD_MAPPINGS: dict[GenerationMode, FieldMapping] = {
    GenerationMode.generic: FieldMapping(
        front_keys=("front",),
        back_keys=("back",),
        info_keys=("additional_info",),
        front_hint="Question or prompt",
        back_hint="Answer or explanation",
        info_hint="Optional context, example or mnemonic",
    ),
    GenerationMode.vocabulary: FieldMapping(
        front_keys=("german_word", "front"),
        back_keys=("english_meaning", "back"),
        info_keys=("example_sentence", "additional_info"),
        front_hint="German word or phrase (with article for nouns)",
        back_hint="English meaning",
        info_hint="Example sentence in German using the word",
    ),
}


def get_field_mapping(mode: GenerationMode) -> FieldMapping:
    return FIELD_MAPPINGS[mode]


def _coerce_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _first_text(item: dict, keys: tuple[str, ...]) -> str:
    for key in keys:
        text = _coerce_text(item.get(key))
        if text:
            return text
    return ""


def _coerce_difficulty(value: Any) -> CardDifficulty:
    if isinstance(value, str):
        try:
            return CardDifficulty(value.strip().lower())
        except ValueError:
            pass
    return CardDifficulty.medium


def map_card(item: Any, mode: GenerationMode) -> Flashcard | None:
    """Map one provider object to a canonical card, or ``None`` if unusable."""
    if not isinstance(item, dict):
        return None
    mapping = FIELD_MAPPINGS[mode]
    front = _first_text(item, mapping.front_keys)
    back = _first_text(item, mapping.back_keys)
    if not front or not back:
        return None
    return Flashcard(
        front=front,
        back=back,
        additional_info=_first_text(item, mapping.info_keys),
        difficulty=_coerce_difficulty(item.get("difficulty")),
    )


def map_flashcards(items: list[Any], mode: GenerationMode) -> list[Flashcard]:
    """Map provider objects to canonical cards, dropping unusable ones.

    Provider ids are ignored; every card gets a fresh UUID so ids are unique
    within and across sessions.

    Raises EmptyResultError when nothing usable is left.
    """
    cards: list[Flashcard] = []
    for index, item in enumerate(items):
        card = map_card(item, mode)
        if card is None:
            logger.warning("Dropping provider card #%d: missing front or back", index)
            continue
        cards.append(card)

    if not cards:
        raise EmptyResultError("The provider returned no usable flashcards. Please try again.")
    return cards


# --- Storage mapping ---

def to_storage_columns(card: Flashcard) -> dict[str, Any]:
    return {
        "id": card.id,
        "front_text": card.front,
        "back_text": card.back,
        "additional_info": card.additional_info,
        "difficulty": card.difficulty,
    }


def from_session_card(row: SessionCard) -> Flashcard:
    return Flashcard(
        id=row.id,
        front=row.front_text,
        back=row.back_text,
        additional_info=row.additional_info or "",
        difficulty=row.difficulty,
    )
