import json
from datetime import datetime, timezone

from app.models.flashcard_session import GenerationMode
from app.schemas.ai import Flashcard

EXPORT_PREFIXES = {
    GenerationMode.generic: "flashcards",
    GenerationMode.vocabulary: "vocabulary",
}


def export_filename(mode: GenerationMode, now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return f"{EXPORT_PREFIXES[mode]}-{int(moment.timestamp() * 1000)}.json"


def export_flashcards(
    cards: list[Flashcard], mode: GenerationMode, now: datetime | None = None,
) -> tuple[str, bytes]:
    """Serialize cards as a pretty-printed JSON array. Returns (filename, body)."""
    payload = [card.model_dump(mode="json") for card in cards]
    body = json.dumps(payload, indent=2, ensure_ascii=False)
    return export_filename(mode, now), body.encode("utf-8")
