import uuid
from datetime import datetime

from pydantic import BaseModel

from app.models.flashcard_session import GenerationMode, RequestDifficulty
from app.schemas.ai import Flashcard


class FlashcardSessionResponse(BaseModel):
    id: uuid.UUID
    topic: str
    difficulty: RequestDifficulty
    mode: GenerationMode
    card_count: int
    created_at: datetime

    model_config = {"from_attributes": True}


class SessionCardsResponse(BaseModel):
    session: FlashcardSessionResponse
    flashcards: list[Flashcard]
