import uuid
from typing import Literal

from pydantic import BaseModel, Field

from app.models.flashcard_session import CardDifficulty, GenerationMode, RequestDifficulty

CardCount = Literal[5, 10, 15, 20, 25]


class GenerateFlashcardsRequest(BaseModel):
    topic: str = Field(max_length=200)
    count: CardCount = 10
    difficulty: RequestDifficulty = RequestDifficulty.intermediate
    mode: GenerationMode = GenerationMode.generic
    category: str | None = Field(default=None, max_length=100)
    additional_context: str | None = Field(default=None, max_length=2000)
    model: str | None = Field(default=None, max_length=100)
    # Overrides the key stored in user settings for this request only.
    api_key: str | None = Field(default=None, repr=False)


class Flashcard(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    front: str
    back: str
    additional_info: str = ""
    difficulty: CardDifficulty = CardDifficulty.medium


class GenerateFlashcardsResponse(BaseModel):
    session_id: uuid.UUID | None
    topic: str
    difficulty: RequestDifficulty
    mode: GenerationMode
    flashcards: list[Flashcard]
    generated_count: int
    persistence_warning: str | None = None


class ExportFlashcardsRequest(BaseModel):
    flashcards: list[Flashcard] = Field(min_length=1, max_length=500)
    mode: GenerationMode = GenerationMode.generic
