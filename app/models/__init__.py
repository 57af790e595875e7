from app.models.user import User, Profile
from app.models.user_settings import UserSettings
from app.models.flashcard_session import (
    FlashcardSession,
    SessionCard,
    CardDifficulty,
    GenerationMode,
    RequestDifficulty,
)

__all__ = [
    "User",
    "Profile",
    "UserSettings",
    "FlashcardSession",
    "SessionCard",
    "CardDifficulty",
    "GenerationMode",
    "RequestDifficulty",
]
