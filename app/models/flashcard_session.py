import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class RequestDifficulty(str, enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class CardDifficulty(str, enum.Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class GenerationMode(str, enum.Enum):
    generic = "generic"
    vocabulary = "vocabulary"


class FlashcardSession(Base):
    __tablename__ = "flashcard_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    topic: Mapped[str] = mapped_column(String(200), nullable=False)
    difficulty: Mapped[RequestDifficulty] = mapped_column(
        Enum(RequestDifficulty, name="request_difficulty_enum"),
        nullable=False,
        default=RequestDifficulty.intermediate,
    )
    mode: Mapped[GenerationMode] = mapped_column(
        Enum(GenerationMode, name="generation_mode_enum"),
        nullable=False,
        default=GenerationMode.generic,
    )
    card_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="flashcard_sessions")
    cards: Mapped[list["SessionCard"]] = relationship(
        "SessionCard",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_flashcard_sessions_user_created", "user_id", "created_at"),
    )


class SessionCard(Base):
    __tablename__ = "session_cards"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("flashcard_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    front_text: Mapped[str] = mapped_column(Text, nullable=False)
    back_text: Mapped[str] = mapped_column(Text, nullable=False)
    additional_info: Mapped[str] = mapped_column(Text, nullable=False, default="")
    difficulty: Mapped[CardDifficulty] = mapped_column(
        Enum(CardDifficulty, name="card_difficulty_enum"),
        nullable=False,
        default=CardDifficulty.medium,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    session: Mapped["FlashcardSession"] = relationship(
        "FlashcardSession", back_populates="cards"
    )

    __table_args__ = (
        Index("ix_session_cards_session_id", "session_id"),
    )
