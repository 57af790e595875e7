import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.ai.mapper import from_session_card, to_storage_columns
from app.config import settings
from app.core.exceptions import PersistenceError
from app.models.flashcard_session import (
    FlashcardSession,
    GenerationMode,
    RequestDifficulty,
    SessionCard,
)
from app.models.user import User
from app.schemas.ai import Flashcard

logger = logging.getLogger(__name__)


async def save_session(
    db: AsyncSession,
    user: User,
    topic: str,
    difficulty: RequestDifficulty,
    mode: GenerationMode,
    cards: list[Flashcard],
) -> FlashcardSession:
    """Persist one session and its cards inside a savepoint.

    The caller owns the surrounding transaction. A failed write rolls back
    only the savepoint, so objects already loaded in ``db`` stay usable,
    and raises PersistenceError.
    """
    try:
        async with db.begin_nested():
            session = FlashcardSession(
                user_id=user.id,
                topic=topic,
                difficulty=difficulty,
                mode=mode,
                card_count=len(cards),
            )
            db.add(session)
            await db.flush()

            db.add_all([
                SessionCard(session_id=session.id, position=idx, **to_storage_columns(card))
                for idx, card in enumerate(cards)
            ])
            await db.flush()
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Could not save flashcard session: {exc.__class__.__name__}") from exc

    return session


async def list_sessions(
    db: AsyncSession, user: User, limit: int | None = None,
) -> list[FlashcardSession]:
    cap = settings.HISTORY_LIMIT
    limit = cap if limit is None else max(1, min(limit, cap))
    result = await db.execute(
        select(FlashcardSession)
        .where(FlashcardSession.user_id == user.id)
        .order_by(FlashcardSession.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_session_for_owner(
    db: AsyncSession, session_id: uuid.UUID, user: User,
) -> FlashcardSession:
    # Sessions of other users are indistinguishable from missing ones
    result = await db.execute(
        select(FlashcardSession).where(
            FlashcardSession.id == session_id,
            FlashcardSession.user_id == user.id,
        )
    )
    session = result.scalar_one_or_none()
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return session


async def list_session_cards(
    db: AsyncSession, user: User, session_id: uuid.UUID,
) -> list[Flashcard]:
    """Cards of an owned session in creation order; empty for anything else."""
    result = await db.execute(
        select(SessionCard)
        .join(FlashcardSession, SessionCard.session_id == FlashcardSession.id)
        .where(
            SessionCard.session_id == session_id,
            FlashcardSession.user_id == user.id,
        )
        .order_by(SessionCard.created_at, SessionCard.position)
    )
    return [from_session_card(row) for row in result.scalars().all()]


async def delete_session(db: AsyncSession, user: User, session_id: uuid.UUID) -> None:
    session = await get_session_for_owner(db, session_id, user)
    # Both deletes share the request transaction
    await db.execute(delete(SessionCard).where(SessionCard.session_id == session.id))
    await db.delete(session)
    await db.flush()
    logger.info("Deleted session %s for user %s", session.id, user.id)
