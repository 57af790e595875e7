import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.api.v1.ai import attachment_response
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.session import FlashcardSessionResponse, SessionCardsResponse
from app.services.export_service import export_flashcards
from app.services.session_service import (
    delete_session,
    get_session_for_owner,
    list_session_cards,
    list_sessions,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("", response_model=list[FlashcardSessionResponse])
async def list_my_sessions(
    limit: int = Query(settings.HISTORY_LIMIT, ge=1, le=settings.HISTORY_LIMIT),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_sessions(db, current_user, limit=limit)


@router.get("/{session_id}/cards", response_model=SessionCardsResponse)
async def get_session_cards(
    session_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await get_session_for_owner(db, session_id, current_user)
    cards = await list_session_cards(db, current_user, session.id)
    return SessionCardsResponse(
        session=FlashcardSessionResponse.model_validate(session),
        flashcards=cards,
    )


@router.get("/{session_id}/export")
async def export_session(
    session_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await get_session_for_owner(db, session_id, current_user)
    cards = await list_session_cards(db, current_user, session.id)
    filename, body = export_flashcards(cards, session.mode)
    return attachment_response(filename, body)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session_endpoint(
    session_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_session(db, current_user, session_id)
