import httpx
from fastapi import APIRouter, Depends, Response
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_http_client, get_redis
from app.database import get_db
from app.models.user import User
from app.schemas.ai import (
    ExportFlashcardsRequest,
    GenerateFlashcardsRequest,
    GenerateFlashcardsResponse,
)
from app.services.ai_service import generate_flashcard_session
from app.services.export_service import export_flashcards

router = APIRouter(prefix="/ai", tags=["ai"])


def attachment_response(filename: str, body: bytes) -> Response:
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/generate",
    response_model=GenerateFlashcardsResponse,
    status_code=201,
)
async def generate_flashcards_endpoint(
    data: GenerateFlashcardsRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    redis: Redis = Depends(get_redis),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    return await generate_flashcard_session(db, redis, client, current_user, data)


@router.post("/export")
async def export_flashcards_endpoint(
    data: ExportFlashcardsRequest,
    current_user: User = Depends(get_current_user),
):
    filename, body = export_flashcards(data.flashcards, data.mode)
    return attachment_response(filename, body)
