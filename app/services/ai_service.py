import logging
import uuid

import httpx
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.ai.generator import generate_flashcards
from app.ai.providers import get_provider
from app.config import settings
from app.core.exceptions import (
    GenerationInProgressError,
    InputValidationError,
    PersistenceError,
)
from app.models.user import User
from app.schemas.ai import GenerateFlashcardsRequest, GenerateFlashcardsResponse
from app.services.session_service import save_session
from app.services.settings_service import get_user_settings

logger = logging.getLogger(__name__)

PERSISTENCE_WARNING = (
    "Your flashcards were generated but could not be saved to your session history."
)


def _generation_lock_key(user_id: uuid.UUID) -> str:
    return f"ai:generating:{user_id}"


async def _acquire_generation_lock(redis: Redis, user_id: uuid.UUID) -> None:
    acquired = await redis.set(
        _generation_lock_key(user_id), "1",
        nx=True, ex=settings.AI_GENERATION_LOCK_TTL_SECONDS,
    )
    if not acquired:
        raise GenerationInProgressError(
            "A flashcard generation is already in progress. Please wait for it to finish."
        )


async def generate_flashcard_session(
    db: AsyncSession,
    redis: Redis,
    client: httpx.AsyncClient,
    user: User,
    request: GenerateFlashcardsRequest,
) -> GenerateFlashcardsResponse:
    topic = request.topic.strip()
    if not topic:
        raise InputValidationError("Please enter a topic to generate flashcards for.")

    provider = get_provider()
    user_settings = await get_user_settings(db, user)

    api_key = (request.api_key or "").strip()
    if not api_key and user_settings is not None:
        api_key = (user_settings.api_key_for(provider.name) or "").strip()
    if not api_key:
        raise InputValidationError(
            f"{provider.label} API key not found. Please configure it in settings."
        )

    model = request.model or (user_settings.default_model if user_settings else None)
    request = request.model_copy(update={"topic": topic})

    user_id = user.id
    await _acquire_generation_lock(redis, user_id)
    try:
        cards = await generate_flashcards(client, provider, request, api_key, model)

        session_id = None
        warning = None
        try:
            session = await save_session(
                db, user, topic, request.difficulty, request.mode, cards,
            )
            session_id = session.id
        except PersistenceError:
            logger.exception("Failed to save session for user %s, returning cards anyway", user_id)
            warning = PERSISTENCE_WARNING
    finally:
        await redis.delete(_generation_lock_key(user_id))

    logger.info("Generated %d cards for user %s (session=%s)", len(cards), user_id, session_id)

    return GenerateFlashcardsResponse(
        session_id=session_id,
        topic=topic,
        difficulty=request.difficulty,
        mode=request.mode,
        flashcards=cards,
        generated_count=len(cards),
        persistence_warning=warning,
    )
