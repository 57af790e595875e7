import logging

import httpx

from app.ai.mapper import map_flashcards
from app.ai.normalizer import extract_flashcard_objects
from app.ai.prompts import build_prompts
from app.ai.providers import ProviderAdapter
from app.schemas.ai import Flashcard, GenerateFlashcardsRequest

logger = logging.getLogger(__name__)


async def generate_flashcards(
    client: httpx.AsyncClient,
    provider: ProviderAdapter,
    request: GenerateFlashcardsRequest,
    api_key: str,
    model: str | None = None,
) -> list[Flashcard]:
    system_prompt, user_prompt = build_prompts(request)

    logger.info(
        "Generating %d %s cards for topic=%s, difficulty=%s via %s",
        request.count, request.mode.value, request.topic,
        request.difficulty.value, provider.name,
    )

    raw_text = await provider.complete(
        client, system_prompt, user_prompt, api_key, model,
    )
    items = extract_flashcard_objects(raw_text)
    cards = map_flashcards(items, request.mode)

    if len(cards) != len(items):
        logger.info("Kept %d of %d provider cards", len(cards), len(items))

    # Trim to requested count in case the LLM returns more
    return cards[: request.count]
