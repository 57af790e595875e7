import json
import logging
import re
from typing import Any

from app.core.exceptions import MalformedResponseError, UnexpectedResponseShapeError

logger = logging.getLogger(__name__)

# First fenced block, optionally tagged "json".
FENCED_BLOCK_RE = re.compile(r"```[ \t]*(?:json)?[ \t]*\r?\n?(.*?)```", re.DOTALL | re.IGNORECASE)


def _parse_json(raw_text: str) -> Any:
    try:
        return json.loads(raw_text)
    except json.JSONDecodeError:
        pass

    match = FENCED_BLOCK_RE.search(raw_text)
    if match is not None:
        try:
            return json.loads(match.group(1).strip())
        except json.JSONDecodeError:
            pass

    logger.warning("Provider response is not JSON (%d chars)", len(raw_text))
    raise MalformedResponseError("Could not parse API response as JSON")


def extract_flashcard_objects(raw_text: str) -> list[Any]:
    """Return the raw ``flashcards`` array from provider text.

    The whole text is parsed first; if that fails the first fenced code
    block is tried. Items are returned untouched for the field mapper.
    """
    payload = _parse_json(raw_text)
    if not isinstance(payload, dict) or not isinstance(payload.get("flashcards"), list):
        raise UnexpectedResponseShapeError("Invalid response format from API")
    return payload["flashcards"]
