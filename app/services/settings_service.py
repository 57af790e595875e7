from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.ai.providers import get_provider
from app.core.exceptions import InputValidationError
from app.models.user import User
from app.models.user_settings import UserSettings
from app.schemas.settings import UserSettingsResponse, UserSettingsUpdate

API_KEY_FIELDS = {
    "openai_api_key": "OpenAI",
    "gemini_api_key": "Gemini",
}


def mask_api_key(key: str | None) -> str | None:
    if not key:
        return None
    if len(key) <= 8:
        return "****"
    return f"****{key[-4:]}"


async def get_user_settings(db: AsyncSession, user: User) -> UserSettings | None:
    result = await db.execute(
        select(UserSettings).where(UserSettings.user_id == user.id)
    )
    return result.scalar_one_or_none()


async def upsert_user_settings(
    db: AsyncSession, user: User, data: UserSettingsUpdate,
) -> UserSettings:
    update_data = data.model_dump(exclude_unset=True)

    for field, label in API_KEY_FIELDS.items():
        if field in update_data:
            value = (update_data[field] or "").strip()
            if not value:
                raise InputValidationError(f"Please enter your {label} API key")
            update_data[field] = value

    user_settings = await get_user_settings(db, user)
    if user_settings is None:
        user_settings = UserSettings(user_id=user.id)
        db.add(user_settings)

    for field, value in update_data.items():
        setattr(user_settings, field, value)
    await db.flush()
    await db.refresh(user_settings)
    return user_settings


def to_settings_response(user_settings: UserSettings | None) -> UserSettingsResponse:
    openai_key = user_settings.openai_api_key if user_settings else None
    gemini_key = user_settings.gemini_api_key if user_settings else None
    return UserSettingsResponse(
        openai_api_key_set=bool(openai_key),
        openai_api_key_hint=mask_api_key(openai_key),
        gemini_api_key_set=bool(gemini_key),
        gemini_api_key_hint=mask_api_key(gemini_key),
        default_model=user_settings.default_model if user_settings else None,
        provider=get_provider().name,
        updated_at=user_settings.updated_at if user_settings else None,
    )
