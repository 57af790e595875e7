from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.settings import UserSettingsResponse, UserSettingsUpdate
from app.services.settings_service import (
    get_user_settings,
    to_settings_response,
    upsert_user_settings,
)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=UserSettingsResponse)
async def get_settings(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return to_settings_response(await get_user_settings(db, current_user))


@router.put("", response_model=UserSettingsResponse)
async def save_settings(
    data: UserSettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user_settings = await upsert_user_settings(db, current_user, data)
    return to_settings_response(user_settings)
