import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import EmailAlreadyRegisteredError
from app.core.security import hash_password, verify_password
from app.database import scope_to_owner
from app.models.user import Profile, User
from app.models.user_settings import UserSettings
from app.schemas.user import ProfileUpdateRequest, UserRegisterRequest


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, data: UserRegisterRequest) -> User:
    """Create the sign-in identity plus its profile and empty settings row."""
    if await get_user_by_email(db, data.email) is not None:
        raise EmailAlreadyRegisteredError("A user with this email already exists")

    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
    )
    db.add(user)
    await db.flush()

    # Profile and settings rows are owner-scoped
    await scope_to_owner(db, user.id)
    db.add(Profile(id=user.id, email=data.email, full_name=data.full_name))
    db.add(UserSettings(user_id=user.id))
    await db.flush()
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(db, email)
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


# --- Profile ---

async def get_profile(db: AsyncSession, user: User) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.id == user.id))
    return result.scalar_one_or_none()


async def update_profile(
    db: AsyncSession, user: User, data: ProfileUpdateRequest,
) -> Profile:
    profile = await get_profile(db, user)
    if profile is None:
        profile = Profile(id=user.id, email=user.email)
        db.add(profile)

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(profile, field, value)
    await db.flush()
    await db.refresh(profile)
    return profile
