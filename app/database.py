import logging
import uuid
from collections.abc import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncIterator[AsyncSession]:
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def scope_to_owner(db: AsyncSession, user_id: uuid.UUID) -> None:
    """Bind the current transaction to ``user_id`` for row-level security.

    The policies installed by the migrations compare each row's owner with
    ``current_setting('app.current_user_id')``. The setting is transaction
    local, so it has to be re-applied after a commit or rollback. Other
    dialects have no row-level security and rely on the explicit ``user_id``
    filters in the services.
    """
    if db.bind.dialect.name != "postgresql":
        return
    await db.execute(
        text("SELECT set_config('app.current_user_id', :uid, true)"),
        {"uid": str(user_id)},
    )
