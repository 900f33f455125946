"""
Database-backed content store (site_content table)
"""
from typing import Any, Optional
import logging

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.apps.content.models import SiteContent, utc_now
from app.apps.content.services.health import HealthState
from app.apps.content.services.repository import ContentRepository
from app.common.fields import decode_json_column, encode_json_column

logger = logging.getLogger(__name__)


class DatabaseContentStore(ContentRepository):
    """
    Primary store: one row per content id holding the JSON blob.

    Any failure marks the shared HealthState unhealthy; while unhealthy the
    store answers "not found" / False without touching the database.
    """

    name = "database"

    def __init__(self, session_factory: async_sessionmaker, health: HealthState):
        self.session_factory = session_factory
        self.health = health

    async def get(self, content_id: str) -> Optional[Any]:
        if not self.health.is_healthy():
            return None
        try:
            async with self.session_factory() as session:
                stmt = select(SiteContent.content_data).where(SiteContent.id == content_id)
                result = await session.execute(stmt)
                raw = result.scalar_one_or_none()
            return decode_json_column(raw)
        except Exception as e:
            logger.error(f"Error getting content for {content_id}: {e}")
            self.health.mark_unhealthy()
            return None

    async def put(self, content_id: str, value: Any) -> bool:
        if not self.health.is_healthy():
            return False
        try:
            content_data = encode_json_column(value)
            async with self.session_factory() as session:
                await self._upsert(session, content_id, content_data)
                await session.commit()
            return True
        except Exception as e:
            logger.error(f"Error saving content for {content_id}: {e}")
            self.health.mark_unhealthy()
            return False

    async def ping(self) -> bool:
        """SELECT 1 against the database; does not change the health flag"""
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database ping failed: {e}")
            return False

    async def _upsert(self, session: AsyncSession, content_id: str, content_data: str):
        """INSERT ... ON CONFLICT UPDATE where the dialect supports it, ORM merge otherwise"""
        now = utc_now()
        dialect = session.get_bind().dialect.name

        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            await session.merge(SiteContent(id=content_id, content_data=content_data, updated_at=now))
            return

        stmt = insert(SiteContent).values(id=content_id, content_data=content_data, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={"content_data": stmt.excluded.content_data, "updated_at": stmt.excluded.updated_at},
        )
        await session.execute(stmt)
