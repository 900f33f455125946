"""
Content service: the get/save surface used by the HTTP layer
"""
import asyncio
import copy
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set
import logging

from pydantic import ValidationError

from app.apps.content.schemas import KNOWN_RESOURCES, RESOURCE_ITEM_SCHEMAS, RESOURCE_LIST_FIELDS
from app.apps.content.services.db_store import DatabaseContentStore
from app.apps.content.services.file_store import FileContentStore
from app.apps.content.services.health import HealthState
from app.apps.content.services.migration import migrate_files_to_db
from app.apps.content.services.repository import FailoverRepository
from app.apps.content.services.struct_manager import ContentStructManager

logger = logging.getLogger(__name__)


class InvalidContentPayload(ValueError):
    """Payload whose top-level shape cannot be stored under the requested id"""


def validate_resource_payload(resource_id: str, data: Any) -> List[Any]:
    """
    Check a payload for one of the known resources.

    The payload must be a list. For resources with an item schema (pages,
    driver categories) every item must be an object; anything else is
    dropped with a warning. Objects that fail the schema are coerced rather
    than rejected: list fields holding a non-list become [] and every other
    field is kept as submitted. Valid items are stored unchanged.
    """
    if not isinstance(data, list):
        raise InvalidContentPayload(f"{resource_id} must be a JSON array, got {type(data).__name__}")

    schema = RESOURCE_ITEM_SCHEMAS.get(resource_id)
    if schema is None:
        return data

    accepted = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning(f"Dropping {resource_id} item #{index}: expected an object, got {type(item).__name__}")
            continue
        try:
            schema.model_validate(item)
        except ValidationError as e:
            logger.warning(f"Coercing {resource_id} item #{index}: {e.error_count()} field error(s)")
            item = _coerce_list_fields(item, RESOURCE_LIST_FIELDS.get(resource_id, ()))
        accepted.append(item)
    return accepted


def _coerce_list_fields(item: Dict[str, Any], fields) -> Dict[str, Any]:
    coerced = dict(item)
    for field in fields:
        if field in coerced and coerced[field] is not None and not isinstance(coerced[field], list):
            coerced[field] = []
    return coerced


class ContentService:
    """
    Routes content ids to the composite document or to the legacy
    per-id path, and keeps the database connection alive.

    - composite id -> whole document
    - known resource id -> one list inside the document
    - anything else -> database, then file, then fallback
    """

    def __init__(
        self,
        db_store: DatabaseContentStore,
        file_store: FileContentStore,
        health: HealthState,
        initializer: Callable[[], Awaitable[Any]],
        struct_id: str = "content-struct",
        reconnect_cooldown: float = 15.0,
        retry_delay: float = 5.0,
    ):
        self.db_store = db_store
        self.file_store = file_store
        self.health = health
        self.initializer = initializer
        self.struct_id = struct_id
        self.reconnect_cooldown = reconnect_cooldown
        self.retry_delay = retry_delay
        self.stores = FailoverRepository([db_store, file_store])
        self.structs = ContentStructManager(self.stores, health, struct_id=struct_id)
        self._background: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------
    async def connect(self, retries: int = 10, delay: Optional[float] = None) -> bool:
        """
        Initialize the database (create tables) with retry, then migrate
        legacy files into it.
        """
        if self.health.in_progress:
            return False
        delay = self.retry_delay if delay is None else delay
        self.health.start_attempt()
        try:
            while retries > 0:
                try:
                    await self.initializer()
                    self.health.mark_healthy()
                    logger.info("Database initialized: site_content table ready")
                    await migrate_files_to_db(self.db_store, self.file_store)
                    return True
                except Exception as e:
                    self.health.mark_unhealthy()
                    retries -= 1
                    logger.error(f"Database initialization attempt failed ({retries} retries left): {e}")
                    if retries > 0:
                        logger.info(f"Retrying in {delay} seconds...")
                        await asyncio.sleep(delay)
            logger.error("All database initialization attempts failed.")
            return False
        finally:
            self.health.finish_attempt()

    def start_connect(self, retries: int = 1) -> asyncio.Task:
        """Run connect() in the background"""
        task = asyncio.create_task(self.connect(retries=retries))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def maybe_reconnect(self) -> Optional[asyncio.Task]:
        """Fire-and-forget reconnect when unhealthy and the cooldown has elapsed"""
        if not self.health.claim_reconnect(self.reconnect_cooldown):
            return None
        logger.info("Database unhealthy - attempting background reconnect")
        return self.start_connect(retries=1)

    async def shutdown(self):
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # ------------------------------------------------------------------
    # Content API
    # ------------------------------------------------------------------
    def is_resource(self, content_id: str) -> bool:
        return content_id in KNOWN_RESOURCES

    async def get_content(self, content_id: str, fallback: Any = None) -> Any:
        """Never raises: real data or the fallback ([] by default)"""
        if fallback is None:
            fallback = []
        self.maybe_reconnect()
        try:
            if content_id == self.struct_id:
                return await self.structs.get_struct()
            if self.is_resource(content_id):
                return await self.structs.get_resource(content_id, fallback)

            data = await self.stores.get(content_id)
            return data if data is not None else copy.deepcopy(fallback)
        except Exception as e:
            logger.error(f"Error reading content for {content_id}: {e}", exc_info=True)
            return copy.deepcopy(fallback)

    async def save_content(self, content_id: str, data: Any) -> bool:
        """
        Raises InvalidContentPayload for payloads of the wrong top-level
        shape; otherwise True when at least one store accepted the write.
        """
        self.maybe_reconnect()

        if content_id == self.struct_id:
            if not isinstance(data, dict):
                raise InvalidContentPayload(f"{content_id} must be a JSON object, got {type(data).__name__}")
            return await self.structs.save_struct(data)

        if self.is_resource(content_id):
            items = validate_resource_payload(content_id, data)
            return await self.structs.save_resource(content_id, items)

        return await self.stores.put(content_id, data)


def create_content_service(
    engine=None,
    session_factory=None,
    data_dir=None,
    health: Optional[HealthState] = None,
) -> ContentService:
    """
    Wire the content service from configuration.

    Defaults to the application engine/session factory and WEB_DATA_DIR;
    tests pass their own engine and a temporary directory.
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from app.config import (
        CONTENT_STRUCT_ID,
        DB_RECONNECT_COOLDOWN_SECONDS,
        DB_INIT_RETRY_DELAY_SECONDS,
        WEB_DATA_DIR,
    )
    from app.database import AsyncSessionLocal, async_engine, init_db
    from app.apps.content.services.file_store import default_file_paths

    engine = engine or async_engine
    if session_factory is None:
        session_factory = AsyncSessionLocal if engine is async_engine else async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )
    health = health or HealthState()
    file_store = FileContentStore(
        default_file_paths(data_dir or WEB_DATA_DIR, [*KNOWN_RESOURCES, CONTENT_STRUCT_ID])
    )

    async def initializer():
        await init_db(engine)

    return ContentService(
        db_store=DatabaseContentStore(session_factory, health),
        file_store=file_store,
        health=health,
        initializer=initializer,
        struct_id=CONTENT_STRUCT_ID,
        reconnect_cooldown=DB_RECONNECT_COOLDOWN_SECONDS,
        retry_delay=DB_INIT_RETRY_DELAY_SECONDS,
    )
