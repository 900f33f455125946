"""
Legacy per-resource storage: file -> database migration and struct hydration
"""
from typing import Any, Dict, Iterable, List
import logging

from app.apps.content.schemas import KNOWN_RESOURCES
from app.apps.content.services.file_store import FileContentStore
from app.apps.content.services.repository import ContentRepository

logger = logging.getLogger(__name__)


async def migrate_files_to_db(
    db_store: ContentRepository,
    file_store: FileContentStore,
    resource_ids: Iterable[str] = KNOWN_RESOURCES,
) -> List[str]:
    """
    Copy every existing legacy resource file into the database.

    Missing files are skipped; unreadable or unparsable files are logged and
    do not stop the remaining resources. Safe to run repeatedly.

    Returns:
        The resource ids that were written to the database.
    """
    migrated = []
    for resource_id in resource_ids:
        if not file_store.exists(resource_id):
            continue
        try:
            data = await file_store.read_strict(resource_id)
        except Exception as e:
            logger.error(f"[MIGRATION] Failed for {resource_id}: {e}")
            continue

        if await db_store.put(resource_id, data):
            migrated.append(resource_id)
            logger.info(f"[MIGRATION] {resource_id} data synced to database.")
        else:
            logger.error(f"[MIGRATION] Failed for {resource_id}: database write rejected")
    return migrated


async def hydrate_missing_resources(
    struct: Dict[str, Any],
    legacy: ContentRepository,
    resource_ids: Iterable[str] = KNOWN_RESOURCES,
) -> bool:
    """
    Fill empty known resources of a normalized struct from legacy storage.

    ``legacy`` is read primary-first (a FailoverRepository over database and
    files). Only non-empty lists are taken.

    Returns:
        True when at least one resource was populated.
    """
    changed = False
    resources = struct["resources"]
    for resource_id in resource_ids:
        if resources.get(resource_id):
            continue
        data = await legacy.get(resource_id)
        if isinstance(data, list) and data:
            resources[resource_id] = data
            changed = True
            logger.info(f"Hydrated {resource_id} from legacy storage ({len(data)} items)")
    return changed
