"""
Unified content structure: one versioned document holding every resource
"""
import copy
from typing import Any, Dict, Iterable, Optional, Tuple
import logging

from app.apps.content.schemas import KNOWN_RESOURCES, ResourceId
from app.apps.content.services.health import HealthState
from app.apps.content.services.migration import hydrate_missing_resources
from app.apps.content.services.repository import FailoverRepository
from app.apps.content.services.write_queue import WriteQueue
from app.apps.content.utils.struct_utils import (
    ENVELOPE_KEYS,
    as_list,
    coerce_version,
    empty_struct,
    merge_pages,
    normalize_struct,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


class ContentStructManager:
    """
    Owns the composite document stored under ``struct_id``.

    Reads resolve database -> file -> rebuilt from legacy per-resource
    storage. Every mutation goes through the write queue and starts by
    re-reading the current document, so concurrent saves never overwrite
    each other's resources.
    """

    def __init__(
        self,
        stores: FailoverRepository,
        health: HealthState,
        struct_id: str = "content-struct",
        resource_ids: Iterable[str] = KNOWN_RESOURCES,
        queue: Optional[WriteQueue] = None,
    ):
        self.stores = stores
        self.health = health
        self.struct_id = struct_id
        self.resource_ids = list(resource_ids)
        self.queue = queue or WriteQueue(struct_id)

    async def _read_struct(self) -> Tuple[Dict[str, Any], bool]:
        """
        Load and normalize the current document without writing anything.

        Returns:
            (struct, needs_persist) where needs_persist is set when the
            document was hydrated, only found in a fallback store, or
            rebuilt from legacy data.
        """
        found = await self.stores.get_all(self.struct_id)

        if found:
            # Highest version wins; ties keep backend order (database first)
            backend, raw = max(
                found,
                key=lambda item: coerce_version(item[1].get("schemaVersion")) if isinstance(item[1], dict) else -1,
            )
            struct = normalize_struct(raw, self.resource_ids)
            needs_persist = backend is not self.stores.primary and self.health.is_healthy()
            if needs_persist:
                logger.info(f"Mirroring {self.struct_id} from {backend.name} storage into {self.stores.primary.name}")
            if await hydrate_missing_resources(struct, self.stores, self.resource_ids):
                needs_persist = True
            return struct, needs_persist

        logger.info(f"No {self.struct_id} found - building it from legacy resources")
        struct = empty_struct(version=1, known=self.resource_ids)
        legacy_found = await hydrate_missing_resources(struct, self.stores, self.resource_ids)
        return struct, legacy_found or self.health.is_healthy()

    async def _refresh(self) -> Dict[str, Any]:
        struct, needs_persist = await self._read_struct()
        if needs_persist:
            await self.persist_struct(struct)
        return struct

    async def get_struct(self) -> Dict[str, Any]:
        struct, needs_persist = await self._read_struct()
        if not needs_persist:
            return struct
        # Re-read under the queue so the write cannot race a concurrent save
        refreshed = await self.queue.run_exclusive(self._refresh, default=None)
        return refreshed if refreshed is not None else struct

    async def get_resource(self, resource_id: str, fallback: Any = None) -> Any:
        struct = await self.get_struct()
        value = struct["resources"].get(resource_id)
        if not isinstance(value, list):
            return copy.deepcopy(fallback)
        return copy.deepcopy(value)

    async def _commit(self, struct: Dict[str, Any]) -> bool:
        struct["schemaVersion"] = coerce_version(struct.get("schemaVersion")) + 1
        return await self.persist_struct(struct)

    async def save_resource(self, resource_id: str, data: Any) -> bool:
        items = as_list(data)

        async def writer() -> bool:
            struct, _ = await self._read_struct()
            resources = struct["resources"]
            if resource_id == ResourceId.SITE_CONTENT.value:
                resources[resource_id] = merge_pages(resources.get(resource_id, []), items)
            else:
                resources[resource_id] = items
            return await self._commit(struct)

        return await self.queue.run_exclusive(writer, default=False)

    async def save_struct(self, incoming: Any) -> bool:
        if not isinstance(incoming, dict):
            return False
        incoming = copy.deepcopy(incoming)

        async def writer() -> bool:
            current, _ = await self._read_struct()
            for key, value in incoming.items():
                if key not in ENVELOPE_KEYS:
                    current[key] = value
            incoming_resources = incoming.get("resources")
            if isinstance(incoming_resources, dict):
                for resource_id, value in incoming_resources.items():
                    current["resources"][resource_id] = as_list(value)
            return await self._commit(normalize_struct(current, self.resource_ids))

        return await self.queue.run_exclusive(writer, default=False)

    async def persist_struct(self, struct: Dict[str, Any]) -> bool:
        """
        Write the document to every store and mirror each resource into
        legacy per-resource storage. True when any single write succeeded.
        """
        struct["updatedAt"] = utc_now_iso()
        results = await self.stores.put_each(self.struct_id, struct)

        mirrored = []
        for resource_id, items in struct["resources"].items():
            if await self.stores.put(resource_id, items):
                mirrored.append(resource_id)

        saved = any(results.values()) or bool(mirrored)
        if saved:
            logger.info(
                f"Persisted {self.struct_id} v{struct['schemaVersion']} "
                f"(stores: {results}, mirrored: {len(mirrored)}/{len(struct['resources'])})"
            )
        else:
            logger.error(f"Failed to persist {self.struct_id} v{struct['schemaVersion']}")
        return saved
