"""
Normalization and merge helpers for the composite content document
"""
import copy
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from app.apps.content.schemas import KNOWN_RESOURCES

ENVELOPE_KEYS = ("schemaVersion", "updatedAt", "resources")
PAGE_ARRAY_KEYS = ("sections", "images")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def coerce_version(value: Any) -> int:
    """
    Read schemaVersion from untrusted JSON.

    Examples:
    - 7 -> 7
    - "7" -> 7
    - 7.0 -> 7
    - None / -1 / "abc" / True -> 0
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float) and value.is_integer():
        return max(int(value), 0)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def as_list(value: Any) -> List[Any]:
    """Deep copy of value when it is a list, otherwise an empty list"""
    return copy.deepcopy(value) if isinstance(value, list) else []


def empty_struct(version: int = 1, known: Iterable[str] = KNOWN_RESOURCES) -> Dict[str, Any]:
    return {
        "schemaVersion": version,
        "updatedAt": None,
        "resources": {resource_id: [] for resource_id in known},
    }


def normalize_struct(raw: Any, known: Iterable[str] = KNOWN_RESOURCES) -> Dict[str, Any]:
    """
    Bring a composite document into canonical shape.

    - schemaVersion becomes a non-negative int, updatedAt a string or None
    - every known resource is present and is a list (bad values -> [])
    - extra resources are kept only when their value is a list
    - other top-level fields are kept as-is

    Key order is fixed (envelope, extra fields, known resources, extra
    resources) so normalizing twice serializes identically.
    """
    source = raw if isinstance(raw, dict) else {}
    raw_resources = source.get("resources")
    if not isinstance(raw_resources, dict):
        raw_resources = {}

    updated_at = source.get("updatedAt")
    struct: Dict[str, Any] = {
        "schemaVersion": coerce_version(source.get("schemaVersion")),
        "updatedAt": updated_at if isinstance(updated_at, str) else None,
    }
    for key, value in source.items():
        if key not in ENVELOPE_KEYS:
            struct[key] = copy.deepcopy(value)

    resources: Dict[str, List[Any]] = {}
    for resource_id in known:
        resources[resource_id] = as_list(raw_resources.get(resource_id))
    for resource_id, value in raw_resources.items():
        if resource_id not in resources and isinstance(value, list):
            resources[resource_id] = copy.deepcopy(value)

    struct["resources"] = resources
    return struct


def page_identity(page: Any) -> Optional[str]:
    """Normalized identity of a site-content page: trimmed, lowercased id or page_id"""
    if not isinstance(page, dict):
        return None
    for key in ("id", "page_id"):
        value = page.get(key)
        if value is None:
            continue
        identity = str(value).strip().lower()
        if identity:
            return identity
    return None


def merge_page(existing: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    """
    Incoming fields win, except sections/images which are only replaced
    when incoming supplies a non-empty list.
    """
    merged = {**copy.deepcopy(existing), **copy.deepcopy(incoming)}
    for key in PAGE_ARRAY_KEYS:
        incoming_value = incoming.get(key)
        if isinstance(incoming_value, list) and incoming_value:
            continue
        if key in existing:
            merged[key] = copy.deepcopy(existing[key])
    return merged


def merge_pages(existing: List[Any], incoming: List[Any]) -> List[Any]:
    """
    Union of existing and incoming pages keyed by page identity.

    Existing pages keep their position (replaced in place when incoming has
    the same identity); new pages are appended in incoming order. Pages
    without identity are appended unless an equal page is already present.
    """
    result = copy.deepcopy(existing)
    positions: Dict[str, int] = {}
    for position, page in enumerate(result):
        identity = page_identity(page)
        if identity is not None and identity not in positions:
            positions[identity] = position

    for page in incoming:
        identity = page_identity(page)
        if identity is None and page in result:
            continue
        if identity is None or identity not in positions:
            result.append(copy.deepcopy(page))
            if identity is not None:
                positions[identity] = len(result) - 1
            continue
        position = positions[identity]
        result[position] = merge_page(result[position], page)

    return result
