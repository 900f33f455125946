"""
Admin panel sitemap helpers
"""
import copy
from typing import Any, Dict, List

SITEMAP_ID = "sitemap"

DEFAULT_SITEMAP: List[Dict[str, str]] = [
    {"title": "Dashboard", "icon": "Layout", "path": "/"},
]

# Always offered so the admin UI can filter them by role
CORE_LINKS: List[Dict[str, str]] = [
    {"title": "Admin Hesabları", "icon": "Users", "path": "/users-management"},
    {"title": "Sistem Ayarları", "icon": "Settings", "path": "/frontend-settings"},
]


def with_core_links(sitemap: Any) -> List[Any]:
    """
    Stored sitemap (default when missing or not a list) plus every core
    link whose path is not already present.
    """
    links = copy.deepcopy(sitemap) if isinstance(sitemap, list) else copy.deepcopy(DEFAULT_SITEMAP)
    paths = {item.get("path") for item in links if isinstance(item, dict)}
    for link in CORE_LINKS:
        if link["path"] not in paths:
            links.append(dict(link))
    return links
