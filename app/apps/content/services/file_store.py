"""
JSON file content store (one file per content id)
"""
import json
import uuid
from pathlib import Path
from typing import Any, Dict, Iterable, Optional
import logging

import aiofiles
import aiofiles.os

from app.apps.content.services.repository import ContentRepository

logger = logging.getLogger(__name__)


def default_file_paths(data_dir: Path, content_ids: Iterable[str]) -> Dict[str, Path]:
    """<data_dir>/<id>.json for each id"""
    return {content_id: Path(data_dir) / f"{content_id}.json" for content_id in content_ids}


class FileContentStore(ContentRepository):
    """
    Fallback / bootstrap store.

    Only ids with a designated path are file-backed. Missing or unparsable
    files read as "not found".
    """

    name = "file"

    def __init__(self, paths: Dict[str, Path]):
        self.paths = {content_id: Path(path) for content_id, path in paths.items()}

    def path_for(self, content_id: str) -> Optional[Path]:
        return self.paths.get(content_id)

    def exists(self, content_id: str) -> bool:
        path = self.path_for(content_id)
        return path is not None and path.exists()

    async def get(self, content_id: str) -> Optional[Any]:
        path = self.path_for(content_id)
        if path is None:
            return None
        try:
            async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
                raw = await f.read()
            return json.loads(raw)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable content file for {content_id} ({path}): {e}")
            return None

    async def read_strict(self, content_id: str) -> Any:
        """Read and parse the file, raising on any failure"""
        path = self.path_for(content_id)
        if path is None:
            raise KeyError(f"No file path configured for {content_id}")
        async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
            raw = await f.read()
        return json.loads(raw)

    async def put(self, content_id: str, value: Any) -> bool:
        path = self.path_for(content_id)
        if path is None:
            return False
        tmp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, mode="w", encoding="utf-8") as f:
                await f.write(json.dumps(value, indent=2, ensure_ascii=False))
            await aiofiles.os.replace(tmp_path, path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving content file for {content_id}: {e}")
            tmp_path.unlink(missing_ok=True)
            return False
