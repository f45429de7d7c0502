from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from blocksight.config import settings
from blocksight.config.logging import get_logger
from blocksight.core.dto import BlockRecord
from blocksight.ports.block_store_port import BlockStorePort

logger = get_logger(__name__)


class FileBlockStore(BlockStorePort):
    """
    One JSON file per block: <cache_dir>/<block number>.json holding the
    verbatim provider response.
    """

    def __init__(self, cache_dir: Optional[str] = None) -> None:
        self._dir = Path(cache_dir or settings.CACHE_DIR)

    def path_for(self, block_number: int) -> Path:
        return self._dir / f"{int(block_number)}.json"

    def get(self, block_number: int) -> Optional[BlockRecord]:
        path = self.path_for(block_number)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.debug("Cache miss for block %d: %s", block_number, e)
            return None

        if not isinstance(data, dict):
            logger.debug("Cache entry for block %d is not an object, ignoring", block_number)
            return None
        return data

    def put(self, block_number: int, record: BlockRecord) -> bool:
        path = self.path_for(block_number)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                json.dump(record, f)
        except (OSError, TypeError, ValueError) as e:
            # e.g. read-only filesystem
            logger.debug("Cache write for block %d failed: %s", block_number, e)
            return False
        return True
