from __future__ import annotations

from typing import List

from blocksight.config.logging import get_logger
from blocksight.core.dto import BlockRecord
from blocksight.core.errors import MalformedInput
from blocksight.ports.block_source_port import BlockSourcePort
from blocksight.ports.block_store_port import BlockStorePort

logger = get_logger(__name__)


def check_block_number(value: object, name: str = "block number") -> int:
    # bool is an int subclass; True is not block 1
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedInput(f"{name} must be a non-negative integer")
    return value


class BlockLoader:
    """
    Fetch-or-load pipeline for raw blocks.

    - Cache first: a stored record is authoritative, never re-fetched
    - Miss: exactly one provider request, errors propagate typed
    - Success: best-effort write-back, its outcome is ignored
    """

    def __init__(self, source: BlockSourcePort, store: BlockStorePort) -> None:
        self.source = source
        self.store = store

    def resolve(self, block_number: int) -> BlockRecord:
        n = check_block_number(block_number)

        cached = self.store.get(n)
        if cached is not None:
            logger.debug("Cache hit for block %d", n)
            return cached

        logger.debug("Cache miss for block %d", n)
        record = self.source.fetch_block(n)

        if not self.store.put(n, record):
            logger.debug("Block %d not cached", n)
        return record

    load_block_data = resolve

    def resolve_range(self, start: int, end: int) -> List[BlockRecord]:
        """Inclusive, ascending, one block at a time. First failure aborts the range."""
        start = check_block_number(start, "start_block")
        end = check_block_number(end, "end_block")
        if start > end:
            raise MalformedInput("start_block must be less than or equal to end_block")

        logger.info("Resolving blocks %d-%d", start, end)
        return [self.resolve(n) for n in range(start, end + 1)]
