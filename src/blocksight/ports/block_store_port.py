from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from blocksight.core.dto import BlockRecord


class BlockStorePort(ABC):
    """
    Read-through cache for raw block records, keyed by block number.

    Implementations never raise from get/put:
    - get returns None on any failure (missing, unreadable, undecodable)
    - put returns False on any failure; callers are free to ignore it
    """

    @abstractmethod
    def get(self, block_number: int) -> Optional[BlockRecord]:
        raise NotImplementedError

    @abstractmethod
    def put(self, block_number: int, record: BlockRecord) -> bool:
        raise NotImplementedError
