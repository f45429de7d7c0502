import copy
from typing import Dict, Optional

from blocksight.core.dto import BlockRecord
from blocksight.ports.block_store_port import BlockStorePort

class MemoryBlockStore(BlockStorePort):
    def __init__(self,
                 records: Optional[Dict[int, BlockRecord]] = None,
                 read_only: bool = False,
                 ):
        self._records = {int(k): v for k, v in (records or {}).items()}
        self._read_only = read_only

    def get(self, block_number):
        record = self._records.get(int(block_number))
        return copy.deepcopy(record) if record is not None else None

    def put(self, block_number, record):
        if self._read_only:
            return False
        self._records[int(block_number)] = copy.deepcopy(record)
        return True

    def __contains__(self, block_number):
        return int(block_number) in self._records

    def __len__(self):
        return len(self._records)
