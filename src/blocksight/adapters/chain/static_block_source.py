import json
from typing import Dict, List, Optional

from blocksight.core.dto import BlockRecord
from blocksight.core.errors import NotFound
from blocksight.ports.block_source_port import BlockSourcePort

class StaticBlockSource(BlockSourcePort):
    def __init__(self,
                 blocks: Optional[Dict[int, BlockRecord]] = None,
                 ):
        self._blocks = {int(k): v for k, v in (blocks or {}).items()}
        self.calls: List[int] = []

    @classmethod
    def from_file(cls, path: str) -> "StaticBlockSource":
        # {"<block number>": <raw response body>, ...}
        with open(path, encoding="utf-8") as f:
            return cls(json.load(f))

    def fetch_block(self, block_number):
        self.calls.append(block_number)
        record = self._blocks.get(int(block_number))
        if record is None or record.get("result") is None:
            raise NotFound(
                f"Block {block_number} not found. Block may not exist yet or is invalid."
            )
        return record
