from __future__ import annotations

import json
from typing import Any, Iterable, List

from blocksight.core.dto import BlockRecord, TransferEdge
from blocksight.io.schemas import edges_to_payload


def _transactions(block: BlockRecord) -> List[Any]:
    result = (block or {}).get("result") or {}
    txs = result.get("transactions") if isinstance(result, dict) else None
    return txs if isinstance(txs, list) else []


def extract_edges(block: BlockRecord, include_hash: bool = True) -> List[TransferEdge]:
    edges: List[TransferEdge] = []
    for tx in _transactions(block):
        # hash-only blocks carry strings, not transaction objects
        if not isinstance(tx, dict):
            continue

        from_addr = tx.get("from")
        to_addr = tx.get("to")
        # contract creation has no recipient
        if not from_addr or not to_addr:
            continue

        edges.append(
            TransferEdge(
                from_address=from_addr,
                to_address=to_addr,
                tx_hash=tx.get("hash") if include_hash else None,
            )
        )
    return edges


def extract_edges_range(
    blocks: Iterable[BlockRecord],
    include_hash: bool = True,
) -> List[TransferEdge]:
    edges: List[TransferEdge] = []
    for block in blocks:
        edges.extend(extract_edges(block, include_hash=include_hash))
    return edges


def filter_transactions(
    block: BlockRecord,
    include_hash: bool = False,
    shape: str = "native",
) -> str:
    """Serialized edge list for a single block (hashes omitted by default)."""
    edges = extract_edges(block, include_hash=include_hash)
    return json.dumps(edges_to_payload(edges, shape=shape))


def filter_transactions_range(
    blocks: Iterable[BlockRecord],
    include_hash: bool = True,
    shape: str = "native",
) -> str:
    edges = extract_edges_range(blocks, include_hash=include_hash)
    return json.dumps(edges_to_payload(edges, shape=shape))
