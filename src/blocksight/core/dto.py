from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

# Verbatim JSON-RPC response body for eth_getBlockByNumber
BlockRecord = Dict[str, Any]


@dataclass(frozen=True)
class TransferEdge:
    from_address: str
    to_address: str
    tx_hash: Optional[str] = None       # omitted by the single-block payload


@dataclass(frozen=True)
class NativeLink:
    """Structured payload entry: {"from": ..., "to": ..., "hash": ...}."""

    entry: Dict[str, Any]


@dataclass(frozen=True)
class LegacyLink:
    """Older payload entry: a single-key map {from: to}."""

    entry: Dict[str, Any]
