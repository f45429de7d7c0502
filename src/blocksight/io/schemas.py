from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from blocksight.core.dto import TransferEdge
from blocksight.core.models import Graph

SHAPE_NATIVE = "native"
SHAPE_LEGACY = "legacy"


def edge_to_dict(e: TransferEdge) -> Dict[str, str]:
    out = {"from": e.from_address, "to": e.to_address}
    if e.tx_hash is not None:
        out["hash"] = e.tx_hash
    return out


def edges_to_payload(edges: Iterable[TransferEdge], shape: str = SHAPE_NATIVE) -> List[Dict[str, str]]:
    if shape == SHAPE_NATIVE:
        return [edge_to_dict(e) for e in edges]
    if shape == SHAPE_LEGACY:
        # hash is dropped: the old shape has nowhere to put it
        return [{e.from_address: e.to_address} for e in edges]
    raise ValueError(f"Unknown payload shape: {shape}")


def graph_to_dict(
    g: Graph,
    positions: Optional[Mapping[str, Tuple[float, float]]] = None,
) -> Dict[str, Any]:
    positions = positions or {}
    nodes = []
    for n in g.nodes.values():
        item: Dict[str, Any] = {"id": n.id, "role": n.role}
        if n.id in positions:
            x, y = positions[n.id]
            item["x"] = round(x, 3)
            item["y"] = round(y, 3)
        nodes.append(item)

    return {
        "nodes": nodes,
        "links": [
            {
                "source": l.source,
                "target": l.target,
                "hash": l.tx_hash,
            }
            for l in g.links
        ],
    }


def success_body(links: Any) -> Dict[str, Any]:
    return {"status": "success", "links": links}


def error_body(detail: str) -> Dict[str, Any]:
    return {"status": "error", "detail": detail}
