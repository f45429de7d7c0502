from __future__ import annotations

import json
from typing import Any, Iterable, List, Union

from blocksight.core.dto import LegacyLink, NativeLink, TransferEdge
from blocksight.core.errors import EmptyGraph, MalformedInput
from blocksight.core.models import ROLE_FROM, ROLE_TO, Graph, GraphLink, GraphNode

LinkEntry = Union[NativeLink, LegacyLink, TransferEdge]


def _tag(item: Any) -> LinkEntry:
    if isinstance(item, TransferEdge):
        return item
    if not isinstance(item, dict):
        raise MalformedInput(f"Unsupported link entry: {item!r}")
    if "from" in item or "to" in item or "hash" in item:
        return NativeLink(item)
    return LegacyLink(item)


def _edges_from(entry: LinkEntry) -> List[TransferEdge]:
    if isinstance(entry, TransferEdge):
        return [entry] if entry.from_address and entry.to_address else []

    if isinstance(entry, NativeLink):
        src = entry.entry.get("from")
        dst = entry.entry.get("to")
        if not src or not dst:
            return []
        return [TransferEdge(str(src), str(dst), entry.entry.get("hash"))]

    # legacy {from: to}; normally one key, every pair is honored
    return [
        TransferEdge(str(src), str(dst))
        for src, dst in entry.entry.items()
        if src and dst
    ]


def load_payload(payload: Union[str, Iterable[Any], None]) -> List[Any]:
    """Raw entry list from a JSON string or any iterable of entries."""
    if payload is None:
        return []
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise MalformedInput(f"Links payload is not valid JSON: {e}") from e
        if payload is None:
            return []
    if isinstance(payload, dict):
        raise MalformedInput("Links payload must be a list")
    try:
        return list(payload)
    except TypeError as e:
        raise MalformedInput("Links payload must be a list") from e


def normalize_links(payload: Union[str, Iterable[Any], None]) -> List[TransferEdge]:
    """
    Accepts a JSON string or a list of entries in either shape:
    - native: {"from": a, "to": b, "hash": h?}
    - legacy: {a: b}
    - TransferEdge instances
    """
    edges: List[TransferEdge] = []
    for item in load_payload(payload):
        edges.extend(_edges_from(_tag(item)))
    return edges


def build_graph(edges: Union[str, Iterable[Any], None]) -> Graph:
    graph = Graph(nodes={}, links=[])

    for e in normalize_links(edges):
        # first sighting decides the role, later sightings never change it
        if e.from_address not in graph.nodes:
            graph.nodes[e.from_address] = GraphNode(id=e.from_address, role=ROLE_FROM)
        if e.to_address not in graph.nodes:
            graph.nodes[e.to_address] = GraphNode(id=e.to_address, role=ROLE_TO)

        graph.links.append(GraphLink(source=e.from_address, target=e.to_address, tx_hash=e.tx_hash))

    if not graph.nodes:
        raise EmptyGraph("No transaction nodes to display.")
    return graph
