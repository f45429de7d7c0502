from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

ROLE_FROM = "from"
ROLE_TO = "to"


# Graph models

@dataclass(frozen=True)
class GraphNode:

    id: str
    role: str               # "from" | "to", fixed at first sighting


@dataclass(frozen=True)
class GraphLink:

    source: str
    target: str
    tx_hash: Optional[str] = None


@dataclass
class Graph:

    nodes: Dict[str, GraphNode] = field(default_factory=dict)
    links: List[GraphLink] = field(default_factory=list)
