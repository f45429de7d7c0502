from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from blocksight.config import settings
from blocksight.core.models import GraphLink


def short_id(value: Optional[str]) -> Optional[str]:
    """`0x` plus the first 4 hex characters, e.g. 0xabcdef12 -> 0xabcd."""
    if value is None:
        return None
    if value[:2].lower() == "0x":
        return value[:6]
    return value[:4]


@dataclass(frozen=True)
class PanelEntry:

    counterparty: str
    tx_hash: Optional[str]

    short_counterparty: str
    short_hash: Optional[str]

    counterparty_url: str
    tx_url: Optional[str]


@dataclass(frozen=True)
class SelectionPanel:

    address: str
    short_address: str

    outgoing: List[PanelEntry]
    incoming: List[PanelEntry]

    # before the cap
    outgoing_total: int
    incoming_total: int


def _entry(counterparty: str, tx_hash: Optional[str], explorer: str) -> PanelEntry:
    return PanelEntry(
        counterparty=counterparty,
        tx_hash=tx_hash,
        short_counterparty=short_id(counterparty) or "",
        short_hash=short_id(tx_hash),
        counterparty_url=f"{explorer}/address/{counterparty}",
        tx_url=f"{explorer}/tx/{tx_hash}" if tx_hash else None,
    )


def build_panel(
    address: str,
    links: Iterable[GraphLink],
    limit: int = settings.PANEL_MAX_ENTRIES,
    explorer_base_url: str = settings.EXPLORER_BASE_URL,
) -> SelectionPanel:
    explorer = explorer_base_url.rstrip("/")
    outgoing: List[PanelEntry] = []
    incoming: List[PanelEntry] = []
    out_total = 0
    in_total = 0

    for l in links:
        if l.source == address:
            out_total += 1
            if len(outgoing) < limit:
                outgoing.append(_entry(l.target, l.tx_hash, explorer))
        if l.target == address:
            in_total += 1
            if len(incoming) < limit:
                incoming.append(_entry(l.source, l.tx_hash, explorer))

    return SelectionPanel(
        address=address,
        short_address=short_id(address) or "",
        outgoing=outgoing,
        incoming=incoming,
        outgoing_total=out_total,
        incoming_total=in_total,
    )
