from __future__ import annotations

from typing import List, Optional
from xml.sax.saxutils import escape, quoteattr

from blocksight.config import settings
from blocksight.core.models import Graph
from blocksight.layout.simulation import LayoutState
from blocksight.layout.zoom import ZoomTransform


class SvgRenderer:
    """
    Draws the whole canvas as one SVG document.

    `frame` always holds the latest drawing; the view calls `draw` on every
    simulation tick and `message` for loading / empty / error states.
    """

    def __init__(
        self,
        width: int = settings.CANVAS_WIDTH,
        height: int = settings.CANVAS_HEIGHT,
        node_radius: float = settings.NODE_RADIUS,
    ) -> None:
        self.width = width
        self.height = height
        self.node_radius = node_radius
        self.frame = ""
        self.frames = 0

    def _open(self) -> str:
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'width="{self.width}" height="{self.height}">'
        )

    def message(self, text: str, color: str = settings.MESSAGE_COLOR, font_size: str = "18px") -> str:
        self.frame = (
            self._open()
            + f'<text x="{self.width / 2}" y="{self.height / 2}" text-anchor="middle" '
            + f'style="font-size: {font_size}; fill: {color}">{escape(text)}</text>'
            + "</svg>"
        )
        self.frames += 1
        return self.frame

    def draw(
        self,
        graph: Graph,
        state: LayoutState,
        transform: ZoomTransform,
        selected: Optional[str] = None,
    ) -> str:
        parts: List[str] = [self._open(), f'<g transform="{transform.to_svg()}">']

        parts.append('<g class="links">')
        for l in graph.links:
            s = state.node(l.source)
            t = state.node(l.target)
            parts.append(
                f'<line x1="{s.x:.2f}" y1="{s.y:.2f}" x2="{t.x:.2f}" y2="{t.y:.2f}" '
                f'stroke="{settings.LINK_COLOR}" stroke-opacity="{settings.LINK_OPACITY}" '
                f'stroke-width="1"/>'
            )
        parts.append("</g>")

        parts.append('<g class="nodes">')
        for n in graph.nodes.values():
            p = state.node(n.id)
            stroke = ' stroke="#000"' if n.id == selected else ""
            parts.append(
                f'<circle data-id={quoteattr(n.id)} cx="{p.x:.2f}" cy="{p.y:.2f}" '
                f'r="{self.node_radius}" fill="{settings.ROLE_COLORS[n.role]}"{stroke} '
                f'stroke-width="1.5"><title>Address: {escape(n.id)}</title></circle>'
            )
        parts.append("</g>")

        parts.append("</g></svg>")
        self.frame = "".join(parts)
        self.frames += 1
        return self.frame
