from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Optional

from blocksight.api.handlers import to_int
from blocksight.config import settings
from blocksight.config.logging import get_logger
from blocksight.core.dto import TransferEdge
from blocksight.core.errors import BlockSightError, EmptyGraph
from blocksight.core.models import Graph
from blocksight.io.svg_renderer import SvgRenderer
from blocksight.layout.selection import SelectionPanel, build_panel
from blocksight.layout.simulation import DRAG_ALPHA_TARGET, ForceSimulation, LayoutState
from blocksight.layout.zoom import Point, ZoomBehavior
from blocksight.services.graph_builder import build_graph, load_payload, normalize_links

logger = get_logger(__name__)

NO_TRANSACTIONS = "No transactions found for selection."
NO_NODES = "No transaction nodes to display."


class ApiError(BlockSightError):
    def __init__(self, status: int, detail: str) -> None:
        super().__init__(detail)
        self.status = status


def _print_alert(message: str) -> None:
    print(message)


class GraphView:
    """
    Interactive graph canvas.

    - render_graph: rebuilds graph, simulation, zoom and pins from scratch
    - with `live` on, every tick redraws the frame through the renderer;
      otherwise the frame is drawn on demand with redraw()
    - selection survives re-renders until clear_selection()
    - failures replace the canvas with a message and also call `notify`
    """

    def __init__(
        self,
        api: Optional[Any] = None,
        renderer: Optional[SvgRenderer] = None,
        notify: Optional[Callable[[str], None]] = None,
        width: int = settings.CANVAS_WIDTH,
        height: int = settings.CANVAS_HEIGHT,
        seed: Optional[int] = None,
        live: bool = True,
    ) -> None:
        self.api = api
        self.width = width
        self.height = height
        self.renderer = renderer or SvgRenderer(width, height)
        self.notify = notify or _print_alert
        self.seed = seed
        self.live = live

        self.label = "Block Number: N/A"
        self.graph: Optional[Graph] = None
        self.edges: List[TransferEdge] = []
        self.simulation: Optional[ForceSimulation] = None
        self.zoom = ZoomBehavior()
        self.selected: Optional[str] = None
        self._dragging = 0
        self.last_error: Optional[BaseException] = None

    # -------------------------
    # Rendering
    # -------------------------

    @property
    def frame(self) -> str:
        return self.renderer.frame

    @property
    def state(self) -> Optional[LayoutState]:
        return self.simulation.state if self.simulation else None

    def _discard(self) -> None:
        if self.simulation is not None:
            self.simulation.stop()
        self.simulation = None
        self.graph = None
        self.edges = []
        self.zoom = ZoomBehavior(self.zoom.scale_extent)
        self._dragging = 0

    def render_message(self, text: str, color: str = settings.MESSAGE_COLOR, font_size: str = "18px") -> None:
        self._discard()
        self.renderer.message(text, color=color, font_size=font_size)

    def render_graph(self, payload: Any) -> bool:
        """Returns True when a graph is on the canvas, False for the empty state."""
        entries = load_payload(payload)
        if not entries:
            self.render_message(NO_TRANSACTIONS, color=settings.EMPTY_COLOR)
            return False

        edges = normalize_links(entries)
        try:
            graph = build_graph(edges)
        except EmptyGraph:
            self.render_message(NO_NODES, color=settings.EMPTY_COLOR)
            return False

        self._discard()
        self.graph = graph
        self.edges = edges
        self.simulation = ForceSimulation.from_graph(graph, self.width, self.height, seed=self.seed)
        if self.live:
            self.simulation.on_tick(lambda _state: self.redraw())
        self.redraw()
        logger.debug("Rendering %d nodes, %d links", len(graph.nodes), len(graph.links))
        return True

    def redraw(self) -> None:
        if self.graph is None or self.simulation is None:
            return
        self.renderer.draw(self.graph, self.simulation.state, self.zoom.transform, self.selected)

    def step(self) -> bool:
        """One animation frame. Returns whether the layout is still moving."""
        if self.simulation is None:
            return False
        return self.simulation.step()

    def settle(self, max_ticks: Optional[int] = None) -> int:
        if self.simulation is None:
            return 0
        return self.simulation.run(max_ticks=max_ticks)

    def positions(self) -> Dict[str, tuple]:
        return self.state.positions() if self.state else {}

    # -------------------------
    # Gestures
    # -------------------------

    def zoom_by(self, factor: float, point: Optional[Point] = None) -> None:
        self.zoom.scale_by(factor, point or (self.width / 2, self.height / 2))
        self.redraw()

    def zoom_to(self, k: float, point: Optional[Point] = None) -> None:
        self.zoom.scale_to(k, point or (self.width / 2, self.height / 2))
        self.redraw()

    def pan_by(self, dx: float, dy: float) -> None:
        self.zoom.translate_by(dx, dy)
        self.redraw()

    def node_at(self, point: Point) -> Optional[str]:
        """Topmost node under a screen point."""
        if self.graph is None or self.simulation is None:
            return None
        lx, ly = self.zoom.transform.invert(point)
        hit = None
        for n in self.simulation.state.nodes:
            if math.hypot(n.x - lx, n.y - ly) <= self.renderer.node_radius:
                hit = n.id      # later nodes are drawn on top
        return hit

    def drag_start(self, node_id: str) -> None:
        if self.simulation is None:
            return
        self.simulation.pin(node_id)
        if self._dragging == 0:
            self.simulation.set_alpha_target(DRAG_ALPHA_TARGET)
            self.simulation.restart()
        self._dragging += 1

    def drag_to(self, node_id: str, point: Point) -> None:
        if self.simulation is None:
            return
        x, y = self.zoom.transform.invert(point)
        self.simulation.pin(node_id, x, y)

    def drag_end(self, node_id: str) -> None:
        if self.simulation is None:
            return
        self._dragging = max(0, self._dragging - 1)
        if self._dragging == 0:
            self.simulation.set_alpha_target(0.0)
        self.simulation.release(node_id)

    def click(self, point: Point) -> Optional[str]:
        node_id = self.node_at(point)
        if node_id is not None:
            self.select(node_id)
        return node_id

    # -------------------------
    # Selection
    # -------------------------

    def select(self, address: str) -> None:
        self.selected = address
        self.redraw()

    def clear_selection(self) -> None:
        self.selected = None
        self.redraw()

    @property
    def panel(self) -> Optional[SelectionPanel]:
        if self.selected is None or self.graph is None:
            return None
        return build_panel(self.selected, self.graph.links)

    # -------------------------
    # Fetching
    # -------------------------

    @staticmethod
    def _links_from(response: Any) -> Any:
        status, body = response
        if status != 200:
            detail = (body or {}).get("detail") or f"HTTP {status}"
            raise ApiError(status, detail)
        if not body or body.get("status") != "success" or "links" not in body:
            raise ApiError(status, "Unexpected response from server.")
        return body["links"]

    def fetch_single_block(self, value: Any) -> bool:
        try:
            n = to_int(value)
        except (TypeError, ValueError, OverflowError):
            n = -1
        if n < 0:
            self.notify("Block number must be a non-negative integer.")
            return False

        context = f"block {n}"
        self.last_error = None
        self.label = f"Block Number: {n}"
        self.render_message(f"Loading block {n}...")
        try:
            links = self._links_from(self.api.get_block(n))
            return self.render_graph(links)
        except Exception as e:
            self.handle_error(context, e)
            return False

    def fetch_range(self, start: Any, end: Any) -> bool:
        try:
            start_block, end_block = to_int(start), to_int(end)
        except (TypeError, ValueError, OverflowError):
            self.notify("Both range fields must be valid block numbers.")
            return False
        if start_block < 0 or end_block < 0:
            self.notify("Block range must be non-negative.")
            return False
        if start_block > end_block:
            self.notify("From block must be less than or equal to To block.")
            return False

        context = f"blocks {start_block}-{end_block}"
        self.last_error = None
        self.label = f"Block Range: {start_block} - {end_block}"
        self.render_message(f"Loading blocks {start_block} - {end_block}...")
        try:
            links = self._links_from(
                self.api.post_blocks({"start_block": start_block, "end_block": end_block})
            )
            return self.render_graph(links)
        except Exception as e:
            self.handle_error(context, e)
            return False

    def handle_error(self, context: str, error: BaseException) -> None:
        self.last_error = error
        logger.error("Error fetching %s: %s", context, error)
        self.render_message(f"Error: {error}", color=settings.ERROR_COLOR, font_size="16px")
        self.notify(f"Error loading {context}: {error}")
