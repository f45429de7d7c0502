from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from blocksight.core.models import Graph, GraphLink

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))

ALPHA_MIN = 0.001
ALPHA_DECAY = 1 - ALPHA_MIN ** (1 / 300)
VELOCITY_DECAY = 0.4
DRAG_ALPHA_TARGET = 0.3


# Physics state

@dataclass
class LayoutNode:

    id: str
    index: int
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0

    # pinned position while dragged
    fx: Optional[float] = None
    fy: Optional[float] = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None or self.fy is not None


@dataclass
class LayoutState:

    nodes: List[LayoutNode] = field(default_factory=list)

    alpha: float = 1.0
    alpha_min: float = ALPHA_MIN
    alpha_decay: float = ALPHA_DECAY
    alpha_target: float = 0.0
    velocity_decay: float = VELOCITY_DECAY

    rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        self._by_id = {n.id: n for n in self.nodes}

    def node(self, node_id: str) -> LayoutNode:
        return self._by_id[node_id]

    def positions(self) -> Dict[str, Tuple[float, float]]:
        return {n.id: (n.x, n.y) for n in self.nodes}

    @property
    def settled(self) -> bool:
        return self.alpha < self.alpha_min

    def jiggle(self) -> float:
        return (self.rng.random() - 0.5) * 1e-6

    @classmethod
    def for_ids(cls, ids: Iterable[str], seed: Optional[int] = None) -> "LayoutState":
        """Phyllotaxis placement around the origin, all velocities zero."""
        nodes = []
        for i, node_id in enumerate(ids):
            radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
            angle = i * INITIAL_ANGLE
            nodes.append(
                LayoutNode(
                    id=node_id,
                    index=i,
                    x=radius * math.cos(angle),
                    y=radius * math.sin(angle),
                )
            )
        return cls(nodes=nodes, rng=random.Random(seed))


# Forces

class Force:
    def initialize(self, state: LayoutState) -> None:
        pass

    def __call__(self, state: LayoutState, alpha: float) -> None:
        raise NotImplementedError


_MAX_DEPTH = 32


class _Quad:
    """Square quadtree cell. Leaves hold nodes sharing one position."""

    __slots__ = ("x0", "y0", "size", "children", "points", "value", "x", "y")

    def __init__(self, x0: float, y0: float, size: float) -> None:
        self.x0 = x0
        self.y0 = y0
        self.size = size
        self.children: Optional[List[Optional[_Quad]]] = None
        self.points: List[LayoutNode] = []
        self.value = 0.0
        self.x = 0.0
        self.y = 0.0

    def _index(self, node: LayoutNode) -> int:
        half = self.size / 2
        right = 1 if node.x >= self.x0 + half else 0
        below = 2 if node.y >= self.y0 + half else 0
        return right + below

    def contains(self, node: LayoutNode) -> bool:
        return (
            self.x0 <= node.x <= self.x0 + self.size
            and self.y0 <= node.y <= self.y0 + self.size
        )

    def _child(self, i: int, points: List[LayoutNode]) -> "_Quad":
        half = self.size / 2
        child = _Quad(self.x0 + half * (i & 1), self.y0 + half * (i >> 1), half)
        child.points = list(points)
        return child

    def insert(self, node: LayoutNode) -> None:
        quad, depth = self, 0
        while True:
            if quad.children is None:
                first = quad.points[0] if quad.points else None
                if first is None or depth >= _MAX_DEPTH or (first.x == node.x and first.y == node.y):
                    quad.points.append(node)
                    return
                # split: the leaf's points move one level down together
                quad.children = [None, None, None, None]
                i = quad._index(first)
                quad.children[i] = quad._child(i, quad.points)
                quad.points = []

            i = quad._index(node)
            child = quad.children[i]
            if child is None:
                quad.children[i] = quad._child(i, [node])
                return
            quad, depth = child, depth + 1

    def accumulate(self, strength: float) -> None:
        """Total charge and charge-weighted centre, bottom-up."""
        if self.children is None:
            self.x = self.points[0].x
            self.y = self.points[0].y
            self.value = strength * len(self.points)
            return

        value = weight = x = y = 0.0
        for child in self.children:
            if child is None:
                continue
            child.accumulate(strength)
            c = abs(child.value)
            if c:
                value += child.value
                weight += c
                x += c * child.x
                y += c * child.y
        self.value = value
        if weight:
            self.x = x / weight
            self.y = y / weight


class ManyBodyForce(Force):
    """
    Charge between every pair of nodes. Negative strength repels.

    Uses the Barnes-Hut approximation: a cell of width w seen from distance l
    acts as one body at its centre of charge when w / l < theta and the
    cell does not contain the node itself. theta = 0 gives the exact
    pairwise sum.
    """

    def __init__(
        self,
        strength: float = -30.0,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
        theta: float = 0.9,
    ) -> None:
        self.strength = strength
        self._dmin2 = distance_min * distance_min
        self._dmax2 = distance_max * distance_max
        self._theta2 = theta * theta

    def _tree(self, nodes: Sequence[LayoutNode]) -> _Quad:
        x0 = min(n.x for n in nodes)
        y0 = min(n.y for n in nodes)
        size = max(max(n.x for n in nodes) - x0, max(n.y for n in nodes) - y0) or 1.0
        root = _Quad(x0, y0, size)
        for node in nodes:
            root.insert(node)
        root.accumulate(self.strength)
        return root

    def __call__(self, state: LayoutState, alpha: float) -> None:
        if not state.nodes:
            return
        root = self._tree(state.nodes)
        for node in state.nodes:
            self._apply(root, node, state, alpha)

    def _apply(self, root: _Quad, node: LayoutNode, state: LayoutState, alpha: float) -> None:
        stack = [root]
        while stack:
            quad = stack.pop()
            if not quad.value:
                continue

            x = quad.x - node.x
            y = quad.y - node.y
            l = x * x + y * y

            if quad.size * quad.size < self._theta2 * l and not quad.contains(node):
                if l < self._dmax2:
                    if x == 0:
                        x = state.jiggle()
                        l += x * x
                    if y == 0:
                        y = state.jiggle()
                        l += y * y
                    if l < self._dmin2:
                        l = math.sqrt(self._dmin2 * l)
                    node.vx += x * quad.value * alpha / l
                    node.vy += y * quad.value * alpha / l
                continue

            if quad.children is not None:
                stack.extend(c for c in quad.children if c is not None)
                continue
            if l >= self._dmax2:
                continue

            if quad.points[0] is not node or len(quad.points) > 1:
                if x == 0:
                    x = state.jiggle()
                    l += x * x
                if y == 0:
                    y = state.jiggle()
                    l += y * y
                if l < self._dmin2:
                    l = math.sqrt(self._dmin2 * l)
            for other in quad.points:
                if other is not node:
                    w = self.strength * alpha / l
                    node.vx += x * w
                    node.vy += y * w


class LinkForce(Force):
    """
    Spring along each link towards `distance`.

    Stiffness and the source/target split follow node degree, so hubs move less.
    """

    def __init__(self, links: Sequence[GraphLink], distance: float = 30.0, iterations: int = 1) -> None:
        self.links = list(links)
        self.distance = distance
        self.iterations = iterations
        self._pairs: List[Tuple[LayoutNode, LayoutNode]] = []
        self._strengths: List[float] = []
        self._bias: List[float] = []

    def initialize(self, state: LayoutState) -> None:
        count: Dict[str, int] = {}
        for l in self.links:
            count[l.source] = count.get(l.source, 0) + 1
            count[l.target] = count.get(l.target, 0) + 1

        self._pairs = [(state.node(l.source), state.node(l.target)) for l in self.links]
        self._strengths = [1 / min(count[l.source], count[l.target]) for l in self.links]
        self._bias = [count[l.source] / (count[l.source] + count[l.target]) for l in self.links]

    def __call__(self, state: LayoutState, alpha: float) -> None:
        for _ in range(self.iterations):
            for i, (source, target) in enumerate(self._pairs):
                x = (target.x + target.vx - source.x - source.vx) or state.jiggle()
                y = (target.y + target.vy - source.y - source.vy) or state.jiggle()
                l = math.sqrt(x * x + y * y)
                l = (l - self.distance) / l * alpha * self._strengths[i]
                x *= l
                y *= l
                b = self._bias[i]
                target.vx -= x * b
                target.vy -= y * b
                source.vx += x * (1 - b)
                source.vy += y * (1 - b)


class PositionXForce(Force):
    def __init__(self, x: float, strength: float = 0.1) -> None:
        self.x = x
        self.strength = strength

    def __call__(self, state: LayoutState, alpha: float) -> None:
        for node in state.nodes:
            node.vx += (self.x - node.x) * self.strength * alpha


class PositionYForce(Force):
    def __init__(self, y: float, strength: float = 0.1) -> None:
        self.y = y
        self.strength = strength

    def __call__(self, state: LayoutState, alpha: float) -> None:
        for node in state.nodes:
            node.vy += (self.y - node.y) * self.strength * alpha


def default_forces(graph: Graph, width: float, height: float) -> List[Force]:
    return [
        LinkForce(graph.links),
        ManyBodyForce(),
        PositionXForce(width / 2, strength=0.1),
        PositionYForce(height / 2, strength=0.1),
    ]


def tick(state: LayoutState, forces: Sequence[Force]) -> LayoutState:
    """
    Advance the layout by one step, in place; returns the same state.

    Pinned nodes sit at (fx, fy) with zero velocity.
    """
    state.alpha += (state.alpha_target - state.alpha) * state.alpha_decay

    for force in forces:
        force(state, state.alpha)

    keep = 1 - state.velocity_decay
    for node in state.nodes:
        if node.fx is None:
            node.vx *= keep
            node.x += node.vx
        else:
            node.x = node.fx
            node.vx = 0.0
        if node.fy is None:
            node.vy *= keep
            node.y += node.vy
        else:
            node.y = node.fy
            node.vy = 0.0
    return state


# Driver

TickListener = Callable[[LayoutState], None]


class ForceSimulation:
    """
    Steps `tick` until alpha decays below alpha_min, calling tick listeners
    after every step. Stops by itself; `restart` resumes it.
    """

    def __init__(self, state: LayoutState, forces: Sequence[Force]) -> None:
        self.state = state
        self.forces = list(forces)
        self.running = True
        self.ticks = 0
        self._listeners: List[TickListener] = []

        for force in self.forces:
            force.initialize(state)

    @classmethod
    def from_graph(
        cls,
        graph: Graph,
        width: float,
        height: float,
        seed: Optional[int] = None,
    ) -> "ForceSimulation":
        state = LayoutState.for_ids(graph.nodes.keys(), seed=seed)
        return cls(state, default_forces(graph, width, height))

    def on_tick(self, listener: TickListener) -> None:
        self._listeners.append(listener)

    def step(self) -> bool:
        """One tick if running. Returns whether the simulation is still running."""
        if not self.running:
            return False

        tick(self.state, self.forces)
        self.ticks += 1
        for listener in self._listeners:
            listener(self.state)

        if self.state.settled:
            self.running = False
        return self.running

    def run(self, max_ticks: Optional[int] = None) -> int:
        done = 0
        while self.running and (max_ticks is None or done < max_ticks):
            self.step()
            done += 1
        return done

    def restart(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False

    def set_alpha_target(self, value: float) -> None:
        self.state.alpha_target = value

    # ---------- drag ----------

    def pin(self, node_id: str, x: Optional[float] = None, y: Optional[float] = None) -> None:
        node = self.state.node(node_id)
        node.fx = node.x if x is None else x
        node.fy = node.y if y is None else y

    def release(self, node_id: str) -> None:
        node = self.state.node(node_id)
        node.fx = None
        node.fy = None
