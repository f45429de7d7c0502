import math
import unittest

from blocksight.core.models import Graph, GraphLink, GraphNode
from blocksight.layout.simulation import (
    ALPHA_MIN,
    ForceSimulation,
    LayoutState,
    LinkForce,
    ManyBodyForce,
    PositionXForce,
    tick,
)


def _graph(pairs):
    g = Graph()
    for src, dst in pairs:
        g.nodes.setdefault(src, GraphNode(src, "from"))
        g.nodes.setdefault(dst, GraphNode(dst, "to"))
        g.links.append(GraphLink(src, dst))
    return g


class LayoutStateTests(unittest.TestCase):
    def test_phyllotaxis_initial_positions(self) -> None:
        state = LayoutState.for_ids(["a", "b", "c"])

        self.assertAlmostEqual(state.node("a").x, 10 * math.sqrt(0.5))
        self.assertAlmostEqual(state.node("a").y, 0.0)
        r = math.hypot(state.node("c").x, state.node("c").y)
        self.assertAlmostEqual(r, 10 * math.sqrt(2.5))
        self.assertTrue(all(n.vx == 0 and n.vy == 0 for n in state.nodes))


class TickTests(unittest.TestCase):
    def test_tick_decays_alpha_and_returns_state(self) -> None:
        state = LayoutState.for_ids(["a"])

        out = tick(state, [])

        self.assertIs(out, state)
        self.assertLess(state.alpha, 1.0)
        self.assertAlmostEqual(state.alpha, 1 - state.alpha_decay)

    def test_pinned_node_sits_at_pin(self) -> None:
        state = LayoutState.for_ids(["a", "b"], seed=1)
        state.node("a").fx = 50.0
        state.node("a").fy = -20.0

        tick(state, [ManyBodyForce()])

        a = state.node("a")
        self.assertEqual((a.x, a.y), (50.0, -20.0))
        self.assertEqual((a.vx, a.vy), (0.0, 0.0))

    def test_charge_repels(self) -> None:
        state = LayoutState.for_ids(["a", "b"], seed=1)
        before = math.hypot(state.nodes[0].x - state.nodes[1].x, state.nodes[0].y - state.nodes[1].y)

        tick(state, [ManyBodyForce()])

        after = math.hypot(state.nodes[0].x - state.nodes[1].x, state.nodes[0].y - state.nodes[1].y)
        self.assertGreater(after, before)

    def test_link_pulls_distant_nodes_together(self) -> None:
        state = LayoutState.for_ids(["a", "b"], seed=1)
        state.node("a").x, state.node("a").y = 0.0, 0.0
        state.node("b").x, state.node("b").y = 300.0, 0.0
        force = LinkForce([GraphLink("a", "b")])
        force.initialize(state)

        tick(state, [force])

        self.assertLess(state.node("b").x - state.node("a").x, 300.0)

    def test_centering_pulls_toward_target(self) -> None:
        state = LayoutState.for_ids(["a"])

        tick(state, [PositionXForce(600.0)])

        self.assertGreater(state.node("a").vx, 0)


def _pairwise(points, strength=-30.0, alpha=1.0):
    out = []
    for i, (x0, y0) in enumerate(points):
        vx = vy = 0.0
        for j, (x1, y1) in enumerate(points):
            if i == j:
                continue
            x, y = x1 - x0, y1 - y0
            l = x * x + y * y
            if l < 1.0:
                l = math.sqrt(l)
            vx += x * strength * alpha / l
            vy += y * strength * alpha / l
        out.append((vx, vy))
    return out


def _state_at(points):
    state = LayoutState.for_ids([str(i) for i in range(len(points))], seed=4)
    for node, (x, y) in zip(state.nodes, points):
        node.x, node.y = x, y
    return state


class ManyBodyForceTests(unittest.TestCase):
    POINTS = [(3.0, 4.0), (-20.0, 7.5), (40.0, -12.0), (41.5, -10.0), (200.0, 150.0), (-90.0, -60.0)]

    def test_zero_theta_is_exact(self) -> None:
        state = _state_at(self.POINTS)

        ManyBodyForce(theta=0.0)(state, 1.0)

        for node, (vx, vy) in zip(state.nodes, _pairwise(self.POINTS)):
            self.assertAlmostEqual(node.vx, vx, places=9)
            self.assertAlmostEqual(node.vy, vy, places=9)

    def test_far_cluster_is_approximated_closely(self) -> None:
        points = [(0.0, 0.0)] + [(1000.0 + dx, 1000.0 + dy) for dx, dy in [(0, 0), (1, 0), (0, 1), (1, 1), (0.5, 0.5)]]
        state = _state_at(points)

        ManyBodyForce()(state, 1.0)

        vx, vy = _pairwise(points)[0]
        origin = state.nodes[0]
        self.assertAlmostEqual(origin.vx, vx, delta=abs(vx) * 1e-2)
        self.assertAlmostEqual(origin.vy, vy, delta=abs(vy) * 1e-2)

    def test_default_theta_tracks_exact_sum_on_phyllotaxis(self) -> None:
        state = LayoutState.for_ids([str(i) for i in range(200)], seed=1)
        points = [(n.x, n.y) for n in state.nodes]

        ManyBodyForce()(state, 1.0)

        exact = _pairwise(points)
        err = sum(math.hypot(n.vx - vx, n.vy - vy) for n, (vx, vy) in zip(state.nodes, exact))
        total = sum(math.hypot(vx, vy) for vx, vy in exact)
        self.assertLess(err / total, 0.15)

    def test_coincident_nodes_are_pushed_apart(self) -> None:
        state = _state_at([(5.0, 5.0), (5.0, 5.0), (5.0, 5.0)])

        ManyBodyForce()(state, 1.0)

        self.assertTrue(all(n.vx != 0 or n.vy != 0 for n in state.nodes))

    def test_single_node_feels_nothing(self) -> None:
        state = _state_at([(1.0, 2.0)])

        ManyBodyForce()(state, 1.0)

        self.assertEqual((state.nodes[0].vx, state.nodes[0].vy), (0.0, 0.0))


class ForceSimulationTests(unittest.TestCase):
    def test_runs_until_alpha_below_minimum(self) -> None:
        sim = ForceSimulation.from_graph(_graph([("a", "b"), ("b", "c")]), 1200, 800, seed=7)
        seen = []
        sim.on_tick(lambda state: seen.append(state.alpha))

        ticks = sim.run()

        self.assertFalse(sim.running)
        self.assertLess(sim.state.alpha, ALPHA_MIN)
        self.assertEqual(len(seen), ticks)
        self.assertTrue(295 <= ticks <= 305)
        self.assertFalse(sim.step())

    def test_settles_near_viewport_center(self) -> None:
        sim = ForceSimulation.from_graph(_graph([("a", "b")]), 1200, 800, seed=3)
        sim.run()

        xs = [n.x for n in sim.state.nodes]
        ys = [n.y for n in sim.state.nodes]
        self.assertAlmostEqual(sum(xs) / 2, 600, delta=25)
        self.assertAlmostEqual(sum(ys) / 2, 400, delta=25)

    def test_max_ticks_bounds_run(self) -> None:
        sim = ForceSimulation.from_graph(_graph([("a", "b")]), 1200, 800)

        self.assertEqual(sim.run(max_ticks=10), 10)
        self.assertTrue(sim.running)

    def test_restart_with_alpha_target_keeps_layout_live(self) -> None:
        sim = ForceSimulation.from_graph(_graph([("a", "b")]), 1200, 800, seed=1)
        sim.run()

        sim.set_alpha_target(0.3)
        sim.restart()
        sim.pin("a", 10.0, 10.0)
        sim.run(max_ticks=50)

        self.assertTrue(sim.running)
        self.assertGreater(sim.state.alpha, ALPHA_MIN)
        self.assertEqual((sim.state.node("a").x, sim.state.node("a").y), (10.0, 10.0))

        sim.release("a")
        sim.set_alpha_target(0.0)
        sim.run()
        self.assertFalse(sim.running)
        self.assertIsNone(sim.state.node("a").fx)


if __name__ == "__main__":
    unittest.main()
