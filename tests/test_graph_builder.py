import json
import unittest

from blocksight.core.dto import TransferEdge
from blocksight.core.errors import EmptyGraph, MalformedInput
from blocksight.core.models import GraphLink, GraphNode
from blocksight.io.schemas import edges_to_payload
from blocksight.services.graph_builder import build_graph, normalize_links
from blocksight.services.link_extractor import extract_edges


class BuildGraphTests(unittest.TestCase):
    def test_single_transaction_block(self) -> None:
        block = {"result": {"number": hex(24041818), "transactions": [
            {"from": "0xA", "to": "0xB", "hash": "0x1111"},
        ]}}

        edges = extract_edges(block)
        self.assertEqual(edges, [TransferEdge("0xA", "0xB", "0x1111")])

        graph = build_graph(edges)

        self.assertEqual(
            graph.nodes,
            {"0xA": GraphNode("0xA", "from"), "0xB": GraphNode("0xB", "to")},
        )
        self.assertEqual(graph.links, [GraphLink("0xA", "0xB", "0x1111")])

    def test_role_is_fixed_at_first_sighting(self) -> None:
        graph = build_graph([
            {"from": "0xA", "to": "0xB"},
            {"from": "0xB", "to": "0xA"},       # B sends later, stays "to"
            {"from": "0xC", "to": "0xC"},       # self transfer: sender wins
        ])

        self.assertEqual(graph.nodes["0xA"].role, "from")
        self.assertEqual(graph.nodes["0xB"].role, "to")
        self.assertEqual(graph.nodes["0xC"].role, "from")

    def test_parallel_links_are_kept(self) -> None:
        graph = build_graph([
            {"from": "0xA", "to": "0xB", "hash": "0x1"},
            {"from": "0xA", "to": "0xB", "hash": "0x2"},
            {"from": "0xA", "to": "0xB", "hash": "0x3"},
        ])

        self.assertEqual(len(graph.nodes), 2)
        self.assertEqual([l.tx_hash for l in graph.links], ["0x1", "0x2", "0x3"])

    def test_counts_match_distinct_addresses_and_edges(self) -> None:
        edges = [
            TransferEdge("0xA", "0xB"),
            TransferEdge("0xB", "0xC"),
            TransferEdge("0xc", "0xA"),         # case-distinct from 0xC
            TransferEdge("0xA", "0xB"),
        ]

        graph = build_graph(edges)

        self.assertEqual(len(graph.nodes), 4)
        self.assertEqual(len(graph.links), len(edges))

    def test_node_order_follows_first_appearance(self) -> None:
        graph = build_graph([{"from": "0xB", "to": "0xA"}, {"from": "0xC", "to": "0xB"}])

        self.assertEqual(list(graph.nodes), ["0xB", "0xA", "0xC"])

    def test_legacy_shape_matches_native_shape(self) -> None:
        edges = [
            TransferEdge("0xA", "0xB", "0x1"),
            TransferEdge("0xB", "0xC", "0x2"),
            TransferEdge("0xA", "0xB", "0x3"),
        ]
        native = build_graph(edges_to_payload(edges, shape="native"))
        legacy = build_graph(edges_to_payload(edges, shape="legacy"))

        self.assertEqual(len(native.nodes), len(legacy.nodes))
        self.assertEqual(len(native.links), len(legacy.links))
        self.assertEqual(native.nodes, legacy.nodes)

    def test_json_string_payload(self) -> None:
        graph = build_graph(json.dumps([{"0xA": "0xB"}, {"from": "0xB", "to": "0xC", "hash": "0x9"}]))

        self.assertEqual(list(graph.nodes), ["0xA", "0xB", "0xC"])
        self.assertEqual(graph.links[1].tx_hash, "0x9")

    def test_empty_input_signals_empty_graph(self) -> None:
        with self.assertRaises(EmptyGraph):
            build_graph([])
        with self.assertRaises(EmptyGraph):
            build_graph("[]")
        with self.assertRaises(EmptyGraph):
            build_graph([{"from": "0xA", "to": ""}, {"0xA": None}])


class NormalizeLinksTests(unittest.TestCase):
    def test_mixed_shapes(self) -> None:
        edges = normalize_links([
            {"0xA": "0xB"},
            {"from": "0xC", "to": "0xD", "hash": "0x1"},
            TransferEdge("0xE", "0xF"),
        ])

        self.assertEqual(
            edges,
            [
                TransferEdge("0xA", "0xB"),
                TransferEdge("0xC", "0xD", "0x1"),
                TransferEdge("0xE", "0xF"),
            ],
        )

    def test_native_entry_with_missing_endpoint_is_dropped(self) -> None:
        edges = normalize_links([
            {"from": "0xA", "hash": "0x1"},
            {"to": "0xB"},
            {"hash": "0x2"},
            {"from": "0xC", "to": "0xD"},
        ])

        self.assertEqual(edges, [TransferEdge("0xC", "0xD")])

    def test_none_is_empty(self) -> None:
        self.assertEqual(normalize_links(None), [])

    def test_rejects_unsupported_payloads(self) -> None:
        with self.assertRaises(MalformedInput):
            normalize_links("{not json")
        with self.assertRaises(MalformedInput):
            normalize_links({"0xA": "0xB"})
        with self.assertRaises(MalformedInput):
            normalize_links([["0xA", "0xB"]])


if __name__ == "__main__":
    unittest.main()
