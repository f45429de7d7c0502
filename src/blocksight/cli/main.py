from __future__ import annotations

import argparse
import datetime as dt
import sys
import time
from typing import List, Optional

from blocksight.config import settings
from blocksight.api.handlers import BlockApi
from blocksight.services.block_loader import BlockLoader
from blocksight.layout.view import GraphView
from blocksight.io.output_writer import write_graph_html, write_graph_json, write_graph_svg

from blocksight.adapters.chain.alchemy_block_source import AlchemyBlockSource
from blocksight.adapters.chain.static_block_source import StaticBlockSource
from blocksight.adapters.storage.file_block_store import FileBlockStore


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="blocksight", description="Ethereum block transfer graph")
    target = p.add_mutually_exclusive_group()
    target.add_argument("--block", type=int, help=f"Block number (default {settings.DEFAULT_BLOCK_NUMBER})")
    target.add_argument("--range", nargs=2, type=int, metavar=("START", "END"), help="Inclusive block range")
    p.add_argument("--out", default="out", help="Output folder")
    p.add_argument("--cache-dir", default=None, help="Block cache folder (default BLOCKSIGHT_CACHE_DIR or ./data)")
    p.add_argument("--use-static", metavar="FILE", help="Serve blocks from a JSON file instead of the provider (dev/testing)")
    p.add_argument("--svg", action="store_true", help="Write the settled layout as graph.svg")
    p.add_argument("--html", action="store_true", help="Write an interactive index.html alongside graph.json")
    p.add_argument("--select", metavar="ADDRESS", help="Print outgoing/incoming transactions for an address")
    p.add_argument("--max-ticks", type=int, default=None, help="Stop the layout after this many ticks")
    p.add_argument("--seed", type=int, default=None, help="Seed for layout jiggle")
    return p


def _ts() -> str:
    return dt.datetime.now().strftime("%H:%M:%S")


def _print_panel(view: GraphView) -> None:
    panel = view.panel
    if panel is None:
        return
    print(f"Address: {panel.address}")
    print(f"Outgoing ({len(panel.outgoing)} of {panel.outgoing_total}):")
    for e in panel.outgoing:
        print(f"  -> {e.short_counterparty}  tx {e.short_hash or '-'}  {e.tx_url or e.counterparty_url}")
    print(f"Incoming ({len(panel.incoming)} of {panel.incoming_total}):")
    for e in panel.incoming:
        print(f"  <- {e.short_counterparty}  tx {e.short_hash or '-'}  {e.tx_url or e.counterparty_url}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if args.max_ticks is not None and args.max_ticks < 0:
        print("--max-ticks must be non-negative", file=sys.stderr)
        return 2
    if args.block is not None and args.block < 0:
        print("--block must be a non-negative integer", file=sys.stderr)
        return 2
    if args.range and (min(args.range) < 0 or args.range[0] > args.range[1]):
        print("--range needs 0 <= START <= END", file=sys.stderr)
        return 2

    # Ports
    if args.use_static:
        try:
            source = StaticBlockSource.from_file(args.use_static)
        except (OSError, ValueError) as exc:
            print(f"Cannot read static blocks: {exc}", file=sys.stderr)
            return 2
        adapter_label = "StaticBlockSource (dev/testing)"
    else:
        source = AlchemyBlockSource()
        adapter_label = "AlchemyBlockSource"
    store = FileBlockStore(args.cache_dir)

    api = BlockApi(BlockLoader(source=source, store=store), single_block_hashes=True)
    alerts: List[str] = []
    view = GraphView(api=api, notify=alerts.append, seed=args.seed, live=False)
    print(f"Adapter: {adapter_label}")

    start_time = time.time()
    if args.range:
        start, end = args.range
        print(f"[{_ts()}] Loading blocks {start} - {end}")
        ok = view.fetch_range(start, end)
    else:
        n = settings.DEFAULT_BLOCK_NUMBER if args.block is None else args.block
        print(f"[{_ts()}] Loading block {n}")
        ok = view.fetch_single_block(n)

    for message in alerts:
        print(f"[{_ts()}] {message}", file=sys.stderr)
    if view.last_error is not None:
        return 1

    if not ok:
        print(f"[{_ts()}] {view.label}: no transactions to display")
        return 0

    ticks = view.settle(max_ticks=args.max_ticks)
    elapsed = time.time() - start_time
    print(
        f"[{_ts()}] Done in {elapsed:.1f}s • "
        f"{len(view.graph.nodes)} nodes • {len(view.graph.links)} links • {ticks} ticks"
    )

    if args.select:
        view.select(args.select)
        _print_panel(view)

    # Outputs
    print("Writing outputs...")
    graph_path = write_graph_json(view.graph, args.out, positions=view.positions(), label=view.label)
    print(f"Wrote: {graph_path}")
    if args.svg:
        view.redraw()
        print(f"Wrote: {write_graph_svg(view.frame, args.out)}")
    if args.html:
        print(f"Wrote: {write_graph_html(args.out)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
