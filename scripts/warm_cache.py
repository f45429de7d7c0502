from __future__ import annotations

import argparse
from blocksight.adapters.chain.alchemy_block_source import AlchemyBlockSource
from blocksight.adapters.storage.file_block_store import FileBlockStore
from blocksight.services.block_loader import BlockLoader


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--start", type=int, required=True, help="First block (inclusive)")
    parser.add_argument("--end", type=int, required=True, help="Last block (inclusive)")
    parser.add_argument("--cache-dir", default=None, help="Block cache folder")
    args = parser.parse_args()
    loader = BlockLoader(source=AlchemyBlockSource(), store=FileBlockStore(args.cache_dir))
    blocks = loader.resolve_range(args.start, args.end)
    print(f"Cached {len(blocks)} block(s)")


if __name__ == "__main__":
    main()
