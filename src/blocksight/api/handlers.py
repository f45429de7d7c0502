from __future__ import annotations

import json
from typing import Any, Dict, Tuple

from blocksight.config.logging import get_logger
from blocksight.core.errors import (
    BlockSightError,
    ConfigurationMissing,
    MalformedInput,
    NotFound,
    UpstreamRejected,
    UpstreamUnavailable,
)
from blocksight.io.schemas import error_body, success_body
from blocksight.services.block_loader import BlockLoader
from blocksight.services.link_extractor import filter_transactions, filter_transactions_range

logger = get_logger(__name__)

Response = Tuple[int, Dict[str, Any]]

# checked in order; subclasses before their bases
ERROR_STATUS = (
    (ConfigurationMissing, 500),
    (UpstreamUnavailable, 500),
    (UpstreamRejected, 400),
    (NotFound, 404),
    (MalformedInput, 400),
)


def status_for(exc: BaseException) -> int:
    for kind, status in ERROR_STATUS:
        if isinstance(exc, kind):
            return status
    return 500


def to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("bool is not a block number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        s = value.strip()
        try:
            return int(s)
        except ValueError:
            f = float(s)
            if f.is_integer():
                return int(f)
    raise ValueError(f"not an integer: {value!r}")


def parse_block_number(raw: Any) -> int:
    try:
        n = to_int(raw)
    except (TypeError, ValueError, OverflowError) as e:
        raise MalformedInput("Invalid block number.") from e
    if n < 0:
        raise MalformedInput("Invalid block number.")
    return n


def parse_block_range(payload: Any) -> Tuple[int, int]:
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise MalformedInput("Invalid JSON body.") from e
    if not isinstance(payload, dict):
        payload = {}

    raw_start = payload.get("start_block")
    raw_end = payload.get("end_block")
    # JSON numbers only; "12" is rejected here unlike the path parameter
    if any(isinstance(v, (str, bool)) or v is None for v in (raw_start, raw_end)):
        raise MalformedInput("start_block and end_block must be non-negative integers")
    try:
        start, end = to_int(raw_start), to_int(raw_end)
    except (TypeError, ValueError, OverflowError) as e:
        raise MalformedInput("start_block and end_block must be non-negative integers") from e
    if start < 0 or end < 0:
        raise MalformedInput("start_block and end_block must be non-negative integers")
    if start > end:
        raise MalformedInput("start_block must be less than or equal to end_block")
    return start, end


class BlockApi:
    """
    Endpoint-shaped entry points: validate input, run the pipeline, and map
    typed failures to (status, body). No server lives here.
    """

    def __init__(self, loader: BlockLoader, single_block_hashes: bool = False) -> None:
        self.loader = loader
        self.single_block_hashes = single_block_hashes

    def _error(self, exc: Exception, context: str) -> Response:
        if isinstance(exc, BlockSightError):
            return status_for(exc), error_body(str(exc))
        logger.exception("Unexpected error processing %s", context)
        return 500, error_body(f"Unexpected error: {exc}")

    def get_block(self, raw_block_number: Any) -> Response:
        try:
            n = parse_block_number(raw_block_number)
        except MalformedInput as e:
            return 400, error_body(str(e))

        try:
            data = self.loader.resolve(n)
            links = filter_transactions(data, include_hash=self.single_block_hashes)
        except Exception as e:
            return self._error(e, f"block {n}")
        return 200, success_body(links)

    def post_blocks(self, payload: Any) -> Response:
        try:
            start, end = parse_block_range(payload)
        except MalformedInput as e:
            return 400, error_body(str(e))

        try:
            blocks = self.loader.resolve_range(start, end)
            links = filter_transactions_range(blocks)
        except Exception as e:
            return self._error(e, f"block range {start}-{end}")
        return 200, success_body(links)
