from typing import Any, Dict, Optional
import requests

from blocksight.config.settings import (
    ALCHEMY_API_KEY,
    ALCHEMY_BASE_URL,
    RPC_TIMEOUT_SEC,
)

from blocksight.config.logging import get_logger
from blocksight.core.dto import BlockRecord
from blocksight.core.errors import (
    ConfigurationMissing,
    NotFound,
    UpstreamRejected,
    UpstreamUnavailable,
)
from blocksight.ports.block_source_port import BlockSourcePort

logger = get_logger(__name__)


class AlchemyBlockSource(BlockSourcePort):

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = ALCHEMY_BASE_URL,
        timeout_sec: float = RPC_TIMEOUT_SEC,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = ALCHEMY_API_KEY if api_key is None else api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_sec
        self._session = session or requests.Session()

    # ---------- internal ----------

    def _rpc_url(self) -> str:
        if not self._api_key:
            raise ConfigurationMissing("ALCHEMY_API_KEY environment variable is required")
        return f"{self._base_url}/{self._api_key}"

    def _call(self, method: str, params: list) -> Dict[str, Any]:
        url = self._rpc_url()
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": 1,
        }

        try:
            resp = self._session.post(url, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            raise UpstreamUnavailable(f"Network error: {e}") from e

        if not resp.ok:
            raise UpstreamUnavailable(f"Network error: {resp.status_code} {resp.reason}")

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamUnavailable(f"Network error: {e}") from e

        return data if isinstance(data, dict) else {}

    @staticmethod
    def _error_message(err: Any) -> str:
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        return "Unknown error"

    # ---------- port methods ----------

    def fetch_block(self, block_number: int) -> BlockRecord:
        logger.info("Fetching block %d from provider", block_number)
        data = self._call("eth_getBlockByNumber", [hex(block_number), True])

        if data.get("error") is not None:
            raise UpstreamRejected(f"Ethereum API error: {self._error_message(data['error'])}")

        if data.get("result") is None:
            raise NotFound(
                f"Block {block_number} not found. Block may not exist yet or is invalid."
            )

        return data
