import unittest
from unittest.mock import MagicMock

import requests

from blocksight.adapters.chain.alchemy_block_source import AlchemyBlockSource
from blocksight.core.errors import (
    ConfigurationMissing,
    NotFound,
    UpstreamRejected,
    UpstreamUnavailable,
)


def _response(body=None, status=200, reason="OK"):
    resp = MagicMock()
    resp.status_code = status
    resp.reason = reason
    resp.ok = 200 <= status < 300
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


class AlchemyBlockSourceTests(unittest.TestCase):
    def _source(self, response=None, side_effect=None, api_key="test-key"):
        session = MagicMock(spec=requests.Session)
        if side_effect is not None:
            session.post.side_effect = side_effect
        else:
            session.post.return_value = response
        source = AlchemyBlockSource(
            api_key=api_key,
            base_url="https://rpc.test/v2/",
            session=session,
        )
        return source, session

    def test_request_shape(self) -> None:
        body = {"jsonrpc": "2.0", "id": 1, "result": {"transactions": []}}
        source, session = self._source(_response(body))

        self.assertEqual(source.fetch_block(255), body)

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        self.assertEqual(args[0], "https://rpc.test/v2/test-key")
        self.assertEqual(
            kwargs["json"],
            {
                "jsonrpc": "2.0",
                "method": "eth_getBlockByNumber",
                "params": ["0xff", True],
                "id": 1,
            },
        )

    def test_missing_api_key_fails_before_network(self) -> None:
        source, session = self._source(_response({}), api_key="")

        with self.assertRaises(ConfigurationMissing):
            source.fetch_block(1)
        session.post.assert_not_called()

    def test_non_2xx_is_upstream_unavailable(self) -> None:
        source, _ = self._source(_response({}, status=503, reason="Service Unavailable"))

        with self.assertRaises(UpstreamUnavailable) as ctx:
            source.fetch_block(1)
        self.assertIn("503 Service Unavailable", str(ctx.exception))

    def test_connection_error_is_upstream_unavailable(self) -> None:
        source, session = self._source(side_effect=requests.ConnectionError("connection refused"))

        with self.assertRaises(UpstreamUnavailable) as ctx:
            source.fetch_block(1)
        self.assertIn("connection refused", str(ctx.exception))
        self.assertEqual(session.post.call_count, 1)

    def test_undecodable_body_is_upstream_unavailable(self) -> None:
        source, _ = self._source(_response(ValueError("Expecting value")))

        with self.assertRaises(UpstreamUnavailable):
            source.fetch_block(1)

    def test_error_payload_is_upstream_rejected(self) -> None:
        source, _ = self._source(_response({"error": {"message": "block not found"}}))

        with self.assertRaises(UpstreamRejected) as ctx:
            source.fetch_block(1)
        self.assertIn("block not found", str(ctx.exception))

    def test_error_payload_without_message(self) -> None:
        source, _ = self._source(_response({"error": {"code": -32000}}))

        with self.assertRaises(UpstreamRejected) as ctx:
            source.fetch_block(1)
        self.assertIn("Unknown error", str(ctx.exception))

    def test_empty_error_object_is_upstream_rejected(self) -> None:
        source, _ = self._source(_response({"jsonrpc": "2.0", "id": 1, "error": {}}))

        with self.assertRaises(UpstreamRejected) as ctx:
            source.fetch_block(5)
        self.assertEqual(str(ctx.exception), "Ethereum API error: Unknown error")

    def test_empty_error_object_wins_over_result(self) -> None:
        body = {"jsonrpc": "2.0", "id": 1, "error": {}, "result": {"transactions": []}}
        source, _ = self._source(_response(body))

        with self.assertRaises(UpstreamRejected):
            source.fetch_block(5)

    def test_null_error_is_ignored(self) -> None:
        body = {"jsonrpc": "2.0", "id": 1, "error": None, "result": {"transactions": []}}
        source, _ = self._source(_response(body))

        self.assertEqual(source.fetch_block(5), body)

    def test_null_result_is_not_found(self) -> None:
        source, _ = self._source(_response({"jsonrpc": "2.0", "id": 1, "result": None}))

        with self.assertRaises(NotFound) as ctx:
            source.fetch_block(99999999)
        self.assertIn("99999999", str(ctx.exception))

    def test_error_checked_before_result(self) -> None:
        source, _ = self._source(_response({"error": {"message": "bad"}, "result": None}))

        with self.assertRaises(UpstreamRejected):
            source.fetch_block(1)


if __name__ == "__main__":
    unittest.main()
