"""Tests for the host wallet session connector."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from snapswap.errors import EntropySourceUnavailable
from snapswap.session import HostRequestError, JsonRpcHostProvider, SnapConnector, is_local_snap

SNAP_ID = "local:http://localhost:8080"


def _node_json(node, coin_type=60) -> dict:
    return {
        "coin_type": coin_type,
        "depth": 2,
        "index": node.index,
        "parentFingerprint": node.parent_fingerprint,
        "privateKey": "0x" + node.private_key.hex(),
        "chainCode": "0x" + node.chain_code.hex(),
    }


class TestSnapConnector:
    """Tests for SnapConnector wrappers."""

    def test_default_snap_id_from_settings(self):
        """Test snap ID falls back to settings."""
        connector = SnapConnector(AsyncMock())
        assert connector.snap_id == SNAP_ID

    @pytest.mark.asyncio
    async def test_get_snaps(self):
        """Test wallet_getSnaps is forwarded."""
        provider = AsyncMock()
        provider.request = AsyncMock(return_value={SNAP_ID: {"id": SNAP_ID, "version": "0.1.0"}})

        snaps = await SnapConnector(provider, SNAP_ID).get_snaps()

        assert SNAP_ID in snaps
        provider.request.assert_awaited_once_with("wallet_getSnaps")

    @pytest.mark.asyncio
    async def test_connect_snap(self):
        """Test wallet_requestSnaps carries snap ID and params."""
        provider = AsyncMock()
        provider.request = AsyncMock(return_value={})

        await SnapConnector(provider, SNAP_ID).connect_snap(params={"version": "0.1.0"})

        provider.request.assert_awaited_once_with(
            "wallet_requestSnaps", {SNAP_ID: {"version": "0.1.0"}}
        )

    @pytest.mark.asyncio
    async def test_get_snap_by_version(self):
        """Test snap lookup matches ID and optional version."""
        provider = AsyncMock()
        provider.request = AsyncMock(
            return_value={
                SNAP_ID: {"id": SNAP_ID, "version": "0.1.0"},
                "npm:other": {"id": "npm:other", "version": "0.1.0"},
            }
        )
        connector = SnapConnector(provider, SNAP_ID)

        assert (await connector.get_snap())["id"] == SNAP_ID
        assert (await connector.get_snap("0.1.0"))["version"] == "0.1.0"
        assert await connector.get_snap("9.9.9") is None

    @pytest.mark.asyncio
    async def test_get_snap_swallows_errors(self):
        """Test lookup failure reads as not installed."""
        provider = AsyncMock()
        provider.request = AsyncMock(side_effect=HostRequestError("wallet_getSnaps", "boom"))

        assert await SnapConnector(provider, SNAP_ID).get_snap() is None

    @pytest.mark.asyncio
    async def test_get_bip44_entropy(self, coin_type_node):
        """Test entropy response is parsed into a coin type node."""
        provider = AsyncMock()
        provider.request = AsyncMock(return_value=_node_json(coin_type_node))

        node = await SnapConnector(provider, SNAP_ID).get_bip44_entropy()

        assert node.private_key == coin_type_node.private_key
        provider.request.assert_awaited_once_with("snap_getBip44Entropy")

    @pytest.mark.asyncio
    async def test_entropy_denied(self):
        """Test a refused request raises EntropySourceUnavailable once."""
        provider = AsyncMock()
        provider.request = AsyncMock(
            side_effect=HostRequestError("snap_getBip44Entropy", "User rejected the request.", 4001)
        )

        with pytest.raises(EntropySourceUnavailable):
            await SnapConnector(provider, SNAP_ID).get_bip44_entropy()

        assert provider.request.await_count == 1

    @pytest.mark.asyncio
    async def test_entropy_empty(self):
        """Test an empty answer is treated as unavailable."""
        provider = AsyncMock()
        provider.request = AsyncMock(return_value=None)

        with pytest.raises(EntropySourceUnavailable):
            await SnapConnector(provider, SNAP_ID).get_bip44_entropy()

    @pytest.mark.asyncio
    async def test_entropy_malformed(self):
        """Test a malformed node is treated as unavailable."""
        provider = AsyncMock()
        provider.request = AsyncMock(return_value={"coin_type": 60})

        with pytest.raises(EntropySourceUnavailable):
            await SnapConnector(provider, SNAP_ID).get_bip44_entropy()

    @pytest.mark.asyncio
    async def test_entropy_wrong_coin_type(self, coin_type_node):
        """Test a node for another coin is rejected."""
        provider = AsyncMock()
        provider.request = AsyncMock(return_value=_node_json(coin_type_node, coin_type=0))

        with pytest.raises(EntropySourceUnavailable):
            await SnapConnector(provider, SNAP_ID).get_bip44_entropy()

    def test_is_local_snap(self):
        """Test local snap detection."""
        assert is_local_snap("local:http://localhost:8080")
        assert not is_local_snap("npm:@example/snap")


class TestJsonRpcHostProvider:
    """Tests for the HTTP JSON-RPC host provider."""

    @pytest.mark.asyncio
    async def test_request_result(self):
        """Test payload shape and result extraction."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {"ok": True}})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = JsonRpcHostProvider("http://wallet.test", client=client)
            result = await provider.request("wallet_getSnaps")

        assert result == {"ok": True}
        assert seen[0]["method"] == "wallet_getSnaps"
        assert seen[0]["jsonrpc"] == "2.0"
        assert "params" not in seen[0]

    @pytest.mark.asyncio
    async def test_request_error_object(self):
        """Test JSON-RPC errors raise HostRequestError with the code."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": 1, "error": {"code": 4001, "message": "User rejected"}},
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = JsonRpcHostProvider("http://wallet.test", client=client)
            with pytest.raises(HostRequestError) as exc_info:
                await provider.request("snap_getBip44Entropy")

        assert exc_info.value.code == 4001
        assert exc_info.value.method == "snap_getBip44Entropy"

    @pytest.mark.asyncio
    async def test_request_http_failure(self):
        """Test HTTP errors raise HostRequestError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = JsonRpcHostProvider("http://wallet.test", client=client)
            with pytest.raises(HostRequestError):
                await provider.request("wallet_getSnaps")

    @pytest.mark.asyncio
    async def test_request_non_object_body(self):
        """Test a JSON body that is not an object raises HostRequestError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"jsonrpc": "2.0", "id": 1, "result": None}])

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = JsonRpcHostProvider("http://wallet.test", client=client)
            with pytest.raises(HostRequestError):
                await provider.request("wallet_getSnaps")

    @pytest.mark.asyncio
    async def test_entropy_through_http(self, coin_type_node):
        """Test the connector works end to end over JSON-RPC."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": _node_json(coin_type_node)})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            connector = SnapConnector(JsonRpcHostProvider("http://wallet.test", client=client), SNAP_ID)
            node = await connector.get_bip44_entropy()

        assert node.chain_code == coin_type_node.chain_code
