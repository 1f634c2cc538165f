"""Host wallet session connector.

Thin wrappers over the host provider's ``request(method, params)`` interface:
snap discovery, snap installation and BIP44 entropy retrieval.
"""

import itertools
import logging
from typing import Any, Optional, Protocol

import httpx

from snapswap.chains import GOERLI
from snapswap.config import get_settings
from snapswap.errors import EntropySourceUnavailable
from snapswap.hdwallet.node import CoinTypeNode

logger = logging.getLogger(__name__)


class HostRequestError(Exception):
    """Host provider returned an error for a request."""

    def __init__(self, method: str, message: str, code: Optional[int] = None):
        self.method = method
        self.code = code
        super().__init__(f"{method} failed: {message}" + (f" (code {code})" if code is not None else ""))


class HostProvider(Protocol):
    """Anything that can forward a request to the host wallet."""

    async def request(self, method: str, params: Optional[Any] = None) -> Any:
        ...


class JsonRpcHostProvider:
    """Host provider speaking JSON-RPC over HTTP."""

    def __init__(self, url: str, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self.timeout = timeout
        self._client = client
        self._ids = itertools.count(1)

    async def request(self, method: str, params: Optional[Any] = None) -> Any:
        """Send one JSON-RPC request and return its result.

        Raises:
            HostRequestError: On transport failure or a JSON-RPC error object
        """
        payload = {"jsonrpc": "2.0", "method": method, "id": next(self._ids)}
        if params is not None:
            payload["params"] = params

        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise HostRequestError(method, str(e)) from e

        if not isinstance(data, dict):
            raise HostRequestError(method, f"expected a JSON-RPC object, got {type(data).__name__}")

        if "error" in data:
            error = data["error"] or {}
            raise HostRequestError(method, error.get("message", "unknown error"), error.get("code"))

        return data.get("result")


class SnapConnector:
    """Session with the host wallet for one snap.

    Example:
        connector = SnapConnector(JsonRpcHostProvider(settings.host_rpc_url))
        await connector.connect_snap()
        node = await connector.get_bip44_entropy()
    """

    def __init__(self, provider: HostProvider, snap_id: Optional[str] = None):
        self.provider = provider
        self.snap_id = snap_id or get_settings().snap_origin

    async def get_snaps(self) -> dict[str, dict]:
        """Get the snaps installed in the host wallet."""
        return await self.provider.request("wallet_getSnaps") or {}

    async def connect_snap(self, snap_id: Optional[str] = None, params: Optional[dict] = None) -> Any:
        """Ask the host wallet to install/connect a snap.

        Args:
            snap_id: Snap to connect (defaults to this connector's snap)
            params: Install parameters, e.g. {"version": "1.0.0"}
        """
        return await self.provider.request(
            "wallet_requestSnaps",
            {snap_id or self.snap_id: params or {}},
        )

    async def get_snap(self, version: Optional[str] = None) -> Optional[dict]:
        """Find this connector's snap among the installed ones.

        Returns:
            The snap entry, or None if not installed or the lookup failed
        """
        try:
            snaps = await self.get_snaps()
        except Exception as e:
            logger.warning(f"Failed to obtain installed snaps: {e}")
            return None

        for snap in snaps.values():
            if snap.get("id") == self.snap_id and (not version or snap.get("version") == version):
                return snap
        return None

    async def get_bip44_entropy(self) -> CoinTypeNode:
        """Request the Ethereum BIP44 coin type node.

        Raises:
            EntropySourceUnavailable: If the host fails, refuses, or answers
                with something that is not an Ethereum coin type node
        """
        try:
            result = await self.provider.request("snap_getBip44Entropy")
        except Exception as e:
            logger.error(f"Entropy request failed: {e}")
            raise EntropySourceUnavailable(f"Host wallet did not supply entropy: {e}") from e

        if not isinstance(result, dict):
            raise EntropySourceUnavailable("Host wallet returned no entropy")

        try:
            node = CoinTypeNode.from_json(result)
        except ValueError as e:
            raise EntropySourceUnavailable(f"Host wallet returned a malformed node: {e}") from e

        if node.coin_type != GOERLI.coin_type:
            raise EntropySourceUnavailable(
                f"Expected coin type {GOERLI.coin_type}, got {node.coin_type}"
            )
        return node


def is_local_snap(snap_id: str) -> bool:
    """Check whether a snap ID refers to a locally served snap."""
    return snap_id.startswith("local:")
