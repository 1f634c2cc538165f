"""Pytest configuration and fixtures."""

import os
from typing import Optional

import pytest
from eth_utils import keccak

# Set test environment
os.environ["SNAP_ORIGIN"] = "local:http://localhost:8080"
os.environ["POLL_INTERVAL"] = "0.01"

from snapswap.config import get_settings
from snapswap.contracts.address import Address
from snapswap.contracts.registry import default_registry
from snapswap.hdwallet.node import CoinTypeNode
from snapswap.signing.signer import derive_signer
from snapswap.swap.plan import build_plan

TEST_MNEMONIC = "test test test test test test test test test test test junk"
TEST_ADDRESS_0 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
TEST_PRIVATE_KEY_0 = "ac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

WETH = "0xb4fbf271143f4fbf7b91a5ded31805e42b2208d6"
LINK = "0x63bfb2118771bd0da7a6936667a7bb705a06c1ba"

SELECTORS = {
    "approve": "0x095ea7b3",
    "swapExactTokensForTokens": "0x38ed1739",
    "getAmountsOut": "0xd06ca61f",
}


class FakeCall:
    """Bound contract function that records what it was asked to build."""

    def __init__(self, contract: "FakeContract", fn_name: str, args: tuple):
        self.contract = contract
        self.fn_name = fn_name
        self.args = args

    def build_transaction(self, params: dict) -> dict:
        chain = self.contract.chain
        chain.events.append(("build", self.fn_name))

        error = chain.build_errors.get(self.fn_name)
        if error is not None:
            raise error

        chain.built.append((self.fn_name, self.args, self.contract.address))
        chain.pending_fn = self.fn_name

        tx = dict(params)
        tx.setdefault("gas", 200_000)
        tx["to"] = self.contract.address
        tx["value"] = 0
        tx["data"] = SELECTORS.get(self.fn_name, "0x")
        return tx

    def call(self):
        chain = self.contract.chain
        chain.events.append(("call", self.fn_name))
        result = chain.call_results[self.fn_name]
        if isinstance(result, Exception):
            raise result
        return result


class FakeFunctions:
    def __init__(self, contract: "FakeContract"):
        self._contract = contract

    def __getattr__(self, name: str):
        return lambda *args: FakeCall(self._contract, name, args)


class FakeContract:
    def __init__(self, chain: "FakeEth", address: str, abi: list):
        self.chain = chain
        self.address = address
        self.abi = abi
        self.functions = FakeFunctions(self)


class FakeEth:
    """In-memory stand-in for ``w3.eth`` that records call order.

    Attributes:
        events: Ordered log of ("build" | "send" | "receipt" | "call", fn_name)
        build_errors: fn_name -> exception raised when building (gas estimation revert)
        statuses: fn_name -> receipt status (default 1)
        pending_polls: fn_name -> number of polls that return no receipt
        call_results: fn_name -> value returned by a read call, or an exception to raise
        replay_error: exception raised when replaying a mined transaction
    """

    chain_id = 5
    gas_price = 1_000_000_000

    def __init__(self):
        self.events: list[tuple[str, str]] = []
        self.built: list[tuple[str, tuple, str]] = []
        self.sent: list[bytes] = []
        self.build_errors: dict[str, Exception] = {}
        self.statuses: dict[str, int] = {}
        self.pending_polls: dict[str, int] = {}
        self.call_results: dict[str, object] = {}
        self.replay_error: Optional[Exception] = None
        self.pending_fn: Optional[str] = None
        self._nonce = 0
        self._tx_fn: dict[bytes, str] = {}
        self._block = 100

    def contract(self, address: str, abi: list) -> FakeContract:
        return FakeContract(self, address, abi)

    def get_transaction_count(self, address: str, block_identifier: str = "latest") -> int:
        return self._nonce

    def send_raw_transaction(self, raw: bytes) -> bytes:
        fn_name = self.pending_fn
        self.events.append(("send", fn_name))
        self.sent.append(bytes(raw))
        tx_hash = keccak(bytes(raw))
        self._tx_fn[tx_hash] = fn_name
        self._nonce += 1
        return tx_hash

    def _fn_for(self, tx_hash) -> tuple[str, bytes]:
        key = bytes.fromhex(tx_hash[2:]) if isinstance(tx_hash, str) else bytes(tx_hash)
        return self._tx_fn[key], key

    def get_transaction_receipt(self, tx_hash):
        fn_name, key = self._fn_for(tx_hash)
        self.events.append(("receipt", fn_name))

        remaining = self.pending_polls.get(fn_name, 0)
        if remaining:
            self.pending_polls[fn_name] = remaining - 1
            return None

        self._block += 1
        return {
            "transactionHash": key,
            "blockNumber": self._block,
            "status": self.statuses.get(fn_name, 1),
        }

    def get_transaction(self, tx_hash):
        fn_name, key = self._fn_for(tx_hash)
        return {"from": TEST_ADDRESS_0, "to": WETH, "input": SELECTORS.get(fn_name, "0x"), "value": 0}

    def call(self, tx: dict, block_identifier=None):
        if self.replay_error is not None:
            raise self.replay_error
        return b""

    def fn_events(self, kind: str) -> list[str]:
        return [fn for k, fn in self.events if k == kind]


class FakeWeb3:
    def __init__(self):
        self.eth = FakeEth()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached; make each test read the environment afresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def coin_type_node() -> CoinTypeNode:
    """Coin type node for the well-known test mnemonic."""
    return CoinTypeNode.from_mnemonic(TEST_MNEMONIC)


@pytest.fixture
def fake_w3() -> FakeWeb3:
    return FakeWeb3()


@pytest.fixture
def signer(coin_type_node, fake_w3):
    return derive_signer(coin_type_node, fake_w3)


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def plan():
    return build_plan(Address(WETH), Address(LINK), 1, now=1_700_000_000)
