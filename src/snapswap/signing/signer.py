"""Private-key signer derived from host wallet entropy.

Derivation flow:
1. Host wallet hands out the BIP44 coin type node (m/44'/60')
2. Bind an address key deriver to the node
3. Derive address index 0
4. Truncate the key material to the 32-byte private key
5. Build an eth-account signer bound to the provider

Step 4 is mandatory. The deriver may return private key + chain code in one
64-byte buffer, and key constructors that accept the whole buffer silently
produce a different key instead of failing.
"""

import logging
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from snapswap.contracts.address import Address
from snapswap.hdwallet.deriver import get_bip44_address_key_deriver
from snapswap.hdwallet.node import CoinTypeNode

logger = logging.getLogger(__name__)

PRIVATE_KEY_SIZE = 32


class PrivateKey(bytes):
    """Exactly 32 bytes of secp256k1 private key."""

    def __new__(cls, value: bytes) -> "PrivateKey":
        if len(value) != PRIVATE_KEY_SIZE:
            raise ValueError(
                f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(value)}. "
                "Use PrivateKey.from_key_material for deriver output"
            )
        return super().__new__(cls, value)

    @classmethod
    def from_key_material(cls, material: bytes) -> "PrivateKey":
        """Take the private key from derived key material.

        Material is either the bare key (32 bytes) or key followed by chain
        code (64 bytes). Only the first 32 bytes are the key.
        """
        if len(material) < PRIVATE_KEY_SIZE:
            raise ValueError(f"Key material too short: {len(material)} bytes")
        return cls(bytes(material[:PRIVATE_KEY_SIZE]))

    def __repr__(self) -> str:
        return "PrivateKey(***)"


class Signer:
    """Private-key identity bound to a chain provider.

    Signs locally and broadcasts raw transactions, so no wallet prompt is
    involved.
    """

    def __init__(self, account: LocalAccount, w3: Web3):
        self.account = account
        self.w3 = w3

    @property
    def address(self) -> Address:
        return Address(self.account.address)

    async def send_transaction(self, call, gas: Optional[int] = None) -> str:
        """Build, sign and broadcast a contract call.

        Args:
            call: Bound contract function (``contract.functions.name(*args)``)
            gas: Gas limit; estimated by the node when omitted

        Returns:
            Transaction hash (0x-prefixed hex)

        Raises:
            ContractLogicError: If the node rejects the call during estimation
        """
        address = self.account.address
        params = {
            "from": address,
            "nonce": self.w3.eth.get_transaction_count(address, "pending"),
            "chainId": self.w3.eth.chain_id,
        }
        if gas is not None:
            params["gas"] = gas

        tx = call.build_transaction(params)

        if "gasPrice" not in tx and "maxFeePerGas" not in tx:
            tx["gasPrice"] = self.w3.eth.gas_price

        signed_tx = self.account.sign_transaction(tx)

        # eth-account renamed rawTransaction to raw_transaction
        raw_tx = getattr(signed_tx, "raw_transaction", None) or signed_tx.rawTransaction
        tx_hash = self.w3.eth.send_raw_transaction(raw_tx)
        tx_hash_hex = Web3.to_hex(tx_hash)

        logger.info(f"Broadcast {call.fn_name} from {address}: {tx_hash_hex} (nonce {tx['nonce']})")
        return tx_hash_hex

    def __repr__(self) -> str:
        return f"Signer(address={self.account.address})"


def derive_signer(node: CoinTypeNode, w3: Web3, index: int = 0) -> Signer:
    """Derive the signer for an address index of a coin type node.

    Deterministic for a given node and index. No network calls.

    Args:
        node: Coin type node from the host wallet
        w3: Provider the signer broadcasts through
        index: Address index (0 = the wallet's main account)

    Returns:
        Signer bound to w3
    """
    derive = get_bip44_address_key_deriver(node)
    private_key = PrivateKey.from_key_material(derive(index))

    account = Account.from_key(private_key)
    logger.info(f"Derived signer {account.address} at {node.path}/0'/0/{index}")

    return Signer(account, w3)


async def request_signer(connector, w3: Web3, index: int = 0) -> Signer:
    """Ask the host wallet for entropy and derive a fresh signer.

    Raises:
        EntropySourceUnavailable: If the host fails or refuses the request
    """
    node = await connector.get_bip44_entropy()
    return derive_signer(node, w3, index)
