"""BIP44 address key deriver.

Derivation path below the coin type node: account'/change/index
(m/44'/60'/0'/0/index for the first Ethereum account).

The host wallet's published key-tree library returns the derived private key
and chain code concatenated in one 64-byte buffer. ``legacy=True`` reproduces
that shape so callers are forced to handle it; see
``snapswap.signing.signer.PrivateKey.from_key_material``.
"""

import logging
from typing import Callable

from bip_utils import Bip32KeyData, Bip32Secp256k1

from snapswap.hdwallet.node import CoinTypeNode

logger = logging.getLogger(__name__)

AddressKeyDeriver = Callable[[int], bytes]


def _node_context(node: CoinTypeNode) -> Bip32Secp256k1:
    """Rebuild the BIP32 context of a coin type node."""
    key_data = Bip32KeyData(
        depth=node.depth,
        index=node.index,
        chain_code=node.chain_code,
        parent_fprint=node.parent_fingerprint.to_bytes(4, "big"),
    )
    return Bip32Secp256k1.FromPrivateKey(node.private_key, key_data)


def get_bip44_address_key_deriver(
    node: CoinTypeNode,
    account: int = 0,
    change: int = 0,
    legacy: bool = True,
) -> AddressKeyDeriver:
    """Bind an address key deriver to a coin type node.

    Args:
        node: Coin type node from the host wallet
        account: Hardened account index
        change: 0 for receiving keys, 1 for change keys
        legacy: Return private key + chain code (64 bytes) instead of
            the bare private key (32 bytes)

    Returns:
        Function mapping an address index to derived key material
    """
    if account < 0 or change not in (0, 1):
        raise ValueError(f"Invalid account/change: {account}/{change}")

    ctx = _node_context(node)
    account_ctx = ctx.DerivePath(f"{account}'/{change}")

    def derive(index: int) -> bytes:
        if index < 0:
            raise ValueError(f"Address index must be non-negative, got {index}")

        child = account_ctx.ChildKey(index)
        private_key = child.PrivateKey().Raw().ToBytes()

        if legacy:
            return private_key + child.ChainCode().ToBytes()
        return private_key

    logger.debug(f"Bound address key deriver to {node.path}/{account}'/{change}")
    return derive
