"""HD wallet module for deriving keys from host-supplied entropy."""

from snapswap.hdwallet.deriver import AddressKeyDeriver, get_bip44_address_key_deriver
from snapswap.hdwallet.node import CoinTypeNode

__all__ = [
    "AddressKeyDeriver",
    "CoinTypeNode",
    "get_bip44_address_key_deriver",
]
