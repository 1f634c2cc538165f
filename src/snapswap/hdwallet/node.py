"""BIP44 coin-type node handed out by the host wallet.

The host answers ``snap_getBip44Entropy`` with the node at ``m/44'/coin_type'``.
Everything below that level (account, change, address index) is derived
locally from the node's private key and chain code.
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Optional

BIP44_PURPOSE = 44
HARDENED_OFFSET = 0x80000000
COIN_TYPE_DEPTH = 2


def _hex_to_bytes(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


@dataclass(frozen=True)
class CoinTypeNode:
    """Immutable BIP44 node at depth 2 (``m/44'/coin_type'``).

    Attributes:
        coin_type: SLIP-44 coin type (60 for Ethereum)
        private_key: 32-byte node private key
        chain_code: 32-byte BIP32 chain code
        public_key: Compressed or uncompressed public key, if supplied
        depth: Depth in the key tree (always 2)
        index: Hardened child index of the node
        parent_fingerprint: Fingerprint of the purpose node
    """

    coin_type: int
    private_key: bytes = field(repr=False)
    chain_code: bytes = field(repr=False)
    public_key: Optional[bytes] = None
    depth: int = COIN_TYPE_DEPTH
    index: Optional[int] = None
    parent_fingerprint: int = 0

    def __post_init__(self):
        if len(self.private_key) != 32:
            raise ValueError(f"Node private key must be 32 bytes, got {len(self.private_key)}")
        if len(self.chain_code) != 32:
            raise ValueError(f"Node chain code must be 32 bytes, got {len(self.chain_code)}")
        if self.depth != COIN_TYPE_DEPTH:
            raise ValueError(f"Expected a coin type node (depth {COIN_TYPE_DEPTH}), got depth {self.depth}")
        if self.index is None:
            object.__setattr__(self, "index", HARDENED_OFFSET + self.coin_type)

    @property
    def path(self) -> str:
        return f"m/{BIP44_PURPOSE}'/{self.coin_type}'"

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "CoinTypeNode":
        """Parse the host wallet's JSON representation.

        Accepts the current shape (hex ``privateKey`` and ``chainCode``) and
        the older one with a single base64 ``key`` holding both.

        Raises:
            ValueError: If required fields are missing or malformed
        """
        try:
            coin_type = int(data.get("coin_type", data.get("coinType")))

            if "privateKey" in data:
                private_key = _hex_to_bytes(data["privateKey"])
                chain_code = _hex_to_bytes(data["chainCode"])
            else:
                raw = base64.b64decode(data["key"])
                private_key, chain_code = raw[:32], raw[32:]

            public_key = _hex_to_bytes(data["publicKey"]) if data.get("publicKey") else None

            return cls(
                coin_type=coin_type,
                private_key=private_key,
                chain_code=chain_code,
                public_key=public_key,
                depth=int(data.get("depth", COIN_TYPE_DEPTH)),
                index=int(data["index"]) if data.get("index") is not None else None,
                parent_fingerprint=int(data.get("parentFingerprint", 0)),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed BIP44 node: {e}") from e

    @classmethod
    def from_mnemonic(cls, mnemonic: str, coin_type: int = 60, passphrase: str = "") -> "CoinTypeNode":
        """Build the coin type node from a BIP39 mnemonic.

        Produces the same node the host wallet would return for that mnemonic.
        """
        from bip_utils import Bip32Secp256k1, Bip39SeedGenerator

        seed = Bip39SeedGenerator(mnemonic).Generate(passphrase)
        ctx = Bip32Secp256k1.FromSeed(seed).DerivePath(f"{BIP44_PURPOSE}'/{coin_type}'")

        return cls(
            coin_type=coin_type,
            private_key=ctx.PrivateKey().Raw().ToBytes(),
            chain_code=ctx.ChainCode().ToBytes(),
            public_key=ctx.PublicKey().RawCompressed().ToBytes(),
            depth=ctx.Depth().ToInt(),
            index=ctx.Index().ToInt(),
            parent_fingerprint=int.from_bytes(ctx.ParentFingerPrint().ToBytes(), "big"),
        )
