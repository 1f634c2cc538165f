"""Transaction signing derived from host wallet entropy.

Provides:
- PrivateKey: fixed-size key extracted from derived key material
- Signer: local signer bound to a chain provider
- derive_signer / request_signer: build a signer from a coin type node
"""

from snapswap.signing.signer import (
    PrivateKey,
    Signer,
    derive_signer,
    request_signer,
)

__all__ = [
    "PrivateKey",
    "Signer",
    "derive_signer",
    "request_signer",
]
