"""High-level services built on signer derivation and swap execution."""

from snapswap.services.roundup import SwapResult, run_roundup

__all__ = ["SwapResult", "run_roundup"]
