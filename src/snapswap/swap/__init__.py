"""Swap execution module.

Provides:
- SwapPlan: amounts, path and deadline of one swap
- SwapExecutor: approve-then-swap through the router
"""

from snapswap.swap.executor import SwapExecutor, SwapReceipts
from snapswap.swap.plan import (
    DEFAULT_DEADLINE_SECONDS,
    MIN_OUTPUT_ANY,
    SwapPlan,
    apply_slippage,
    build_plan,
    compute_deadline,
)

__all__ = [
    # Plan
    "DEFAULT_DEADLINE_SECONDS",
    "MIN_OUTPUT_ANY",
    "SwapPlan",
    "apply_slippage",
    "build_plan",
    "compute_deadline",
    # Executor
    "SwapExecutor",
    "SwapReceipts",
]
