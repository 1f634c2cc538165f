"""Swap plan: what to sell, what to buy, and the router's guard rails."""

import time
from dataclasses import dataclass, replace
from decimal import ROUND_DOWN, Decimal
from typing import Optional, Union

from snapswap.contracts.address import Address
from snapswap.errors import InvalidSwapPlan

DEFAULT_DEADLINE_SECONDS = 300

# Default minimum output: accept any nonzero amount.
MIN_OUTPUT_ANY = 1


def compute_deadline(window: int = DEFAULT_DEADLINE_SECONDS, now: Optional[float] = None) -> int:
    """Absolute deadline (UNIX seconds) ``window`` seconds from now.

    The router reverts the swap if it is mined after this timestamp.
    """
    if window <= 0:
        raise InvalidSwapPlan(f"Deadline window must be positive, got {window}")
    if now is None:
        now = time.time()
    return int(now) + window


def apply_slippage(quoted_out: int, slippage: Union[Decimal, float, str]) -> int:
    """Minimum output for a quoted amount and a slippage tolerance.

    Rounded down, never below MIN_OUTPUT_ANY.
    """
    tolerance = Decimal(str(slippage))
    if not Decimal("0") <= tolerance < Decimal("1"):
        raise InvalidSwapPlan(f"Slippage must be in [0, 1), got {slippage}")

    minimum = (Decimal(quoted_out) * (Decimal("1") - tolerance)).to_integral_value(rounding=ROUND_DOWN)
    return max(int(minimum), MIN_OUTPUT_ANY)


@dataclass(frozen=True)
class SwapPlan:
    """Exact-input swap of ``amount_in`` token_in for at least ``amount_out_min`` token_out."""

    token_in: Address
    token_out: Address
    amount_in: int
    amount_out_min: int
    deadline: int
    deadline_window: int = DEFAULT_DEADLINE_SECONDS

    def __post_init__(self):
        for name in ("token_in", "token_out"):
            if not isinstance(getattr(self, name), Address):
                raise TypeError(f"{name} must be an Address")
        if self.token_in == self.token_out:
            raise InvalidSwapPlan("token_in and token_out must differ")
        if self.amount_in <= 0:
            raise InvalidSwapPlan(f"amount_in must be positive, got {self.amount_in}")
        if self.amount_out_min < MIN_OUTPUT_ANY:
            raise InvalidSwapPlan(f"amount_out_min must be at least {MIN_OUTPUT_ANY}, got {self.amount_out_min}")
        if self.deadline <= 0:
            raise InvalidSwapPlan(f"deadline must be a UNIX timestamp, got {self.deadline}")
        if self.deadline_window <= 0:
            raise InvalidSwapPlan(f"deadline_window must be positive, got {self.deadline_window}")

    @property
    def path(self) -> list[Address]:
        """Router path, input token first."""
        return [self.token_in, self.token_out]

    def router_args(self, recipient: Address) -> list:
        """Arguments for ``swapExactTokensForTokens``.

        Returns:
            [amountIn, amountOutMin, path, to, deadline]
        """
        return [self.amount_in, self.amount_out_min, self.path, Address(recipient), self.deadline]

    def with_fresh_deadline(self, now: Optional[float] = None) -> "SwapPlan":
        """Copy of this plan with the deadline re-anchored at ``now``.

        Called right before the swap is submitted, so time spent waiting for
        the approval does not eat into the router's window.
        """
        return replace(self, deadline=compute_deadline(self.deadline_window, now))

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return {
            "token_in": str(self.token_in),
            "token_out": str(self.token_out),
            "amount_in": self.amount_in,
            "amount_out_min": self.amount_out_min,
            "deadline": self.deadline,
            "deadline_window": self.deadline_window,
        }


def build_plan(
    token_in: Union[str, Address],
    token_out: Union[str, Address],
    amount_in: int,
    amount_out_min: int = MIN_OUTPUT_ANY,
    deadline_window: int = DEFAULT_DEADLINE_SECONDS,
    now: Optional[float] = None,
) -> SwapPlan:
    """Build a swap plan with a deadline ``deadline_window`` seconds out.

    Raises:
        InvalidAddress: If a token address is invalid
        InvalidSwapPlan: If amounts, tokens or the window are out of range
    """
    return SwapPlan(
        token_in=Address(token_in),
        token_out=Address(token_out),
        amount_in=amount_in,
        amount_out_min=amount_out_min,
        deadline=compute_deadline(deadline_window, now),
        deadline_window=deadline_window,
    )
