"""Approve-then-swap execution against a Uniswap V2 router.

Two transactions per swap, strictly in order:
1. ``approve(router, amount_in)`` on the input token, awaited until mined
2. ``swapExactTokensForTokens`` on the router, awaited until mined

The router pulls the input token with ``transferFrom``, which only succeeds
once the allowance is on-chain. The swap is therefore never submitted before
the approval receipt is observed.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from web3 import Web3
from web3.exceptions import ContractLogicError, TransactionNotFound, Web3Exception

from snapswap.contracts.address import Address
from snapswap.contracts.registry import ContractRegistry, default_registry
from snapswap.errors import ApprovalFailed, ConfirmationTimeout, QuoteFailed, SwapFailed
from snapswap.signing.signer import Signer
from snapswap.swap.plan import SwapPlan, apply_slippage

logger = logging.getLogger(__name__)

REVERT_PREFIX = "execution reverted"


@dataclass
class SwapReceipts:
    """Receipts of a completed swap."""

    approval: Any
    swap: Any

    @property
    def approval_tx_hash(self) -> str:
        return Web3.to_hex(self.approval["transactionHash"])

    @property
    def swap_tx_hash(self) -> str:
        return Web3.to_hex(self.swap["transactionHash"])


def _reason_from_error(error: Exception) -> str:
    """Extract a revert reason from a web3 error."""
    message = getattr(error, "message", None) or str(error)
    if message.startswith(REVERT_PREFIX):
        message = message[len(REVERT_PREFIX):].lstrip(": ").strip()
    return message or "reverted"


class SwapExecutor:
    """Executes exact-input token swaps through the registry's router.

    The provider is passed in explicitly, so tests can substitute a fake
    chain.
    """

    def __init__(
        self,
        w3: Web3,
        registry: Optional[ContractRegistry] = None,
        confirmation_timeout: float = 120.0,
        poll_interval: float = 2.0,
        approval_gas: Optional[int] = None,
        swap_gas: Optional[int] = None,
    ):
        self.w3 = w3
        self.registry = registry or default_registry()
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval
        self.approval_gas = approval_gas
        self.swap_gas = swap_gas

    async def quote_min_output(
        self,
        token_in: Address,
        token_out: Address,
        amount_in: int,
        slippage,
    ) -> int:
        """Minimum acceptable output from a live router quote.

        Args:
            token_in: Token sold
            token_out: Token bought
            amount_in: Amount sold (base units)
            slippage: Tolerance as a fraction (0.005 = 0.5%)

        Raises:
            QuoteFailed: If the router reverted or the provider failed
        """
        router = self.registry.bind(self.w3, "router")
        try:
            amounts = router.functions.getAmountsOut(amount_in, [token_in, token_out]).call()
        except (Web3Exception, ValueError) as e:
            reason = _reason_from_error(e)
            logger.error(f"Quote {token_in} -> {token_out} failed: {reason}")
            raise QuoteFailed(f"Quote failed: {reason}", reason=reason) from e

        if not amounts:
            raise QuoteFailed("Quote failed: router returned no amounts")
        minimum = apply_slippage(amounts[-1], slippage)

        logger.info(f"Quote {amount_in} {token_in} -> {amounts[-1]} {token_out}, min out {minimum}")
        return minimum

    async def execute_swap(self, signer: Signer, plan: SwapPlan) -> SwapReceipts:
        """Approve the router for ``plan.amount_in`` and swap.

        Args:
            signer: Signer that owns the input tokens
            plan: Swap plan

        Returns:
            SwapReceipts with both mined receipts

        Raises:
            ApprovalFailed: Approval could not be submitted or reverted
            SwapFailed: Swap could not be submitted or reverted
            ConfirmationTimeout: A transaction was not mined in time
        """
        router_address = self.registry.address_of("router")
        logger.info(f"Executing swap for {signer.address}: {plan.to_dict()}")

        approval_receipt = await self._approve(signer, plan, router_address)

        # The router window starts when the swap is sent, not when planned.
        plan = plan.with_fresh_deadline()
        swap_receipt = await self._swap(signer, plan, approval_receipt)

        logger.info(
            f"Swap completed: approval={Web3.to_hex(approval_receipt['transactionHash'])} "
            f"swap={Web3.to_hex(swap_receipt['transactionHash'])}"
        )
        return SwapReceipts(approval=approval_receipt, swap=swap_receipt)

    async def _approve(self, signer: Signer, plan: SwapPlan, router_address: Address):
        """Approve exactly ``plan.amount_in`` for the router and wait until mined."""
        token = self.registry.bind(self.w3, "erc20", plan.token_in)
        call = token.functions.approve(router_address, plan.amount_in)

        try:
            tx_hash = await signer.send_transaction(call, gas=self.approval_gas)
        except (Web3Exception, ValueError) as e:
            reason = _reason_from_error(e)
            logger.error(f"Approval of {plan.token_in} rejected: {reason}")
            raise ApprovalFailed(f"Approval rejected: {reason}", reason=reason) from e

        receipt = await self.wait_for_receipt(tx_hash, "approval")

        if receipt["status"] == 0:
            reason = self._revert_reason(tx_hash, receipt)
            logger.error(f"Approval {tx_hash} reverted: {reason}")
            raise ApprovalFailed(f"Approval {tx_hash} reverted", tx_hash=tx_hash, reason=reason)

        logger.info(f"Approval mined in block {receipt['blockNumber']}: {tx_hash}")
        return receipt

    async def _swap(self, signer: Signer, plan: SwapPlan, approval_receipt):
        """Submit the swap and wait until mined."""
        router = self.registry.bind(self.w3, "router")
        call = router.functions.swapExactTokensForTokens(*plan.router_args(signer.address))

        try:
            tx_hash = await signer.send_transaction(call, gas=self.swap_gas)
        except (Web3Exception, ValueError) as e:
            reason = _reason_from_error(e)
            logger.error(f"Swap rejected: {reason}")
            raise SwapFailed(
                f"Swap rejected: {reason}",
                reason=reason,
                approval_receipt=approval_receipt,
            ) from e

        receipt = await self.wait_for_receipt(tx_hash, "swap", approval_receipt=approval_receipt)

        if receipt["status"] == 0:
            reason = self._revert_reason(tx_hash, receipt)
            logger.error(f"Swap {tx_hash} reverted: {reason}")
            raise SwapFailed(
                f"Swap {tx_hash} reverted",
                tx_hash=tx_hash,
                reason=reason,
                approval_receipt=approval_receipt,
            )

        logger.info(f"Swap mined in block {receipt['blockNumber']}: {tx_hash}")
        return receipt

    async def wait_for_receipt(self, tx_hash: str, stage: str, approval_receipt: Any = None):
        """Poll for a transaction receipt.

        Args:
            tx_hash: Transaction hash to wait for
            stage: Label used in errors ("approval", "swap")
            approval_receipt: Mined approval, attached to a swap-stage timeout

        Returns:
            Transaction receipt (mined; status not checked)

        Raises:
            ConfirmationTimeout: If not mined within confirmation_timeout
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.confirmation_timeout

        while True:
            try:
                receipt = self.w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                receipt = None

            if receipt is not None:
                return receipt

            if loop.time() >= deadline:
                logger.error(f"{stage} transaction {tx_hash} not mined after {self.confirmation_timeout}s")
                raise ConfirmationTimeout(
                    tx_hash, stage, self.confirmation_timeout, approval_receipt=approval_receipt
                )

            await asyncio.sleep(self.poll_interval)

    def _revert_reason(self, tx_hash: str, receipt) -> Optional[str]:
        """Replay a reverted transaction at its block to recover the reason."""
        try:
            tx = self.w3.eth.get_transaction(tx_hash)
            self.w3.eth.call(
                {
                    "from": tx["from"],
                    "to": tx["to"],
                    "data": tx["input"],
                    "value": tx.get("value", 0),
                },
                receipt["blockNumber"],
            )
        except ContractLogicError as e:
            return _reason_from_error(e)
        except (Web3Exception, ValueError, KeyError) as e:
            logger.warning(f"Could not replay {tx_hash} for revert reason: {e}")
        return None
