"""Roundup service: one automated swap end to end.

Derives a fresh signer from host entropy and sells a fixed amount of the
configured input token (Goerli WETH) for the output token (Goerli LINK). Keys
are used directly, so the host wallet never prompts for the transactions.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from web3 import Web3

from snapswap.config import Settings, get_settings
from snapswap.contracts.address import Address
from snapswap.contracts.registry import ContractRegistry
from snapswap.errors import ApprovalFailed, ConfirmationTimeout, SnapSwapError, SwapFailed
from snapswap.session.connector import SnapConnector
from snapswap.signing.signer import request_signer
from snapswap.swap.executor import SwapExecutor
from snapswap.swap.plan import MIN_OUTPUT_ANY, build_plan

logger = logging.getLogger(__name__)


@dataclass
class SwapResult:
    """Outcome of a roundup swap."""

    success: bool
    signer_address: Optional[str] = None
    approval_tx_hash: Optional[str] = None
    swap_tx_hash: Optional[str] = None
    amount_in: Optional[int] = None
    amount_out_min: Optional[int] = None
    error_kind: Optional[str] = None
    error: Optional[str] = None

    @property
    def status(self) -> str:
        return "completed" if self.success else "failed"


async def run_roundup(
    connector: SnapConnector,
    w3: Optional[Web3] = None,
    settings: Optional[Settings] = None,
    registry: Optional[ContractRegistry] = None,
) -> SwapResult:
    """Run one roundup swap.

    Args:
        connector: Session with the host wallet (entropy source)
        w3: Chain provider; built from settings.rpc_url when omitted
        settings: Settings; the cached ones when omitted
        registry: Contract registry; the target network's when omitted

    Returns:
        SwapResult describing what happened on-chain
    """
    settings = settings or get_settings()
    w3 = w3 or Web3(Web3.HTTPProvider(settings.rpc_url))

    result = SwapResult(success=False, amount_in=settings.roundup_amount)

    try:
        signer = await request_signer(connector, w3)
        result.signer_address = str(signer.address)

        executor = SwapExecutor(
            w3,
            registry=registry,
            confirmation_timeout=settings.confirmation_timeout,
            poll_interval=settings.poll_interval,
        )

        token_in = Address(settings.token_in)
        token_out = Address(settings.token_out)

        if settings.slippage is None:
            amount_out_min = MIN_OUTPUT_ANY
        else:
            amount_out_min = await executor.quote_min_output(
                token_in, token_out, settings.roundup_amount, settings.slippage
            )

        plan = build_plan(
            token_in,
            token_out,
            settings.roundup_amount,
            amount_out_min=amount_out_min,
            deadline_window=settings.deadline_seconds,
        )
        result.amount_out_min = plan.amount_out_min

        receipts = await executor.execute_swap(signer, plan)

    except SnapSwapError as e:
        logger.error(f"Roundup failed ({type(e).__name__}): {e}")
        result.error_kind = type(e).__name__
        result.error = str(e)
        reason = getattr(e, "reason", None)
        if reason and reason not in result.error:
            result.error = f"{e}: {reason}"
        _record_known_hashes(result, e)
        return result

    result.success = True
    result.approval_tx_hash = receipts.approval_tx_hash
    result.swap_tx_hash = receipts.swap_tx_hash
    logger.info(f"Roundup completed: {result.swap_tx_hash}")
    return result


def _record_known_hashes(result: SwapResult, error: SnapSwapError) -> None:
    """Copy whatever transaction hashes the failure carries into the result."""
    if isinstance(error, ApprovalFailed):
        result.approval_tx_hash = error.tx_hash
    elif isinstance(error, ConfirmationTimeout) and error.stage == "approval":
        result.approval_tx_hash = error.tx_hash
    elif isinstance(error, (SwapFailed, ConfirmationTimeout)):
        result.swap_tx_hash = error.tx_hash
        if error.approval_receipt is not None:
            result.approval_tx_hash = Web3.to_hex(error.approval_receipt["transactionHash"])
