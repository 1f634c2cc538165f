"""Exceptions raised by signer derivation and swap execution.

None of these conditions is retried internally. A failed approval or swap is
an on-chain fact; resubmitting it without re-reading chain state risks
mismatched nonces and wasted gas.
"""

from typing import Any, Optional


class SnapSwapError(Exception):
    """Base class for all snapswap errors."""
    pass


class InvalidAddress(SnapSwapError, ValueError):
    """Raised when a value is not a valid on-chain address."""
    pass


class EntropySourceUnavailable(SnapSwapError):
    """Raised when the host wallet fails or refuses to supply entropy."""
    pass


class TransactionError(SnapSwapError):
    """Base class for failures tied to a submitted (or attempted) transaction.

    Attributes:
        tx_hash: Hash of the transaction, None if it was never broadcast
        reason: Revert reason when the node reported one
    """

    def __init__(self, message: str, tx_hash: Optional[str] = None, reason: Optional[str] = None):
        self.tx_hash = tx_hash
        self.reason = reason
        super().__init__(message)


class ApprovalFailed(TransactionError):
    """Approval transaction failed to submit or reverted. No swap was sent."""
    pass


class SwapFailed(TransactionError):
    """Swap transaction failed to submit or reverted.

    The approval already happened on-chain, so its receipt is kept.
    """

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        reason: Optional[str] = None,
        approval_receipt: Optional[Any] = None,
    ):
        super().__init__(message, tx_hash=tx_hash, reason=reason)
        self.approval_receipt = approval_receipt


class ConfirmationTimeout(TransactionError):
    """Waiting for a transaction to be mined exceeded the configured bound.

    Unlike a revert, the transaction may still be mined later. A swap-stage
    timeout keeps the approval receipt, since that approval is on-chain.
    """

    def __init__(
        self,
        tx_hash: str,
        stage: str,
        timeout: float,
        approval_receipt: Optional[Any] = None,
    ):
        self.stage = stage
        self.timeout = timeout
        self.approval_receipt = approval_receipt
        super().__init__(
            f"{stage} transaction {tx_hash} not mined after {timeout}s",
            tx_hash=tx_hash,
        )


class InvalidSwapPlan(SnapSwapError, ValueError):
    """Raised when swap amounts, tokens or deadline window are out of range."""
    pass


class QuoteFailed(SnapSwapError):
    """Router quote could not be obtained. Nothing was sent.

    Attributes:
        reason: Revert reason or provider error
    """

    def __init__(self, message: str, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(message)
