"""
Swap error taxonomy.

Every failure inside the swap pipeline is raised as a ``SwapError`` subclass
carrying a stable ``code``. The orchestrator catches them at its boundary and
turns them into a failed ``SwapResult``; nothing below it builds responses.
"""

from typing import Any, Optional


class SwapError(Exception):
    """Base class for swap pipeline failures."""

    code: str = "swap_failed"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAddressError(SwapError):
    """Address is not a base58-encoded 32-byte public key."""

    code = "invalid_address"

    def __init__(self, message: str = "Invalid wallet address"):
        super().__init__(message)


class InvalidSecretKeyError(SwapError):
    """Secret key blob does not decode to an ed25519 keypair."""

    code = "invalid_secret_key"

    def __init__(self, message: str = "Invalid secret key format"):
        super().__init__(message)


class UnknownTokenError(SwapError):
    """Token is neither a known symbol nor a valid mint address."""

    code = "unknown_token"


class ZeroAmountError(SwapError):
    """Resolved amount was zero under the strict zero-amount policy."""

    code = "zero_amount"

    def __init__(self, message: str = "Cannot swap zero amount"):
        super().__init__(message)


class BalanceLookupError(SwapError):
    """Neither the aggregator nor the ledger reported a balance."""

    code = "balance_unavailable"

    def __init__(self, message: str = "Failed to get wallet balance"):
        super().__init__(message)


class AggregatorHTTPError(SwapError):
    """Aggregator answered with a non-success status (or not at all)."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class QuoteError(AggregatorHTTPError):
    """Aggregator rejected the quote parameters or amount."""

    code = "quote_failed"


class BuildError(AggregatorHTTPError):
    """Aggregator could not construct a transaction for the quote."""

    code = "build_failed"


class MalformedTransactionError(SwapError):
    """Blob parses as neither a versioned nor a legacy transaction."""

    code = "malformed_transaction"


class SigningError(SwapError):
    """Keypair could not sign the rebuilt transaction."""

    code = "signing_failed"


class SubmissionError(SwapError):
    """Network rejected the signed transaction."""

    code = "submission_failed"


class TransactionExpiredError(SubmissionError):
    """Block height passed the blockhash expiry before confirmation."""

    code = "transaction_expired"


class OnChainFailure(SwapError):
    """Transaction landed but the runtime reported an error."""

    code = "onchain_failure"

    def __init__(self, message: str, err: Any = None, signature: Optional[str] = None):
        super().__init__(message)
        self.err = err
        self.signature = signature


INSUFFICIENT_BALANCE = "insufficient_balance"
INTERNAL_ERROR = "internal_error"


def classify_error_code(exc: BaseException) -> str:
    """Map an exception to the error code reported to callers.

    Insufficient funds has no typed signal anywhere in the pipeline (it shows
    up in preflight logs, aggregator bodies and on-chain errors alike), so it
    is detected from the message text.
    """
    if "insufficient" in str(exc).lower():
        return INSUFFICIENT_BALANCE
    if isinstance(exc, SwapError):
        return exc.code
    return INTERNAL_ERROR


__all__ = [
    "SwapError",
    "InvalidAddressError",
    "InvalidSecretKeyError",
    "UnknownTokenError",
    "ZeroAmountError",
    "BalanceLookupError",
    "AggregatorHTTPError",
    "QuoteError",
    "BuildError",
    "MalformedTransactionError",
    "SigningError",
    "SubmissionError",
    "TransactionExpiredError",
    "OnChainFailure",
    "INSUFFICIENT_BALANCE",
    "INTERNAL_ERROR",
    "classify_error_code",
]
