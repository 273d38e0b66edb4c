"""
Wire-format handling for aggregator-built transactions.

Jupiter returns a base64 blob without saying which format it is in. The blob
is parsed once into a tagged variant, ``VersionedTx`` or ``LegacyTx``, and
the rest of the pipeline dispatches on the variant instead of on exceptions.

Versioned messages are immutable in solders, so a new blockhash means
rebuilding the ``MessageV0`` around the same header, account keys,
instructions and address-table lookups. Legacy transactions take the new
blockhash at signing time through ``partial_sign``, which also clears any
signatures made over the old blockhash.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Union

from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.transaction import Transaction, VersionedTransaction

from .errors import MalformedTransactionError, SigningError

VERSIONED = "versioned"
LEGACY = "legacy"


@dataclass(frozen=True)
class VersionedTx:
    transaction: VersionedTransaction
    format: str = VERSIONED

    @property
    def recent_blockhash(self) -> Hash:
        return self.transaction.message.recent_blockhash


@dataclass(frozen=True)
class LegacyTx:
    transaction: Transaction
    # Assigned by rebase(); applied when the transaction is partially signed
    pending_blockhash: Union[Hash, None] = None
    format: str = LEGACY

    @property
    def recent_blockhash(self) -> Hash:
        if self.pending_blockhash is not None:
            return self.pending_blockhash
        return self.transaction.message.recent_blockhash


ParsedTransaction = Union[VersionedTx, LegacyTx]


def _decode_blob(blob: Union[str, bytes]) -> bytes:
    if isinstance(blob, bytes):
        return blob
    try:
        return base64.b64decode(blob, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise MalformedTransactionError("Transaction blob is not valid base64") from exc


def parse_transaction(blob: Union[str, bytes]) -> ParsedTransaction:
    """
    Parse an unsigned transaction blob into its wire-format variant.

    The versioned decoder runs first. It also accepts legacy-encoded bytes
    (the version prefix is optional on the wire), so a decoded message that is
    not ``MessageV0`` is re-read as a legacy ``Transaction``.

    Raises:
        MalformedTransactionError: neither format parses.
    """
    raw = _decode_blob(blob)
    if not raw:
        raise MalformedTransactionError("Transaction blob is empty")

    versioned_error: Exception
    try:
        versioned = VersionedTransaction.from_bytes(raw)
    except Exception as exc:  # solders raises its own error types for bad bincode
        versioned_error = exc
    else:
        if isinstance(versioned.message, MessageV0):
            return VersionedTx(transaction=versioned)
        versioned_error = MalformedTransactionError("message is not v0")

    try:
        return LegacyTx(transaction=Transaction.from_bytes(raw))
    except Exception as legacy_error:
        raise MalformedTransactionError(
            f"Transaction is neither versioned ({versioned_error}) nor legacy ({legacy_error})"
        ) from legacy_error


def rebase(parsed: ParsedTransaction, blockhash: Union[Hash, str]) -> ParsedTransaction:
    """Return a copy of ``parsed`` that references ``blockhash``."""
    fresh = blockhash if isinstance(blockhash, Hash) else Hash.from_string(blockhash)

    if isinstance(parsed, VersionedTx):
        message = parsed.transaction.message
        rebuilt = MessageV0(
            message.header,
            message.account_keys,
            fresh,
            message.instructions,
            message.address_table_lookups,
        )
        # Signatures over the old message are invalid; keep placeholders until sign()
        return VersionedTx(
            transaction=VersionedTransaction.populate(rebuilt, list(parsed.transaction.signatures))
        )

    return LegacyTx(transaction=parsed.transaction, pending_blockhash=fresh)


def sign(parsed: ParsedTransaction, keypair: Keypair) -> ParsedTransaction:
    """
    Sign with ``keypair``.

    Versioned transactions get a full signature; every required signer must
    be ``keypair``. Legacy transactions are signed partially, leaving slots
    for co-signers the aggregator may have declared.

    Raises:
        SigningError: keypair is not a required signer, or solders rejects it.
    """
    if isinstance(parsed, VersionedTx):
        message = parsed.transaction.message
        try:
            signed = VersionedTransaction(message, [keypair])
        except Exception as exc:
            raise SigningError(f"Failed to sign versioned transaction: {exc}") from exc
        return VersionedTx(transaction=signed)

    transaction = Transaction.from_bytes(bytes(parsed.transaction))
    blockhash = parsed.recent_blockhash
    try:
        transaction.partial_sign([keypair], blockhash)
    except Exception as exc:
        raise SigningError(f"Failed to sign legacy transaction: {exc}") from exc
    return LegacyTx(transaction=transaction, pending_blockhash=None)


def serialize(parsed: ParsedTransaction) -> str:
    """Base64 wire encoding for ``sendTransaction``."""
    return base64.b64encode(bytes(parsed.transaction)).decode("ascii")


def first_signature(parsed: ParsedTransaction) -> str:
    return str(parsed.transaction.signatures[0])


__all__ = [
    "VERSIONED",
    "LEGACY",
    "VersionedTx",
    "LegacyTx",
    "ParsedTransaction",
    "parse_transaction",
    "rebase",
    "sign",
    "serialize",
    "first_signature",
]
