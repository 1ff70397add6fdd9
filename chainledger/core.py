"""
Core types and pure functions for the block ledger.

This module provides the foundational data structures for the ledger:
1. Constants: batch size, minimum fee, master account, total supply
2. Exceptions: LedgerError and domain-specific error types
3. Data structures: Account (mutable balance record), Transaction (immutable)
4. Hashing helpers: canonical serialization and SHA-256 hex digests

Nothing in this module mutates ledger state. Balances change only inside
Ledger.process_transaction().
"""

from __future__ import annotations
from dataclasses import dataclass
import hashlib
from typing import Any, Dict, Optional


# ============================================================================
# CONSTANTS
# ============================================================================

# Candidate blocks are committed when they hold this many transactions.
TRANSACTIONS_PER_BLOCK = 10

# Fees are paid by the payer to the master account.
MIN_TRANSACTION_FEE = 10

# Reserved account holding the total supply at genesis and collecting all fees.
MASTER_ACCOUNT = "master"

# Master's genesis balance: the largest signed 64-bit integer.
# Every committed snapshot must sum to exactly this value.
TOTAL_SUPPLY = 2**63 - 1


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class DuplicateAccount(LedgerError):
    """Raised when creating an account whose address already exists."""

    def __init__(self, address: str):
        super().__init__(f"Account {address} already exists")
        self.address = address


class DuplicateTransaction(LedgerError):
    """Raised when a transaction id has already been accepted by the ledger."""

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction {transaction_id} already exists")
        self.transaction_id = transaction_id


class InvalidAmount(LedgerError):
    """Raised when a transaction amount is not a positive integer."""

    def __init__(self, transaction_id: str, amount: Any):
        super().__init__(
            f"Transaction {transaction_id}: amount must be a positive integer, got {amount!r}"
        )
        self.transaction_id = transaction_id
        self.amount = amount


class FeeTooLow(LedgerError):
    """Raised when a transaction fee is below the ledger's minimum fee."""

    def __init__(self, transaction_id: str, fee: Any, min_fee: int):
        super().__init__(
            f"Transaction {transaction_id}: fee {fee!r} too low; minimum transaction fee = {min_fee}"
        )
        self.transaction_id = transaction_id
        self.fee = fee
        self.min_fee = min_fee


class AccountNotFound(LedgerError):
    """Raised when an address is unknown to the snapshot being consulted."""

    def __init__(self, address: Optional[str], detail: str = "does not exist"):
        super().__init__(f"Account {address} {detail}" if address is not None else detail)
        self.address = address


class InsufficientBalance(LedgerError):
    """Raised when a payer cannot cover amount + fee."""

    def __init__(self, address: str, required: int, available: int):
        super().__init__(
            f"Payer {address} balance too low: need {required}, have {available}"
        )
        self.address = address
        self.required = required
        self.available = available


class NoBlocksCommitted(LedgerError):
    """Raised when a committed-state query runs before the first commit."""
    pass


class ValidationError(LedgerError):
    """Raised by Ledger.validate() at the first integrity violation found."""

    def __init__(self, block_number: int, reason: str):
        super().__init__(f"Block {block_number}: {reason}")
        self.block_number = block_number
        self.reason = reason


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(slots=True)
class Account:
    """
    Associates a unique address with its balance.

    Accounts are owned by exactly one block snapshot. The ledger mutates the
    balance of candidate-block accounts only; committed snapshots keep the
    values they had at commit time.
    """
    address: str
    balance: int = 0

    def copy(self) -> Account:
        """Return an independent record with the same address and balance."""
        return Account(self.address, self.balance)

    def __repr__(self) -> str:
        return f"Account({self.address}: {self.balance})"


@dataclass(frozen=True, slots=True, eq=False)
class Transaction:
    """
    A transfer instruction from payer to receiver, with a fee to the master account.

    Attributes:
        transaction_id: Caller-assigned identifier, unique across the ledger.
        amount: Quantity moved from payer to receiver.
        fee: Quantity moved from payer to the master account.
        note: Optional free text.
        payer: Account debited amount + fee.
        receiver: Account credited amount.

    Construction performs no validation so that accepted and rejected
    instructions share one type. The ledger validates at admission time.

    Equality and hashing use canonical_fields(), so the parties' current
    balances never affect them.
    """
    transaction_id: str
    amount: int
    fee: int
    note: Optional[str]
    payer: Account
    receiver: Account

    def canonical_fields(self) -> Dict[str, Any]:
        """Fields that identify this transaction in block hashes."""
        return {
            "id": self.transaction_id,
            "amount": self.amount,
            "fee": self.fee,
            "note": self.note,
            "payer": self.payer.address,
            "receiver": self.receiver.address,
        }

    def _key(self) -> tuple:
        return tuple(sorted(self.canonical_fields().items()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transaction):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"Transaction({self.transaction_id}: {self.amount}+{self.fee} "
            f"{self.payer.address}→{self.receiver.address})"
        )


# ============================================================================
# HASHING
# ============================================================================

def _canonicalize(value: Any) -> str:
    """
    Produce a canonical string representation of a value for hashing.

    Output does not depend on dict insertion order, so two snapshots with the
    same balances serialize identically however they were built. Strings carry
    their length, so text inside a note or address cannot pass for structure.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"N:{value}"
    if isinstance(value, str):
        return f"S{len(value)}:{value}"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        serialized = ",".join(f"{_canonicalize(k)}:{_canonicalize(v)}" for k, v in items)
        return f"{{{serialized}}}"
    if isinstance(value, (list, tuple)):
        serialized = ",".join(_canonicalize(item) for item in value)
        return f"[{serialized}]"
    if isinstance(value, Account):
        return _canonicalize({"address": value.address, "balance": value.balance})
    if isinstance(value, Transaction):
        return _canonicalize(value.canonical_fields())
    text = repr(value)
    return f"R{len(text)}:{text}"


def sha256_hex(text: str) -> str:
    """SHA-256 of a UTF-8 string as lowercase hex."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def digest(value: Any) -> str:
    """SHA-256 hex digest of a value's canonical serialization."""
    return sha256_hex(_canonicalize(value))
