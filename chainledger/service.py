"""
service.py - Plain-value interface to a single ledger

LedgerService is the context object callers own and pass around instead of a
process-wide ledger singleton. It accepts and returns strings, integers and
frozen summary records, never live Block or Account objects, so callers
cannot reach into committed state.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from .block import Block
from .core import Account, Transaction, LedgerError, TRANSACTIONS_PER_BLOCK, MIN_TRANSACTION_FEE
from .ledger import Ledger


GENESIS = "genesis"


@dataclass(frozen=True, slots=True)
class TransactionSummary:
    transaction_id: str
    amount: int
    fee: int
    note: Optional[str]
    payer: str
    receiver: str

    @classmethod
    def of(cls, transaction: Transaction) -> TransactionSummary:
        return cls(
            transaction_id=transaction.transaction_id,
            amount=transaction.amount,
            fee=transaction.fee,
            note=transaction.note,
            payer=transaction.payer.address,
            receiver=transaction.receiver.address,
        )


@dataclass(frozen=True, slots=True)
class BlockSummary:
    """
    Read-only view of a committed block.

    Attributes:
        number: Block number
        previous_hash: Hash of the previous block ("" for genesis)
        hash: This block's commit hash
        transactions: Transactions in block order
        balances: (address, balance) pairs sorted by address
        previous_block: Previous block number, or "genesis" for the first block
    """
    number: int
    previous_hash: str
    hash: str
    transactions: Tuple[TransactionSummary, ...]
    balances: Tuple[Tuple[str, int], ...]
    previous_block: Union[int, str]

    @classmethod
    def of(cls, block: Block) -> BlockSummary:
        previous = block.previous_block.number if block.previous_block is not None else GENESIS
        return cls(
            number=block.number,
            previous_hash=block.previous_hash,
            hash=block.hash,
            transactions=tuple(TransactionSummary.of(tx) for tx in block.transactions),
            balances=tuple(sorted((a.address, a.balance) for a in block.balances.values())),
            previous_block=previous,
        )


class LedgerService:
    """
    Owns at most one Ledger and exposes its operations as plain values.

    Example:
        service = LedgerService()
        service.create_ledger("test", "test ledger", "harvard")
        service.create_account("alice")
        service.process_transaction("1", 1000, 10, "fund", "master", "alice")
    """

    def __init__(
        self,
        block_size: int = TRANSACTIONS_PER_BLOCK,
        min_fee: int = MIN_TRANSACTION_FEE,
        verbose: bool = False,
    ):
        self.block_size = block_size
        self.min_fee = min_fee
        self.verbose = verbose
        self._ledger: Optional[Ledger] = None

    @property
    def ledger(self) -> Ledger:
        """The managed ledger. Raises LedgerError before create_ledger()."""
        if self._ledger is None:
            raise LedgerError("No ledger has been created")
        return self._ledger

    def create_ledger(self, name: str, description: str, seed: str) -> None:
        """One-time initializer; the service and its ledger are 1:1."""
        if self._ledger is not None:
            raise LedgerError(f"A ledger already exists: {self._ledger.name}")
        self._ledger = Ledger(
            name, description, seed,
            block_size=self.block_size,
            min_fee=self.min_fee,
            verbose=self.verbose,
        )

    def create_account(self, address: str) -> str:
        return self.ledger.create_account(address).address

    def process_transaction(
        self,
        transaction_id: str,
        amount: int,
        fee: int,
        note: Optional[str],
        payer_address: str,
        receiver_address: str,
    ) -> str:
        """
        Build a transaction from addresses and submit it.

        Parties are detached Account records carrying only the address. The
        ledger resolves them against its candidate block under its own lock,
        so unknown addresses are rejected in the usual check order.
        """
        transaction = Transaction(
            transaction_id=transaction_id,
            amount=amount,
            fee=fee,
            note=note,
            payer=Account(payer_address),
            receiver=Account(receiver_address),
        )
        return self.ledger.process_transaction(transaction)

    def get_account_balance(self, address: str) -> int:
        return self.ledger.get_account_balance(address)

    def get_account_balances(self) -> List[Tuple[str, int]]:
        return sorted(self.ledger.get_account_balances().items())

    def get_block(self, number: int) -> Optional[BlockSummary]:
        block = self.ledger.get_block(number)
        return BlockSummary.of(block) if block is not None else None

    def get_transaction(self, transaction_id: str) -> Optional[TransactionSummary]:
        transaction = self.ledger.get_transaction(transaction_id)
        return TransactionSummary.of(transaction) if transaction is not None else None

    def get_blocks(self) -> int:
        return self.ledger.get_blocks()

    def validate(self) -> None:
        self.ledger.validate()
