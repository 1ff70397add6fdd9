"""
ledger.py - Block ledger with hash-chained commits

The Ledger class is the central state manager. It is the only module that
mutates balances, and it only ever mutates the candidate block.

Key responsibilities:
    - Creates accounts in the candidate block's snapshot
    - Admits transactions, applying the payer/receiver/master update atomically
    - Commits the candidate once it holds block_size transactions
    - Answers balance queries from the last committed block only
    - Validates the chain, detecting retroactive tampering
"""

from __future__ import annotations
from typing import Dict, Optional, Set
import threading

from .block import Block
from .core import (
    # Types
    Account, Transaction,
    # Constants
    TRANSACTIONS_PER_BLOCK, MIN_TRANSACTION_FEE, MASTER_ACCOUNT, TOTAL_SUPPLY,
    # Exceptions
    LedgerError, DuplicateAccount, DuplicateTransaction, InvalidAmount, FeeTooLow,
    AccountNotFound, InsufficientBalance, NoBlocksCommitted, ValidationError,
)


def _is_integer(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class Ledger:
    """
    Append-only account ledger made of hash-chained blocks.

    Design Principles:
        - One candidate block at a time: every new account and accepted
          transaction lands in it, and nowhere else.
        - Committed blocks are frozen. Each owns a deep-copied snapshot and a
          hash set exactly once.
        - Failed admissions change nothing.

    Thread Safety:
        All operations that touch the candidate block run under a per-ledger
        lock, so the payer/receiver/master update is never observed half-done.
        Committed blocks are read without locking.

    Example:
        ledger = Ledger("main", "demo ledger", "seed")
        ledger.create_account("alice")
        master = ledger.candidate_block.balances[MASTER_ACCOUNT]
        alice = ledger.candidate_block.balances["alice"]
        ledger.process_transaction(Transaction("1", 1000, 10, "funding", master, alice))
    """

    def __init__(
        self,
        name: str,
        description: str,
        seed: str,
        block_size: int = TRANSACTIONS_PER_BLOCK,
        min_fee: int = MIN_TRANSACTION_FEE,
        verbose: bool = True,
    ):
        """
        Create a ledger with its genesis block.

        Args:
            name: Ledger identifier
            description: Free-text description
            seed: Salt mixed into every block hash
            block_size: Transactions per committed block (default: 10)
            min_fee: Minimum accepted transaction fee (default: 10)
            verbose: Print status lines for each operation (default: True)
        """
        if block_size < 1:
            raise ValueError(f"block_size must be at least 1, got {block_size}")
        self._name = name
        self._description = description
        self._seed = seed
        self.block_size = block_size
        self.min_fee = min_fee
        self.verbose = verbose
        self._lock = threading.RLock()
        self._blocks: Dict[int, Block] = {}
        self._seen_transaction_ids: Set[str] = set()

        self.genesis_block = Block(1, "", {})
        self._candidate = self.genesis_block
        master = self._open_account(MASTER_ACCOUNT)
        master.balance = TOTAL_SUPPLY

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def seed(self) -> str:
        return self._seed

    @property
    def candidate_block(self) -> Block:
        """The open block that receives new accounts and transactions."""
        return self._candidate

    @property
    def total_supply(self) -> int:
        """Sum every snapshot must equal (master's genesis balance)."""
        return TOTAL_SUPPLY

    # ========================================================================
    # ACCOUNTS (Mutating)
    # ========================================================================

    def _open_account(self, address: str) -> Account:
        if address in self._candidate.balances:
            raise DuplicateAccount(address)
        account = Account(address, 0)
        self._candidate.balances[address] = account
        return account

    def create_account(self, address: str) -> Account:
        """
        Create a zero-balance account in the candidate block.

        The account becomes visible to balance queries once the candidate
        block is committed.

        Raises:
            DuplicateAccount: If the address exists in the candidate snapshot
        """
        with self._lock:
            account = self._open_account(address)
            block_number = self._candidate.number
        if self.verbose:
            print(f"📝 Created account {address} in block {block_number}")
        return account

    # ========================================================================
    # TRANSACTION PROCESSING (Mutating)
    # ========================================================================

    def _check_admission(self, transaction: Transaction) -> None:
        """
        Validate a transaction against the candidate snapshot.

        Checks performed, in order:
        1. Transaction id not already accepted
        2. Fee at or above the minimum
        3. Amount a positive integer
        4. Payer and receiver present in the candidate snapshot
        5. Payer balance covers amount + fee
        """
        tx_id = transaction.transaction_id
        if tx_id in self._seen_transaction_ids:
            raise DuplicateTransaction(tx_id)
        if not _is_integer(transaction.fee) or transaction.fee < self.min_fee:
            raise FeeTooLow(tx_id, transaction.fee, self.min_fee)
        if not _is_integer(transaction.amount) or transaction.amount <= 0:
            raise InvalidAmount(tx_id, transaction.amount)

        balances = self._candidate.balances
        for role, party in (("payer", transaction.payer), ("receiver", transaction.receiver)):
            if party is None:
                raise AccountNotFound(None, f"Transaction {tx_id} has no {role}")
            if party.address not in balances:
                raise AccountNotFound(party.address, "is not a valid payer or receiver")

        payer = balances[transaction.payer.address]
        required = transaction.amount + transaction.fee
        if payer.balance < required:
            raise InsufficientBalance(payer.address, required, payer.balance)

    def process_transaction(self, transaction: Transaction) -> str:
        """
        Validate and apply a transaction, committing the candidate when full.

        On success the payer pays amount + fee, the receiver gets amount and
        the master account gets fee, all in the candidate snapshot. When the
        candidate reaches block_size transactions it is hashed, sealed and
        stored, and a new candidate is opened with a deep copy of its snapshot.

        Args:
            transaction: Transaction to admit

        Returns:
            The transaction id

        Raises:
            DuplicateTransaction, FeeTooLow, InvalidAmount, AccountNotFound,
            InsufficientBalance: The transaction was rejected and nothing changed
        """
        with self._lock:
            try:
                self._check_admission(transaction)
            except LedgerError as e:
                if self.verbose:
                    print(f"✗ REJECTED: {e}")
                raise

            balances = self._candidate.balances
            payer = balances[transaction.payer.address]
            receiver = balances[transaction.receiver.address]
            master = balances[MASTER_ACCOUNT]

            payer.balance -= transaction.amount + transaction.fee
            receiver.balance += transaction.amount
            master.balance += transaction.fee

            self._candidate.append(transaction)
            self._seen_transaction_ids.add(transaction.transaction_id)
            if self.verbose:
                print(f"✓ APPLIED: {transaction!r} in block {self._candidate.number}")

            if len(self._candidate.transactions) == self.block_size:
                self._commit_candidate()

        return transaction.transaction_id

    def _commit_candidate(self) -> None:
        """Seal the full candidate block and open its successor."""
        block = self._candidate
        block.seal(block.compute_hash(self._seed))
        self._blocks[block.number] = block
        self._candidate = Block(
            number=block.number + 1,
            previous_hash=block.hash,
            balances=block.balances,
            previous_block=block,
        )
        if self.verbose:
            print(f"⛓ COMMITTED block {block.number}: {block.hash}")

    # ========================================================================
    # QUERIES (committed state only)
    # ========================================================================

    def _last_committed(self) -> Block:
        last = self._candidate.previous_block
        if last is None:
            raise NoBlocksCommitted("No blocks have been committed to the ledger yet")
        return last

    def get_account_balance(self, address: str) -> int:
        """
        Balance of an account as of the most recently committed block.

        Raises:
            NoBlocksCommitted: If no block has been committed
            AccountNotFound: If the account is not in the committed snapshot
                             (including accounts that exist only in the candidate)
        """
        account = self._last_committed().balances.get(address)
        if account is None:
            raise AccountNotFound(address, "does not exist or has not been committed to the ledger yet")
        return account.balance

    def get_account_balances(self) -> Dict[str, int]:
        """All balances as of the most recently committed block."""
        return {
            address: account.balance
            for address, account in self._last_committed().balances.items()
        }

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """
        Find a committed transaction by id, scanning the newest block first.

        Returns None if no committed block holds it.
        """
        for number in range(len(self._blocks), 0, -1):
            for transaction in self._blocks[number].transactions:
                if transaction.transaction_id == transaction_id:
                    return transaction
        return None

    def get_block(self, number: int) -> Optional[Block]:
        """Committed block by number, or None."""
        return self._blocks.get(number)

    def get_blocks(self) -> int:
        """Number of committed blocks."""
        return len(self._blocks)

    # ========================================================================
    # VALIDATION (read-only)
    # ========================================================================

    def _check_link(self, block: Block) -> None:
        if block.previous_block.compute_hash(self._seed) != block.previous_hash:
            raise ValidationError(block.number, "has an incorrect previous hash")

    def _check_contents(self, block: Block) -> None:
        if len(block.transactions) != self.block_size:
            raise ValidationError(
                block.number,
                f"has {len(block.transactions)} transactions, expected {self.block_size}",
            )
        total = 0
        for address, account in block.balances.items():
            if account.balance < 0:
                raise ValidationError(block.number, f"account {address} has negative balance")
            total += account.balance
        if total != TOTAL_SUPPLY:
            raise ValidationError(
                block.number,
                f"account balances sum to {total}, expected {TOTAL_SUPPLY}",
            )

    def validate(self) -> None:
        """
        Verify the integrity of every committed block. Fail-fast.

        Pass 1 checks hash links in increasing block order: each block's
        previous_hash must equal a fresh hash of its previous block, and the
        candidate's link to the last committed block is checked the same way.
        Pass 2 checks each committed block's contents: exactly block_size
        transactions, no negative balance, balances summing to the total supply.

        Hash links are checked first, so tampering with a historical block is
        reported against its successor.

        Raises:
            ValidationError: At the first violation, with its block number
        """
        with self._lock:
            committed = [self._blocks[number] for number in sorted(self._blocks)]
            for block in committed:
                if block.previous_block is not None:
                    self._check_link(block)
            if self._candidate.previous_block is not None:
                self._check_link(self._candidate)
            for block in committed:
                self._check_contents(block)
        if self.verbose:
            print(f"✓ VALID: {len(committed)} committed blocks")
