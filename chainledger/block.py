"""
block.py - Blocks, Merkle roots and block hashing

A Block is an ordered list of transactions plus a private snapshot of every
account balance as of that block. While it is the ledger's candidate block,
transactions are appended and its snapshot is mutated in place. At commit the
ledger computes the block hash and seals it; from then on the block is frozen.

Hash layout (all digests SHA-256, lowercase hex):

    sha256(number + previous_hash + merkle_root + snapshot_digest
           + previous_block_digest + seed_digest)

The previous-block digest covers the whole predecessor, including its own
previous_hash and recursively its own predecessor, so altering any historical
block changes every hash recomputed from that point forward.
"""

from __future__ import annotations
from typing import Dict, List, Mapping, Optional

from .core import (
    Account, Transaction, LedgerError,
    _canonicalize, digest, sha256_hex,
)


def merkle_root(digests: List[str]) -> str:
    """
    Reduce an ordered list of hex digests to a single Merkle root.

    Adjacent digests are paired left to right and each pair's concatenation is
    hashed to form the next level. On a level with an odd count the trailing
    digest is carried up unchanged, not paired with itself. A single digest is
    its own root; an empty list hashes the empty string.
    """
    if not digests:
        return sha256_hex("")

    level = list(digests)
    while len(level) > 1:
        next_level = [
            sha256_hex(level[i] + level[i + 1])
            for i in range(0, len(level) - 1, 2)
        ]
        if len(level) % 2 == 1:
            next_level.append(level[-1])
        level = next_level
    return level[0]


class Block:
    """
    Fundamental unit of the chain.

    Attributes:
        number: Position in the chain, starting at 1 for genesis.
        previous_hash: Hash of the previous committed block ("" for genesis).
        hash: Commit hash ("" until the block is sealed).
        transactions: Transactions in admission order.
        balances: This block's own snapshot, address -> Account.
        previous_block: The prior committed block (None for genesis).
    """

    __slots__ = ("number", "previous_hash", "hash", "transactions", "balances", "previous_block")

    def __init__(
        self,
        number: int,
        previous_hash: str,
        balances: Mapping[str, Account],
        previous_block: Optional[Block] = None,
    ):
        self.number = number
        self.previous_hash = previous_hash
        self.hash = ""
        self.transactions: List[Transaction] = []
        # Deep copy so later candidates never write through to committed snapshots
        self.balances: Dict[str, Account] = {
            address: account.copy() for address, account in balances.items()
        }
        self.previous_block = previous_block

    @property
    def is_committed(self) -> bool:
        return bool(self.hash)

    def append(self, transaction: Transaction) -> None:
        """Add a transaction. Only valid while the block is a candidate."""
        if self.is_committed:
            raise LedgerError(f"Block {self.number} is committed; cannot append {transaction.transaction_id}")
        self.transactions.append(transaction)

    def seal(self, block_hash: str) -> None:
        """Record the commit hash. A block is sealed exactly once."""
        if self.is_committed:
            raise LedgerError(f"Block {self.number} is already committed")
        if not block_hash:
            raise LedgerError(f"Block {self.number}: commit hash cannot be empty")
        self.hash = block_hash

    def total_balance(self) -> int:
        """Sum of every balance in this block's snapshot."""
        return sum(account.balance for account in self.balances.values())

    # ========================================================================
    # HASHING
    # ========================================================================

    def transaction_digests(self) -> List[str]:
        return [digest(tx) for tx in self.transactions]

    def merkle_root(self) -> str:
        return merkle_root(self.transaction_digests())

    def snapshot_digest(self) -> str:
        return digest(self.balances)

    def _content(self) -> str:
        """Canonical form of this block's own fields, excluding the predecessor."""
        return _canonicalize({
            "number": self.number,
            "previous_hash": self.previous_hash,
            "hash": self.hash,
            "transactions": self.transactions,
            "balances": self.balances,
        })

    def chain_digest(self) -> str:
        """
        Digest of this block as a whole, including everything reachable from it.

        Computed iteratively from genesis forward so that chain length is not
        bounded by the interpreter's recursion limit.
        """
        chain = []
        node: Optional[Block] = self
        while node is not None:
            chain.append(node)
            node = node.previous_block

        running = digest(None)
        for node in reversed(chain):
            running = sha256_hex(node._content() + running)
        return running

    def compute_hash(self, seed: str) -> str:
        """
        Compute this block's hash with the ledger's seed.

        Pure: does not set self.hash, and returns the same value on every call
        as long as the block and its predecessors are unchanged.
        """
        if self.previous_block is None:
            previous_block_digest = digest(None)
        else:
            previous_block_digest = self.previous_block.chain_digest()
        combined = (
            f"{self.number}{self.previous_hash}{self.merkle_root()}"
            f"{self.snapshot_digest()}{previous_block_digest}{sha256_hex(seed)}"
        )
        return sha256_hex(combined)

    def __repr__(self) -> str:
        state = self.hash[:12] if self.is_committed else "candidate"
        return f"Block({self.number}, {len(self.transactions)} txs, {state})"
