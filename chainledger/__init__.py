"""
chainledger - Tamper-Evident Block Ledger

An append-only account ledger: fixed-size blocks of transactions, each hash
chained to its predecessor, with a balance snapshot per block.

Usage:
    from chainledger import LedgerService

    service = LedgerService()
    service.create_ledger("main", "demo ledger", "seed")
    service.create_account("alice")
    service.create_account("bob")

    # Fund alice from the master account, then transfer to bob
    service.process_transaction("1", 1000, 10, "funding", "master", "alice")
    service.process_transaction("2", 100, 10, "payment", "alice", "bob")

    # Balances are readable once the block holding them is committed
    service.get_blocks()
"""

# Core types
from .core import (
    Account,
    Transaction,
    LedgerError,
    DuplicateAccount,
    DuplicateTransaction,
    InvalidAmount,
    FeeTooLow,
    AccountNotFound,
    InsufficientBalance,
    NoBlocksCommitted,
    ValidationError,
    TRANSACTIONS_PER_BLOCK,
    MIN_TRANSACTION_FEE,
    MASTER_ACCOUNT,
    TOTAL_SUPPLY,
)

# Blocks
from .block import Block, merkle_root

# Ledger
from .ledger import Ledger

# Plain-value interface
from .service import LedgerService, BlockSummary, TransactionSummary, GENESIS

# Command front end
from .commands import CommandProcessor, CommandProcessorError

__all__ = [
    # Core
    'Account', 'Transaction',
    'LedgerError', 'DuplicateAccount', 'DuplicateTransaction', 'InvalidAmount',
    'FeeTooLow', 'AccountNotFound', 'InsufficientBalance', 'NoBlocksCommitted',
    'ValidationError',
    'TRANSACTIONS_PER_BLOCK', 'MIN_TRANSACTION_FEE', 'MASTER_ACCOUNT', 'TOTAL_SUPPLY',
    # Blocks
    'Block', 'merkle_root',
    # Ledger
    'Ledger',
    # Service
    'LedgerService', 'BlockSummary', 'TransactionSummary', 'GENESIS',
    # Commands
    'CommandProcessor', 'CommandProcessorError',
]

__version__ = '1.0.0'
