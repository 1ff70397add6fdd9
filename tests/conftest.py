"""
conftest.py - Shared pytest fixtures for ledger tests

Provides common fixtures used across unit, conformance and functional tests:
- Basic ledgers (fresh, funded, two committed blocks)
- A submit() helper that builds transactions from addresses
"""

import pytest

from chainledger import (
    Ledger, Account, Transaction,
    MASTER_ACCOUNT, MIN_TRANSACTION_FEE,
)


SEED = "harvard"


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def make_transaction(ledger: Ledger, tx_id: str, amount, payer: str, receiver: str,
                     fee=MIN_TRANSACTION_FEE, note=None) -> Transaction:
    """Build a transaction against the candidate block's accounts.

    Unknown addresses get a detached Account so the ledger can reject them.
    """
    balances = ledger.candidate_block.balances
    return Transaction(
        transaction_id=tx_id,
        amount=amount,
        fee=fee,
        note=note,
        payer=balances.get(payer) or Account(payer),
        receiver=balances.get(receiver) or Account(receiver),
    )


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def snapshot():
    """Callable returning a plain {address: balance} copy of the candidate snapshot."""
    def _snapshot(ledger):
        return {a: acct.balance for a, acct in ledger.candidate_block.balances.items()}
    return _snapshot


@pytest.fixture
def ledger():
    """Fresh ledger with default batch size and minimum fee."""
    return Ledger("test", "test ledger", SEED, verbose=False)


@pytest.fixture
def submit():
    """Callable that builds and processes a transaction from addresses."""
    def _submit(ledger, tx_id, amount, payer, receiver, fee=MIN_TRANSACTION_FEE, note=None):
        return ledger.process_transaction(
            make_transaction(ledger, tx_id, amount, payer, receiver, fee=fee, note=note)
        )
    return _submit


@pytest.fixture
def funded_ledger(ledger, submit):
    """Ledger with alice (10,000 from master) and bob, one transaction in block 1."""
    ledger.create_account("alice")
    ledger.create_account("bob")
    submit(ledger, "fund-alice", 10_000, MASTER_ACCOUNT, "alice")
    return ledger


@pytest.fixture
def two_block_ledger(funded_ledger, submit):
    """Funded ledger plus 19 alice->bob payments of 100: blocks 1 and 2 committed."""
    for i in range(19):
        submit(funded_ledger, f"pay-{i}", 100, "alice", "bob")
    assert funded_ledger.get_blocks() == 2
    return funded_ledger
