"""
Conservation Law Conformance Tests

INVARIANT: For every snapshot s, committed or candidate:
    Σ_{a ∈ accounts} balance(a, s) = TOTAL_SUPPLY

The master account starts with the whole supply. Transfers and fees
redistribute it but never create or destroy value.

These tests use property-based testing to verify conservation
holds for arbitrary transaction sequences, including rejected ones.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from chainledger import (
    Ledger, Account, Transaction, LedgerError,
    MASTER_ACCOUNT, TOTAL_SUPPLY,
)


ACCOUNTS = ["alice", "bob", "carol"]
PARTIES = [MASTER_ACCOUNT] + ACCOUNTS


# =============================================================================
# STRATEGIES FOR PROPERTY-BASED TESTING
# =============================================================================

@st.composite
def transfer(draw):
    """Generate (payer, receiver, amount, fee); some will be rejected."""
    return (
        draw(st.sampled_from(PARTIES)),
        draw(st.sampled_from(PARTIES)),
        draw(st.integers(min_value=-10, max_value=20_000)),
        draw(st.integers(min_value=0, max_value=50)),
    )


def _new_ledger(block_size: int) -> Ledger:
    ledger = Ledger("prop", "property ledger", "seed", block_size=block_size, verbose=False)
    for address in ACCOUNTS:
        ledger.create_account(address)
    return ledger


def _try(ledger: Ledger, tx_id: str, payer: str, receiver: str, amount: int, fee: int) -> bool:
    balances = ledger.candidate_block.balances
    tx = Transaction(tx_id, amount, fee, None,
                     balances.get(payer) or Account(payer),
                     balances.get(receiver) or Account(receiver))
    try:
        ledger.process_transaction(tx)
    except LedgerError:
        return False
    return True


def _fund(ledger: Ledger) -> None:
    for address in ACCOUNTS:
        assert _try(ledger, f"fund-{address}", MASTER_ACCOUNT, address, 10_000, 10)


# =============================================================================
# PROPERTIES
# =============================================================================

class TestConservationProperties:

    @given(st.lists(transfer(), max_size=40), st.integers(min_value=1, max_value=5))
    @settings(max_examples=50, deadline=None)
    def test_candidate_sum_is_constant(self, transfers, block_size):
        """
        PROPERTY: After every attempted transaction the candidate sums to the supply.
        """
        ledger = _new_ledger(block_size)
        _fund(ledger)
        for i, (payer, receiver, amount, fee) in enumerate(transfers):
            _try(ledger, f"tx-{i}", payer, receiver, amount, fee)
            assert ledger.candidate_block.total_balance() == TOTAL_SUPPLY

    @given(st.lists(transfer(), max_size=40), st.integers(min_value=1, max_value=5))
    @settings(max_examples=50, deadline=None)
    def test_every_committed_block_sums_to_supply(self, transfers, block_size):
        """
        PROPERTY: Each committed snapshot sums to the supply and has no negative balance.
        """
        ledger = _new_ledger(block_size)
        _fund(ledger)
        for i, (payer, receiver, amount, fee) in enumerate(transfers):
            _try(ledger, f"tx-{i}", payer, receiver, amount, fee)

        for number in range(1, ledger.get_blocks() + 1):
            block = ledger.get_block(number)
            assert block.total_balance() == TOTAL_SUPPLY
            assert all(account.balance >= 0 for account in block.balances.values())

    @given(st.lists(transfer(), max_size=30))
    @settings(max_examples=30, deadline=None)
    def test_fees_accrue_to_master(self, transfers):
        """
        PROPERTY: Master's balance is the supply minus everything held by others.
        """
        ledger = _new_ledger(3)
        _fund(ledger)
        for i, (payer, receiver, amount, fee) in enumerate(transfers):
            _try(ledger, f"tx-{i}", payer, receiver, amount, fee)

        balances = ledger.candidate_block.balances
        others = sum(balances[address].balance for address in ACCOUNTS)
        assert balances[MASTER_ACCOUNT].balance == TOTAL_SUPPLY - others


class TestConservationExamples:

    def test_genesis_supply(self, ledger):
        assert ledger.candidate_block.balances[MASTER_ACCOUNT].balance == TOTAL_SUPPLY
        assert ledger.total_supply == TOTAL_SUPPLY

    def test_new_accounts_start_at_zero(self, ledger):
        ledger.create_account("alice")
        assert ledger.candidate_block.balances["alice"].balance == 0
        assert ledger.candidate_block.total_balance() == TOTAL_SUPPLY

    def test_two_block_ledger(self, two_block_ledger):
        for number in (1, 2):
            assert two_block_ledger.get_block(number).total_balance() == TOTAL_SUPPLY
        assert sum(two_block_ledger.get_account_balances().values()) == TOTAL_SUPPLY
