"""
Idempotency Conformance Tests

INVARIANT: A transaction id is accepted at most once per ledger.

Resubmitting an accepted id, whether still in the candidate or already
committed, is rejected and changes nothing. Ids of rejected transactions
were never accepted and may be used again.
"""

import dataclasses

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from chainledger import Ledger, Transaction, DuplicateTransaction, InsufficientBalance, MASTER_ACCOUNT


class TestIdempotencyProperties:

    @given(st.lists(st.sampled_from(["a", "b", "c", "d", "e"]), max_size=25))
    @settings(max_examples=50, deadline=None)
    def test_each_id_applied_once(self, ids):
        """
        PROPERTY: Only the first occurrence of each id is applied.
        """
        ledger = Ledger("prop", "property ledger", "seed", block_size=3, verbose=False)
        ledger.create_account("alice")
        applied = []
        for tx_id in ids:
            balances = ledger.candidate_block.balances
            tx = Transaction(tx_id, 7, 10, None, balances[MASTER_ACCOUNT], balances["alice"])
            try:
                ledger.process_transaction(tx)
                applied.append(tx_id)
            except DuplicateTransaction:
                assert tx_id in applied

        assert applied == list(dict.fromkeys(ids))
        assert ledger.candidate_block.balances["alice"].balance == 7 * len(applied)


class TestIdempotencyExamples:

    def test_duplicate_in_candidate(self, funded_ledger, submit, snapshot):
        before = snapshot(funded_ledger)
        with pytest.raises(DuplicateTransaction) as exc_info:
            submit(funded_ledger, "fund-alice", 1, MASTER_ACCOUNT, "alice")
        assert exc_info.value.transaction_id == "fund-alice"
        assert snapshot(funded_ledger) == before

    def test_duplicate_of_committed(self, two_block_ledger, submit):
        with pytest.raises(DuplicateTransaction):
            submit(two_block_ledger, "pay-3", 100, "alice", "bob")

    def test_same_object_twice(self, funded_ledger):
        tx = funded_ledger.candidate_block.transactions[0]
        with pytest.raises(DuplicateTransaction):
            funded_ledger.process_transaction(dataclasses.replace(tx, note="again"))
        assert len(funded_ledger.candidate_block.transactions) == 1

    def test_rejected_id_can_be_reused(self, funded_ledger, submit):
        with pytest.raises(InsufficientBalance):
            submit(funded_ledger, "retry", 1_000_000, "alice", "bob")
        assert submit(funded_ledger, "retry", 100, "alice", "bob") == "retry"
