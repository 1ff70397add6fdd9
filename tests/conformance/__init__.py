"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the block ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Balances always sum to the total supply
2. atomicity.py - A transaction applies fully or not at all
3. idempotency.py - Transaction ids are accepted at most once
4. determinism.py - Identical inputs give identical block hashes
5. canonicalization.py - Content digests ignore incidental ordering
6. batching.py - Blocks commit at exactly block_size transactions
7. tamper_detection.py - validate() reports retroactive edits

These tests use hypothesis for property-based testing.
"""
