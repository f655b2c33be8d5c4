"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the property share ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_conservation.py - Share and fund conservation, non-negative balances
2. test_atomicity.py - Failed calls leave no trace
3. test_distribution_completeness.py - Every holder paid exactly once
4. test_lifecycle_gate.py - Cooldown and obsoletion finality

These tests use hypothesis for property-based testing; strategies.py holds
the shared operation generators.
"""
