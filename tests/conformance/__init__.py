"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the vesting system.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_vesting_conservation.py - Grant/release accounting and token backing
2. test_batch_atomicity.py - All-or-nothing batch semantics
3. test_monotonicity.py - Vesting curve shape and revocation freeze
4. test_scaling_properties.py - Decimal conversion bounds

These tests use hypothesis for property-based testing.
"""
