"""
Conformance Test Suite

Property-based checks of the transaction engine's normative behavior.

The tests are organized by invariant:
1. properties.py - Balance rules for deposits, disputes and chargebacks
2. determinism.py - Reports independent of client interleaving

These tests use hypothesis for property-based testing.
"""
