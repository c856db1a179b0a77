"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the validation engine.
Every node re-validating a transaction must reach the same verdict.

The tests are organized by invariant:
1. determinism.py - Reproducible verdicts and content-addressed identity
2. settlement_accounting.py - Exact partial/full settlement arithmetic

These tests use hypothesis for property-based testing.
"""
