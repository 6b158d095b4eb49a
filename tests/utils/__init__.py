"""
Test Utilities
==============

Fake Playwright objects and helpers shared across the test suite.
"""
