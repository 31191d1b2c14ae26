"""Shared test fixtures package.

Provides the in-memory Neptune backend, a fake clock, and error builders
used across the unit suites.
"""
