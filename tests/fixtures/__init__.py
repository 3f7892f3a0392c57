"""Shared testing fixtures for the ticket_drill test suite."""

from .pools import PoolBuilder, make_records  # noqa: F401

__all__ = [
    "PoolBuilder",
    "make_records",
]
