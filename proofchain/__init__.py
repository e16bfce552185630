"""Tamper-evident hash-chained records for logistics events."""

__version__ = "0.1.0"
