"""
PetPooja sales ingestion package.

This package fetches sales data from the PetPooja point-of-sale API,
normalizes the loosely-shaped JSON into a fixed set of columns and
persists each record into a local relational store.
"""

__version__ = "0.1.0"
