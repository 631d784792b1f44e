"""
Storage module for parceltrack.

This module provides SQLite-based persistence for parcel records.

Tables:
    - parcel: number, client, address, status, created_at

ParcelStore consumes a connection supplied by the caller. connect() and
init_schema() exist for callers that want the default file-backed setup.
"""

from parceltrack.store.db import ParcelStore, connect, init_schema

__all__ = [
    "ParcelStore",
    "connect",
    "init_schema",
]
