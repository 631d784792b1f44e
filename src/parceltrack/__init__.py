"""
parceltrack - a parcel-tracking record store backed by SQLite.

It provides:
- ParcelStore: create/read/update/delete of parcel records by number
- ParcelService: registration and the registered -> sent -> delivered chain
- A small CLI over both

Example usage:
    $ parceltrack register 1000 "Pushkin st. 10"
    $ parceltrack next-status 1
    $ parceltrack list 1000
"""

__version__ = "0.1.0"
__author__ = "parceltrack Contributors"

__all__ = [
    "__version__",
    "__author__",
]
