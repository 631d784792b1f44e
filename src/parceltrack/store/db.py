"""
SQLite storage for parceltrack.

This module provides the parcel table, the helpers that open a database and
create that table, and ParcelStore, the data-access object over it.

Tables:
    - parcel: One row per parcel, keyed by an AUTOINCREMENT number

Design Principles:
    - Single statement per operation, each in its own savepoint
    - Guarded mutations: address changes and deletes carry the
      status = 'registered' condition inside the statement itself
    - Transparent failures: sqlite3 errors raised while a statement runs
      reach the caller unchanged
"""

import logging
import sqlite3
import threading
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from parceltrack.errors import (
    ParcelNotFoundError,
    StorageConnectionError,
    StorageSchemaError,
)
from parceltrack.schema import Parcel, ParcelStatus, status_value

logger = logging.getLogger(__name__)

# AUTOINCREMENT keeps numbers of deleted parcels from being handed out again
CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS parcel (
    number INTEGER PRIMARY KEY AUTOINCREMENT,
    client INTEGER,
    address TEXT,
    status TEXT,
    created_at TEXT
);
"""

SELECT_COLUMNS = "number, client, address, status, created_at"

SAVEPOINT = "parcel_store"


def connect(db_path: str | Path, timeout: float = 5.0) -> sqlite3.Connection:
    """
    Open a connection to the parcel database.

    Args:
        db_path: Path to the SQLite database file, or ":memory:".
                 Will be created if it doesn't exist.
        timeout: Seconds to wait when the database is locked

    Returns:
        An open sqlite3 connection

    Raises:
        StorageConnectionError: If the database can't be opened
    """
    try:
        conn = sqlite3.connect(str(db_path), timeout=timeout, check_same_thread=False)
    except sqlite3.Error as e:
        raise StorageConnectionError(
            db_path=str(db_path),
            operation="connect",
            message=f"Failed to connect to database: {e}",
        ) from e
    logger.debug("Opened database %s", db_path)
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the parcel table if it doesn't exist yet."""
    try:
        cursor = conn.executescript(CREATE_TABLES_SQL)
        cursor.close()
        conn.commit()
    except sqlite3.Error as e:
        raise StorageSchemaError(
            operation="init_schema",
            underlying_error=str(e),
        ) from e


def _row_to_parcel(row: Any) -> Parcel:
    """
    Build a Parcel from a row in SELECT_COLUMNS order.

    The columns are nullable and other writers share the table, so a row
    that doesn't fit the model is reported as a sqlite3.DatabaseError.
    """
    try:
        return Parcel(
            number=row[0],
            client=row[1],
            address=row[2],
            status=row[3],
            created_at=row[4],
        )
    except ValidationError as e:
        msg = f"Malformed parcel row {row[0]}: {e.error_count()} invalid column(s)"
        raise sqlite3.DatabaseError(msg) from e


class ParcelStore:
    """
    CRUD access to the parcel table.

    The connection is supplied by the caller; the store never opens,
    configures or closes it, and never commits or rolls back work it
    didn't do. Each write runs inside its own savepoint: outside a caller
    transaction the savepoint commits on release, inside one it merges
    into the caller's transaction.

    One instance may be shared between threads. Statements issued through
    the same store are serialised by a per-store lock.

    Usage:
        conn = connect("tracker.db")
        init_schema(conn)
        store = ParcelStore(conn)
        number = store.add(Parcel(client=1000, address="test"))
        parcel = store.get(number)
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()

    @contextmanager
    def _statement(self) -> Generator[None, None, None]:
        """Run one write under the store lock, scoped to a savepoint."""
        with self._lock:
            self._conn.execute(f"SAVEPOINT {SAVEPOINT}")
            try:
                yield
                self._conn.execute(f"RELEASE {SAVEPOINT}")
            except Exception:
                # An engine-level rollback may already have ended the transaction
                if self._conn.in_transaction:
                    self._conn.execute(f"ROLLBACK TO {SAVEPOINT}")
                    self._conn.execute(f"RELEASE {SAVEPOINT}")
                raise

    def add(self, parcel: Parcel) -> int:
        """
        Insert a new parcel.

        The number on the given parcel is ignored; the database assigns one
        and hands it back from the INSERT itself.

        Args:
            parcel: Parcel carrying client, address, status and created_at

        Returns:
            The newly assigned parcel number

        Raises:
            sqlite3.Error: If the insert fails or no id was generated
        """
        with self._statement():
            cursor = self._conn.execute(
                """
                INSERT INTO parcel (client, address, status, created_at)
                VALUES (:client, :address, :status, :created_at)
                RETURNING number
                """,
                {
                    "client": parcel.client,
                    "address": parcel.address,
                    "status": parcel.status,
                    "created_at": parcel.created_at,
                },
            )
            rows = cursor.fetchall()
            if not rows:
                msg = "INSERT into parcel did not return a row id"
                raise sqlite3.DatabaseError(msg)
            number = rows[0][0]

        logger.debug("Inserted parcel %d for client %d", number, parcel.client)
        return number

    def get(self, number: int) -> Parcel:
        """
        Get a parcel by number.

        Raises:
            ParcelNotFoundError: If no parcel has this number
            sqlite3.Error: If the query fails or the row is malformed
        """
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {SELECT_COLUMNS} FROM parcel WHERE number = :number",
                {"number": number},
            ).fetchall()
        if not rows:
            raise ParcelNotFoundError(number=number)
        return _row_to_parcel(rows[0])

    def get_by_client(self, client: int) -> list[Parcel]:
        """
        Get all parcels belonging to a client.

        Returns:
            List of parcels in no particular order; empty if none match
        """
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {SELECT_COLUMNS} FROM parcel WHERE client = :client",
                {"client": client},
            ).fetchall()
        return [_row_to_parcel(row) for row in rows]

    def set_status(self, number: int, status: ParcelStatus | str) -> None:
        """Set the status of a parcel. Unknown numbers are a no-op."""
        with self._statement():
            cursor = self._conn.execute(
                "UPDATE parcel SET status = :status WHERE number = :number",
                {"status": status_value(status), "number": number},
            )
        logger.debug(
            "set_status %d -> %s (%d rows)",
            number,
            status_value(status),
            cursor.rowcount,
        )

    def set_address(self, number: int, address: str) -> None:
        """
        Change the delivery address while the parcel is still registered.

        Affects zero rows, without error, when the parcel has moved past
        registered or doesn't exist.
        """
        with self._statement():
            cursor = self._conn.execute(
                """
                UPDATE parcel SET address = :address
                WHERE number = :number AND status = :status
                """,
                {
                    "address": address,
                    "number": number,
                    "status": ParcelStatus.REGISTERED.value,
                },
            )
        logger.debug("set_address %d (%d rows)", number, cursor.rowcount)

    def delete(self, number: int) -> None:
        """Delete a parcel if it is still registered; otherwise a no-op."""
        with self._statement():
            cursor = self._conn.execute(
                "DELETE FROM parcel WHERE number = :number AND status = :status",
                {"number": number, "status": ParcelStatus.REGISTERED.value},
            )
        logger.debug("delete %d (%d rows)", number, cursor.rowcount)
