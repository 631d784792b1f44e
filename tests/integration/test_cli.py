"""
Integration tests for the parceltrack CLI.

Each test runs commands against a fresh database file in a temp directory.
"""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from parceltrack import __version__
from parceltrack.cli import app
from parceltrack.store import ParcelStore, connect


runner = CliRunner()


@pytest.fixture
def db_path(temp_dir: Path) -> Path:
    return temp_dir / "tracker.db"


def invoke(db_path: Path, *args: str):
    return runner.invoke(app, ["--db", str(db_path), *args])


def stored_parcel(db_path: Path, number: int):
    conn = connect(db_path)
    try:
        return ParcelStore(conn).get(number)
    finally:
        conn.close()


class TestBasics:
    """Version and database initialisation."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_init_creates_database(self, db_path: Path) -> None:
        result = invoke(db_path, "init")
        assert result.exit_code == 0
        assert "Database ready" in result.stdout
        assert db_path.exists()


class TestRegisterAndShow:
    """register, show and list commands."""

    def test_register(self, db_path: Path) -> None:
        result = invoke(db_path, "register", "1000", "Main st")
        assert result.exit_code == 0
        assert "Registered parcel 1" in result.stdout

        parcel = stored_parcel(db_path, 1)
        assert parcel.client == 1000
        assert parcel.address == "Main st"
        assert parcel.status == "registered"

    def test_show(self, db_path: Path) -> None:
        invoke(db_path, "register", "1000", "Main st")

        result = invoke(db_path, "show", "1")
        assert result.exit_code == 0
        assert "Main st" in result.stdout
        assert "registered" in result.stdout

    def test_show_missing(self, db_path: Path) -> None:
        result = invoke(db_path, "show", "99")
        assert result.exit_code == 1
        assert "Parcel not found: 99" in result.stdout

    def test_list(self, db_path: Path) -> None:
        invoke(db_path, "register", "7", "First st")
        invoke(db_path, "register", "7", "Second st")
        invoke(db_path, "register", "8", "Other st")

        result = invoke(db_path, "list", "7")
        assert result.exit_code == 0
        assert "First st" in result.stdout
        assert "Second st" in result.stdout
        assert "Other st" not in result.stdout

    def test_list_empty(self, db_path: Path) -> None:
        result = invoke(db_path, "list", "7")
        assert result.exit_code == 0
        assert "No parcels found" in result.stdout


class TestStatusCommands:
    """next-status and set-status commands."""

    def test_next_status(self, db_path: Path) -> None:
        invoke(db_path, "register", "1", "a")

        result = invoke(db_path, "next-status", "1")
        assert result.exit_code == 0
        assert "sent" in result.stdout
        assert stored_parcel(db_path, 1).status == "sent"

    def test_next_status_after_delivered(self, db_path: Path) -> None:
        invoke(db_path, "register", "1", "a")
        invoke(db_path, "set-status", "1", "delivered")

        result = invoke(db_path, "next-status", "1")
        assert result.exit_code == 1
        assert "cannot leave status" in result.stdout

    def test_set_status(self, db_path: Path) -> None:
        invoke(db_path, "register", "1", "a")

        result = invoke(db_path, "set-status", "1", "delivered")
        assert result.exit_code == 0
        assert stored_parcel(db_path, 1).status == "delivered"

    def test_set_status_rejects_unknown_value(self, db_path: Path) -> None:
        invoke(db_path, "register", "1", "a")

        result = invoke(db_path, "set-status", "1", "lost")
        assert result.exit_code != 0
        assert stored_parcel(db_path, 1).status == "registered"


class TestAddressAndDelete:
    """set-address and delete commands."""

    def test_set_address(self, db_path: Path) -> None:
        invoke(db_path, "register", "1", "old")

        result = invoke(db_path, "set-address", "1", "new")
        assert result.exit_code == 0
        assert stored_parcel(db_path, 1).address == "new"

    def test_set_address_after_send(self, db_path: Path) -> None:
        invoke(db_path, "register", "1", "old")
        invoke(db_path, "next-status", "1")

        result = invoke(db_path, "set-address", "1", "new")
        assert result.exit_code == 0
        assert "address unchanged" in result.stdout
        assert stored_parcel(db_path, 1).address == "old"

    def test_set_address_same_value_after_send(self, db_path: Path) -> None:
        invoke(db_path, "register", "1", "same")
        invoke(db_path, "next-status", "1")

        result = invoke(db_path, "set-address", "1", "same")
        assert result.exit_code == 0
        assert "address unchanged" in result.stdout
        assert "will be delivered" not in result.stdout

    def test_delete(self, db_path: Path) -> None:
        invoke(db_path, "register", "1", "a")

        result = invoke(db_path, "delete", "1")
        assert result.exit_code == 0
        assert invoke(db_path, "show", "1").exit_code == 1


class TestConfig:
    """--config handling."""

    def test_config_sets_db_path(self, temp_dir: Path) -> None:
        config = temp_dir / "parceltrack.yaml"
        db_path = temp_dir / "from-config.db"
        config.write_text(f"db_path: {db_path}\nlog_level: info\n")

        result = runner.invoke(app, ["--config", str(config), "register", "1", "a"])
        assert result.exit_code == 0
        assert db_path.exists()

    def test_db_overrides_config(self, temp_dir: Path) -> None:
        config = temp_dir / "parceltrack.yaml"
        config.write_text(f"db_path: {temp_dir / 'ignored.db'}\n")
        db_path = temp_dir / "override.db"

        result = runner.invoke(
            app, ["--config", str(config), "--db", str(db_path), "init"]
        )
        assert result.exit_code == 0
        assert db_path.exists()
        assert not (temp_dir / "ignored.db").exists()

    def test_missing_config(self, temp_dir: Path) -> None:
        result = runner.invoke(
            app, ["--config", str(temp_dir / "missing.yaml"), "init"]
        )
        assert result.exit_code == 1
        assert "Invalid configuration" in result.stdout
