from __future__ import annotations

import sqlite3

import pytest

from reserve_api import database


@pytest.mark.skipif(not database._is_sqlite, reason="SQLite-only connect hook")
def test_sqlite_connections_enforce_foreign_keys() -> None:
    conn = sqlite3.connect(":memory:")
    try:
        database.enable_sqlite_fk(conn, None)

        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    finally:
        conn.close()
