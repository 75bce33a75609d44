"""Tests for database initialization and connection management."""
from finance_quiz.db import init_db, get_connection, get_setting, set_setting, delete_setting


def test_init_db_creates_tables(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    )
    tables = {row[0] for row in cursor.fetchall()}
    assert "user_settings" in tables
    conn.close()


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)  # should not raise
    conn = get_connection(tmp_db)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    assert len(cursor.fetchall()) > 0
    conn.close()


def test_init_db_creates_parent_directory(tmp_path):
    db_path = str(tmp_path / "nested" / "dir" / "quiz.db")
    init_db(db_path)
    assert (tmp_path / "nested" / "dir" / "quiz.db").exists()


def test_get_connection_returns_row_factory(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO user_settings (key, value) VALUES ('test', 'val')")
    row = conn.execute("SELECT key, value FROM user_settings WHERE key='test'").fetchone()
    assert row["key"] == "test"
    conn.close()


def test_get_setting_default(tmp_db):
    init_db(tmp_db)
    assert get_setting(tmp_db, "missing") is None
    assert get_setting(tmp_db, "missing", "fallback") == "fallback"


def test_set_setting_overwrites(tmp_db):
    init_db(tmp_db)
    set_setting(tmp_db, "key", "one")
    set_setting(tmp_db, "key", "two")
    assert get_setting(tmp_db, "key") == "two"


def test_delete_setting(tmp_db):
    init_db(tmp_db)
    set_setting(tmp_db, "key", "one")
    delete_setting(tmp_db, "key")
    assert get_setting(tmp_db, "key") is None
