import os

import pytest

from phenomena import db


def test_env_path_wins(monkeypatch, tmp_path):
    target = tmp_path / "env.db"
    monkeypatch.setenv("PHENOMENA_DB_PATH", str(target))
    monkeypatch.setenv("DATABASE_URL", "sqlite:///ignored.db")
    assert db.get_db_path() == str(target)


def test_database_url(monkeypatch, tmp_path):
    monkeypatch.delenv("PHENOMENA_DB_PATH", raising=False)
    target = tmp_path / "nested" / "url.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{target}")
    assert db.get_db_path() == str(target)
    assert target.parent.is_dir()


def test_database_url_rejects_other_schemes(monkeypatch):
    monkeypatch.delenv("PHENOMENA_DB_PATH", raising=False)
    monkeypatch.setenv("DATABASE_URL", "postgres://localhost:5432/phenomena-dev")
    with pytest.raises(ValueError):
        db.get_db_path()


def test_config_yaml_test_path(monkeypatch, tmp_path):
    monkeypatch.delenv("PHENOMENA_DB_PATH", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    (tmp_path / "config.yaml").write_text(
        f"db_path: {tmp_path / 'prod.db'}\ntest_db_path: {tmp_path / 'test.db'}\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(db, "_PROJECT_ROOT", str(tmp_path))
    # running under pytest, so test_db_path applies
    assert db.get_db_path() == str(tmp_path / "test.db")


def test_default_dev_target(monkeypatch, tmp_path):
    monkeypatch.delenv("PHENOMENA_DB_PATH", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setattr(db, "_PROJECT_ROOT", str(tmp_path))
    monkeypatch.setattr(db, "_DEV_DB", str(tmp_path / "phenomena-dev.db"))
    assert db.get_db_path() == str(tmp_path / "phenomena-dev.db")


def test_get_conn_row_factory_and_fk(tmp_db_path):
    with db.get_conn() as conn:
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
        row = conn.execute("SELECT 1 AS one").fetchone()
        assert row["one"] == 1


def test_transaction_rolls_back(conn):
    with pytest.raises(RuntimeError):
        with db.transaction(conn):
            conn.execute(
                "INSERT INTO reports(title, location, description, password) VALUES('a','b','c','d')"
            )
            raise RuntimeError("boom")
    assert conn.execute("SELECT COUNT(1) FROM reports").fetchone()[0] == 0
    assert not conn.in_transaction


def test_config_yaml_relative_paths_use_project_root(monkeypatch, tmp_path):
    monkeypatch.delenv("PHENOMENA_DB_PATH", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    (tmp_path / "config.yaml").write_text("test_db_path: data/reports.db\n", encoding="utf-8")
    monkeypatch.setattr(db, "_PROJECT_ROOT", str(tmp_path))

    assert db.get_db_path() == str(tmp_path / "data" / "reports.db")
    assert (tmp_path / "data").is_dir()


def test_broken_config_yaml_falls_back_to_dev_target(monkeypatch, tmp_path):
    monkeypatch.delenv("PHENOMENA_DB_PATH", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    (tmp_path / "config.yaml").write_text("db_path: [unclosed\n", encoding="utf-8")
    monkeypatch.setattr(db, "_PROJECT_ROOT", str(tmp_path))
    monkeypatch.setattr(db, "_DEV_DB", str(tmp_path / "phenomena-dev.db"))

    assert db.load_config() == {}
    assert db.get_db_path() == str(tmp_path / "phenomena-dev.db")


def test_shipped_config_points_inside_project():
    cfg = db.load_config()
    assert cfg["db_path"] == os.path.join(db._PROJECT_ROOT, "phenomena-dev.db")
    assert cfg["test_db_path"].startswith(str(db._PROJECT_ROOT))
