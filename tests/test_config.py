"""Environment-driven configuration."""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from spendwise.config import BaseConfig, TestConfig
from spendwise.infra.database import bootstrap_database, create_db_engine
from spendwise.infra.repositories import SQLModelCategoryRepository


def test_defaults_build_sqlite_url_under_data_dir(config, tmp_path):
    assert config.DATA_DIR == (tmp_path / "data").resolve()
    assert config.DATABASE_URL == f"sqlite:///{config.DATA_DIR / 'spendwise.db'}"
    assert config.RESET_ON_START is False
    assert config.is_sqlite


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("SPENDWISE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SPENDWISE_DATABASE_URL", "sqlite:///elsewhere.db")
    monkeypatch.setenv("SPENDWISE_RESET_ON_START", "yes")
    monkeypatch.setenv("SPENDWISE_DEV_MODE", "0")

    cfg = BaseConfig()

    assert cfg.DATABASE_URL == "sqlite:///elsewhere.db"
    assert cfg.RESET_ON_START is True
    assert cfg.DEV_MODE is False


def test_engine_enables_sqlite_foreign_keys(config):
    engine = create_db_engine(config)
    with engine.connect() as connection:
        assert connection.execute(text("PRAGMA foreign_keys")).scalar() == 1
    engine.dispose()


def test_in_memory_test_config(monkeypatch, tmp_path):
    monkeypatch.setenv("SPENDWISE_DATA_DIR", str(tmp_path))
    cfg = TestConfig()

    assert cfg.DATABASE_URL == "sqlite://"
    assert cfg.sqlalchemy_engine_options()["poolclass"] is StaticPool

    engine, factory = bootstrap_database(cfg)
    assert len(SQLModelCategoryRepository(factory).list_all()) == 13
    engine.dispose()
