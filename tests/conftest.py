from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the homeservice package importable when running tests from a checkout.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from homeservice.core import config as core_config  # noqa: E402
from homeservice.core.rate_limiter import reset_rate_limits  # noqa: E402
from homeservice.db import models  # noqa: E402
from homeservice.db import session as db_session  # noqa: E402
from homeservice.repositories.sql_repository import SQLRepository  # noqa: E402


def _clear_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Point the app at a throwaway SQLite file and rebuild the schema."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("APP_ENV", "test")
    _clear_caches()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    _clear_caches()


@pytest.fixture()
def repo(db_env) -> SQLRepository:
    return SQLRepository()


@pytest.fixture(autouse=True)
def _fresh_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()
