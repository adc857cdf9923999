import sys
from pathlib import Path

# Ensure the project's src directory is on sys.path for tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from tokenstore.infrastructure.repositories import SqlAlchemyTokenStore  # noqa: E402

# Lowest bcrypt cost keeps the suite fast; the cost does not change behaviour
FAST_OPTIONS = {"hash_rounds": 4}


@pytest.fixture
def fast_options():
    return dict(FAST_OPTIONS)


@pytest.fixture
def db_path(tmp_path):
    """Return the path of a per-test SQLite file in pytest's tmp_path."""
    return str(tmp_path / "passwordless-token.db")


@pytest_asyncio.fixture
async def store(db_path):
    """A token store on a fresh database file, closed after the test."""
    token_store = SqlAlchemyTokenStore(db_path, FAST_OPTIONS)
    try:
        yield token_store
    finally:
        await token_store.close()
