import sys
from pathlib import Path

import pytest

# Make the repo root importable when tests run without an editable install.
repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from hashvault.lookup_engine import HashLookupEngine  # noqa: E402


@pytest.fixture(scope="session")
def full_engine():
    """Engine over the complete default corpus. Do not learn into it."""
    return HashLookupEngine.build()


@pytest.fixture
def small_engine():
    return HashLookupEngine.build(max_candidates=500)


@pytest.fixture
def client(tmp_path, small_engine):
    from app import create_app

    app = create_app(
        {
            "TESTING": True,
            "HISTORY_DB": str(tmp_path / "history.db"),
            "API_KEY": None,
            "BCRYPT_ROUNDS": 4,
            "MAX_UPLOAD_BYTES": 1024,
        },
        engine=small_engine,
    )
    return app.test_client()
