import sys
from pathlib import Path

import pytest
import pytest_asyncio


def pytest_configure():
    # Ensure `src/` is on sys.path so `import phonebook` works without an editable install.
    root = Path(__file__).resolve().parent.parent
    src = root / "src"
    if src.exists():
        p = str(src)
        if p not in sys.path:
            sys.path.insert(0, p)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("PHONEBOOK_DEBUG", "HOST", "PORT", "PHONEBOOK_DB_PATH", "PHONEBOOK_STORE"):
        monkeypatch.delenv(var, raising=False)


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path):
    from phonebook.contacts.store import store_from_config

    s = store_from_config({"backend": request.param, "db_path": str(tmp_path / "phonebook.db")})
    await s.initialize()
    yield s
    await s.shutdown()
