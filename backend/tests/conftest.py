import os
import sys
from pathlib import Path

# Tests run against the in-process store with logs on stdout
os.environ.setdefault("ENV", "dev")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_TO", "stdout")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from unistellar.infra import postgres
from unistellar.infra.memory_store import reset_memory_state
from unistellar.main import app
from unistellar.settings import settings


@pytest_asyncio.fixture(autouse=True)
async def clear_memory_state():
	await reset_memory_state()
	yield
	await reset_memory_state()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Serve every test from the memory store with the default scorer."""
	original_backend = settings.store_backend
	original_scorer = settings.search_scorer
	settings.store_backend = "memory"
	settings.search_scorer = "similarity"
	try:
		yield
	finally:
		settings.store_backend = original_backend
		settings.search_scorer = original_scorer


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
