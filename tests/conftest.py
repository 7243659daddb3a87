"""
Pytest configuration to ensure paths are set up correctly for tests.

This allows imports like `from handlers import checkin` to work
when running tests, simulating the Lambda environment where code
is deployed from the src/ directory.
"""

import os
import sys
from datetime import datetime
from pathlib import Path

import pytest


def _ensure_paths_on_sys_path() -> None:
    """Add repository root AND src/ to sys.path if missing.

    The src/ directory is added to simulate Lambda's import behavior,
    where Code.from_asset("src") makes src/ the root of the package.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"

    root_str = str(repo_root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    src_str = str(src_root)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

# Offline-friendly AWS defaults so tests never reach a real account.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")
os.environ.setdefault("ENVIRONMENT", "dev")

# Handlers build their services from these.
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("VERIFY_RETRY_BACKOFF_SECONDS", "0")

from repositories.memory_repo import InMemoryDocumentStore  # noqa: E402

FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


def make_registration(
    reg_id: str = "R1",
    user_name: str = "Asha",
    utilized: bool = False,
    event_id: str = "E1",
    user_id: str = "U1",
    event_date: str = "20 JUN 2025",
) -> dict:
    """Registration item as the store holds it."""
    return {
        "id": reg_id,
        "event_id": event_id,
        "user_id": user_id,
        "user_name": user_name,
        "event_title": "Tech Fest",
        "event_date": event_date,
        "event_venue": "Main Hall",
        "ticket_price": 0,
        "payment_id": "FREE",
        "payment_status": "N/A",
        "utilized": utilized,
        "created_at": "2025-06-01T10:00:00",
    }


@pytest.fixture
def registration_factory():
    return make_registration
