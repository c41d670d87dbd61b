"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database or bucket
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("STORAGE_ACCESS_KEY_ID", "test-access-key")
os.environ.setdefault("STORAGE_SECRET_ACCESS_KEY", "test-secret-key")
