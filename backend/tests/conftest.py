"""Root conftest: shared test configuration."""

import os

# Ensure tests never pick up a real signing secret or database
os.environ.setdefault("JWT_SECRET", "test-signing-secret-0123456789abcdef")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("LOG_FORMAT", "text")
