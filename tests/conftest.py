"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real auth service or database
os.environ.setdefault("AUTH_SERVICE_KEY", "service-role-test-key")
os.environ.setdefault("AUTH_SERVICE_URL", "http://auth.invalid")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
