"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach real services
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-that-is-long-enough-for-hs256")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "")
os.environ.setdefault("LOG_FORMAT", "text")
