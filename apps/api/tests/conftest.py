"""Root conftest - shared test configuration."""

import os

# Keep tests away from real services
os.environ.setdefault("PYTHON_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["RESEND_API_KEY"] = ""
