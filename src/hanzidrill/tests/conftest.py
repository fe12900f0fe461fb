"""Test configuration."""
import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite:///{Path(tempfile.gettempdir()) / 'hanzidrill_test.db'}",
)

# Import after environment setup
from sqlalchemy.orm import Session  # noqa: E402

from hanzidrill.models import models  # noqa: E402,F401
from hanzidrill.models.base import Base, SessionLocal, engine, init_db  # noqa: E402


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database and session for each test."""
    engine.dispose()
    Base.metadata.drop_all(bind=engine)
    init_db()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()
