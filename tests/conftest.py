import os
import tempfile

# Must be set before app.core.config is imported anywhere
_DB_DIR = tempfile.mkdtemp(prefix="sitecraft-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.db")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")

import pytest
from app.db.session import Base, engine
from app.db import models  # noqa


@pytest.fixture
def database():
    """Empty schema for every test that touches the database."""
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
