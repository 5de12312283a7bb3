"""Shared test fixtures."""

import pytest
import structlog
import tempfile
from pathlib import Path


BLOG_SQL = """
CREATE TABLE users (
  id INTEGER PRIMARY KEY,
  name TEXT
);

CREATE TABLE posts (
  id INTEGER PRIMARY KEY,
  user_id INTEGER REFERENCES users(id),
  title VARCHAR(200) NOT NULL
);
"""


@pytest.fixture
def temp_dir():
    """Temporary directory for tests."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def blog_sql():
    """Two tables joined by one foreign key."""
    return BLOG_SQL


@pytest.fixture
def blog_schema(blog_sql):
    from schemaforge.parser import parse_schema

    return parse_schema(blog_sql)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep config discovery away from the real cwd and home directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "schemaforge.config.USER_CONFIG_PATH", tmp_path / "home" / "config.toml"
    )


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging set up by CLI invocations."""
    yield
    structlog.reset_defaults()
