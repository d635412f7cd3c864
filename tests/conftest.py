import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI tests configure structlog against CliRunner's temporary stderr; undo that after each test."""
    yield
    structlog.reset_defaults()
