import pytest

from core.config import reset_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test reads settings from its own environment."""
    reset_settings()
    yield
    reset_settings()
