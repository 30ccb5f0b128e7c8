"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import pytest

from tatami.config import Settings, get_settings
from tatami.form_data import URLEncoded
from tatami.validation import builder as v


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test see a fresh Settings instance (env overrides apply)."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with explicit defaults.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.DEFAULT_ENTRIES_PER_PAGE = 5
    """
    return Settings(
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        DEFAULT_ENTRIES_PER_PAGE=20,
        MAX_ENTRIES_PER_PAGE=100,
        FORM_DATA_MAX_FIELDS=1000,
    )


@pytest.fixture
def user_schema():
    """The classic user form: name required, karma optional integer."""
    return v.form(
        name=v.field("name") | v.trim() | v.required(),
        bio=v.field("bio") | v.trim(),
        karma=v.field("karma") | v.trim() | v.optional() | v.integer(),
    )


@pytest.fixture
def create_form_data():
    """Factory fixture to build URLEncoded form data from a query string.

    Usage:
        def test_something(create_form_data):
            data = create_form_data("name=Bob&karma=4")
    """
    def _create(query_string: str = "") -> URLEncoded:
        return URLEncoded.parse(query_string)

    return _create
