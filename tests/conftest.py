"""Root pytest configuration."""
import pytest
import os


def pytest_configure(config):
    """Configure pytest to handle integration test markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a database)"
    )


def pytest_runtest_setup(item):
    """Skip integration tests if not enabled."""
    if item.get_closest_marker("integration"):
        if not os.getenv("RUN_INTEGRATION_TESTS"):
            pytest.skip(
                "Integration tests skipped. Set RUN_INTEGRATION_TESTS=1 to run."
            )


# Import fixtures from fixtures module to make them available globally
pytest_plugins = [
    "tests.fixtures.db",
]
