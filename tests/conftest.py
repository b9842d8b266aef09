"""
Pytest configuration.

This file provides pytest-specific configuration.
For standard test utilities, see tests/__init__.py
"""


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests that use the in-memory SQLite database"
    )
    config.addinivalue_line(
        "markers", "concurrency: marks tests that interleave coroutines"
    )
