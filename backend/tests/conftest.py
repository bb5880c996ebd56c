"""Pytest configuration and fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _quiet_http_logs():
    """Keep httpx request logging out of test output."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    yield
