"""Shared fixtures for the analyzer tests.

Synthetic logs come from tests/helpers/log_builder.py; this module only
provides a fresh LogParserService per test.
"""

from __future__ import annotations

import pytest

from apexlens.services.parser import LogParserService


@pytest.fixture
def parser() -> LogParserService:
    return LogParserService()
