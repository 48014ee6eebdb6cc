"""Shared fixtures for relnotes tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from relnotes.core.model import Changelog
from relnotes.core.parser import parse_changelog

FIXTURES = Path(__file__).parent / "fixtures"
SAMPLE_PATH = FIXTURES / "infrastructure.md"


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_PATH.read_text(encoding="utf-8")


@pytest.fixture
def sample(sample_text: str) -> Changelog:
    return parse_changelog(sample_text, source="infrastructure.md")


@pytest.fixture
def sample_file(tmp_path: Path, sample_text: str) -> Path:
    path = tmp_path / "infrastructure.md"
    path.write_text(sample_text, encoding="utf-8")
    return path
