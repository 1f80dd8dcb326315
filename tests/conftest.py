"""Pytest fixtures for json-dedupe tests."""

import json
import sys
from pathlib import Path

import pytest

# Add parent directory to path so we can import the project modules
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture(autouse=True)
def monkeypatch_env(monkeypatch):
    """Keep log output and .env settings out of the tests."""
    monkeypatch.setenv("ENV", "test")
    monkeypatch.delenv("DEDUPE_PRESERVE_FORMATTING", raising=False)
    monkeypatch.delenv("DEDUPE_REQUIRE_JSON_EXTENSION", raising=False)
    return monkeypatch


@pytest.fixture
def people():
    return [
        {"id": 1, "name": "Ada", "team": "core"},
        {"id": 2, "name": "Grace", "team": "tools"},
        {"id": 1, "name": "Ada L.", "team": "core"},
        {"id": 3, "name": "Linus", "team": "core"},
        {"id": 2, "name": "G. Hopper", "team": "tools"},
    ]


@pytest.fixture
def people_text(people):
    """People array formatted with 4-space indentation and a final newline."""
    return json.dumps(people, indent=4) + "\n"


@pytest.fixture
def json_file(tmp_path, people_text):
    path = tmp_path / "people.json"
    path.write_text(people_text, encoding="utf-8")
    return path
