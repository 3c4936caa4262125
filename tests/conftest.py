"""
Shared fixtures for the E-model tests.
"""

import json

import pytest

from params import G107_DEFAULTS, EModelParams, g107_defaults


@pytest.fixture
def defaults() -> EModelParams:
    """G.107 reference connection."""
    return g107_defaults()


@pytest.fixture
def defaults_json() -> str:
    return json.dumps(G107_DEFAULTS)


@pytest.fixture
def params_file(tmp_path, defaults_json):
    """A JSON input file holding the G.107 reference connection."""
    path = tmp_path / "link.json"
    path.write_text(defaults_json, encoding="utf-8")
    return path
