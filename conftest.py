"""Shared fixtures: a fake home directory and a project directory per test."""

import json

import pytest

from agentperms.adapters import all_adapters


@pytest.fixture(autouse=True)
def home(tmp_path, monkeypatch):
    """Fake home directory; also exported so the CLI never reads the real one."""
    path = tmp_path / "home"
    path.mkdir()
    monkeypatch.setenv("AGENTPERMS_HOME", str(path))
    return path


@pytest.fixture
def project(tmp_path):
    """Empty project directory outside the fake home."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def adapters(home):
    """One instance of every adapter bound to the fake home."""
    return all_adapters(home)


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    return path


def write_text(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path
