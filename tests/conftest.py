"""Snipster test configuration."""
from __future__ import annotations
# pylint: disable=redefined-outer-name

import pytest

from support import sample_snippets

from snipster import tasks
from snipster.snippets import Store

ENV_VARS = ('SNIPSTER_DIR', 'VISUAL', 'EDITOR', 'WAYLAND_DISPLAY')


@pytest.fixture(autouse=True)
def clean_data(monkeypatch):
    """Provide a common fixture for all tests."""
    tasks.reset_for_tests()
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store_dir(tmp_path):
    """The root directory for a test store. It does not exist initially."""
    return tmp_path / 'snippets'


@pytest.fixture
def store(store_dir):
    """An empty store."""
    return Store(store_dir)


@pytest.fixture
def populated_store(store):
    """A store holding the standard sample snippets."""
    for snippet in sample_snippets():
        store.create(snippet)
    return store
