"""Shared fixtures: every test gets its own repository."""

import pytest

from jcr_fakes.repository import Repository


@pytest.fixture
def repository():
    with Repository() as repo:
        yield repo


@pytest.fixture
def session(repository):
    return repository.login()
