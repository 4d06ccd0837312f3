"""Shared fixtures for the test suite."""

import os

import pytest

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")


def load_fixture(name):
    with open(os.path.join(FIXTURES_DIR, name), encoding="utf-8") as f:
        return f.read()


@pytest.fixture
def root_index_html():
    return load_fixture("index_fixture.html")


@pytest.fixture
def package_index_html():
    return load_fixture("package_fixture.html")
