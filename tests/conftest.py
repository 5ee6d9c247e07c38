"""Pytest configuration and fixtures for rtfm tests."""

import logging

import pytest

from rtfm.command_index import CommandIndex
from rtfm.models import DocumentKey
from test_helpers import LS_MAN, LS_TLDR, MAN, TLDR, FakeProvider, entry


@pytest.fixture(autouse=True)
def _enable_logging():
    """CLI runs may disable logging globally; restore it for each test."""
    logging.disable(logging.NOTSET)
    yield
    logging.disable(logging.NOTSET)


@pytest.fixture
def sample_entries():
    return [
        entry("ls", 1, description="list directory contents"),
        entry("ln", 1, description="make links between files"),
        entry("cat", 1, description="concatenate files and print on the standard output"),
    ]


@pytest.fixture
def sample_index(sample_entries):
    return CommandIndex.build(sample_entries)


@pytest.fixture
def ls_key():
    return DocumentKey("ls", 1, MAN)


@pytest.fixture
def fake_provider():
    return FakeProvider(
        pages={
            DocumentKey("ls", 1, MAN): LS_MAN,
            DocumentKey("ls", 1, TLDR): LS_TLDR,
            DocumentKey("ln", 1, MAN): "LN(1)\n\nNAME\n       ln - make links\n",
            DocumentKey("cat", 1, MAN): "CAT(1)\n\nNAME\n       cat - concatenate\n",
        },
        apropos=(
            "ls (1)               - list directory contents\n"
            "ln (1)               - make links between files\n"
            "cat (1)              - concatenate files and print on the standard output\n"
        ),
        tldr_list="ls\ntar\n",
    )
