"""Shared fixtures: paper factory and an in-memory paper repository."""

import threading
from collections import Counter

import pytest

from citation_explorer.exceptions import MalformedRecordError, NotFoundError, TransportError
from citation_explorer.models import PaperRecord


def make_paper(identifier, year=2020, references=(), cited_by=(), citations=0, **kwargs):
    return PaperRecord(
        identifier=identifier,
        title=kwargs.pop("title", f"Paper {identifier}"),
        year=year,
        citation_count=citations,
        references=tuple(references),
        cited_by=tuple(cited_by),
        **kwargs,
    )


class FakeRepository:
    """Serves papers from a dict; ids in ``failing`` raise TransportError."""

    def __init__(self, papers, failing=(), malformed=(), on_fetch=None):
        self.papers = {paper.identifier: paper for paper in papers}
        self.failing = set(failing)
        self.malformed = set(malformed)
        self.on_fetch = on_fetch
        self.calls = Counter()
        self._lock = threading.Lock()

    def fetch_by_identifier(self, identifier):
        with self._lock:
            self.calls[identifier] += 1
        if self.on_fetch is not None:
            self.on_fetch(identifier)
        if identifier in self.failing:
            raise TransportError(identifier, "connection refused")
        if identifier in self.malformed:
            raise MalformedRecordError(identifier, "missing title")
        if identifier not in self.papers:
            raise NotFoundError(identifier)
        return self.papers[identifier]

    def search(self, query, limit=10):
        hits = [p for p in self.papers.values() if query.lower() in p.title.lower()]
        return hits[:limit]


@pytest.fixture
def paper():
    return make_paper


@pytest.fixture
def repository():
    return FakeRepository
