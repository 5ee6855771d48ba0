"""
Network Builder
===============

Bounded-depth expansion of a citation network around a root paper.

Each level fetches the citers and references of the papers added at the
previous level in one concurrent batch. The batch settles completely before
its results are merged, one by one and on the calling thread, into the
network. Papers that cannot be fetched are recorded and left out; only a
failure to fetch the root aborts the build.

The resulting graph may be smaller than the theoretical maximum for a depth.
That is expected whenever related papers are unavailable.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List, Set

from citation_explorer.client import PaperRepository
from citation_explorer.exceptions import BuildCancelledError, FetchError, RootUnavailableError
from citation_explorer.models import FetchOutcome, NetworkGraph, PaperRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class NetworkBuilder:
    """
    Build one citation network from a root paper.

    A builder owns its network for the duration of a single build. To abandon
    a build, call ``cancel()`` from another thread and discard the instance.
    """

    def __init__(self, repository: PaperRepository, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        """
        Args:
            repository: Source of paper records.
            max_workers: Maximum concurrent fetches per level.
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.repository = repository
        self.max_workers = max_workers
        self.network = NetworkGraph()
        self.unavailable: Dict[str, FetchError] = {}
        self.fetch_count = 0
        self._cancelled = threading.Event()
        self._started = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Abandon the build; the current batch is discarded without merging."""
        self._cancelled.set()

    def build_network(self, root_id: str, max_depth: int) -> NetworkGraph:
        """
        Expand the network around ``root_id``.

        Args:
            root_id: Identifier of the root paper.
            max_depth: Number of expansion levels; 0 returns the root alone.

        Returns:
            The deduplicated network. Edges point from the paper being
            expanded to the related paper that was added through it.

        Raises:
            RootUnavailableError: The root paper could not be fetched.
            BuildCancelledError: ``cancel()`` was called during the build.
            ValueError: ``max_depth`` is negative.
        """
        if max_depth < 0:
            raise ValueError("max_depth must not be negative")
        if self._started:
            raise RuntimeError("A NetworkBuilder builds a single network; create a new one")
        self._started = True

        root = self._fetch_root(root_id)
        self.network.add_paper(root)
        visited: Set[str] = {root_id, root.identifier}
        frontier: List[PaperRecord] = [root]

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            current_depth = 0
            while frontier and current_depth < max_depth:
                self._check_cancelled()
                related = {
                    paper.identifier: self._related_ids(paper, visited) for paper in frontier
                }
                pending = list(dict.fromkeys(i for ids in related.values() for i in ids))

                outcomes = self._fetch_batch(executor, pending)
                self._check_cancelled()

                frontier = self._merge(frontier, related, outcomes, visited)
                current_depth += 1
                logger.info(
                    "Depth %d: %d fetched, %d added, %d nodes total",
                    current_depth, len(outcomes), len(frontier), len(self.network),
                )
        finally:
            # Running fetches are abandoned rather than awaited after a cancel
            executor.shutdown(wait=not self.cancelled, cancel_futures=True)

        logger.info(
            "Network built: %d nodes, %d links, %d papers unavailable",
            len(self.network), len(self.network.links), len(self.unavailable),
        )
        return self.network

    def _fetch_root(self, root_id: str) -> PaperRecord:
        outcome = self._fetch_one(root_id)
        if not outcome.ok:
            raise RootUnavailableError(root_id, outcome.error)
        return outcome.record

    def _fetch_one(self, identifier: str) -> FetchOutcome:
        try:
            return FetchOutcome(identifier, record=self.repository.fetch_by_identifier(identifier))
        except FetchError as e:
            return FetchOutcome(identifier, error=e)
        except Exception as e:
            logger.warning("Unexpected error fetching %s", identifier, exc_info=True)
            error = FetchError(identifier, f"unexpected error: {e}")
            error.__cause__ = e
            return FetchOutcome(identifier, error=error)

    def _related_ids(self, paper: PaperRecord, visited: Set[str]) -> List[str]:
        """Citers then references, without duplicates or papers already handled."""
        return [
            identifier
            for identifier in dict.fromkeys(paper.cited_by + paper.references)
            if identifier not in visited and identifier not in self.unavailable
        ]

    def _fetch_batch(
        self, executor: ThreadPoolExecutor, identifiers: Iterable[str]
    ) -> Dict[str, FetchOutcome]:
        futures = [executor.submit(self._fetch_one, identifier) for identifier in identifiers]
        self.fetch_count += len(futures)

        outcomes: Dict[str, FetchOutcome] = {}
        for future in as_completed(futures):
            if self.cancelled:
                break
            outcome = future.result()
            outcomes[outcome.identifier] = outcome
        return outcomes

    def _merge(
        self,
        frontier: List[PaperRecord],
        related: Dict[str, List[str]],
        outcomes: Dict[str, FetchOutcome],
        visited: Set[str],
    ) -> List[PaperRecord]:
        for identifier, outcome in outcomes.items():
            if not outcome.ok:
                logger.info("Paper %s unavailable: %s", identifier, outcome.error.message)
                self.unavailable[identifier] = outcome.error

        next_frontier: List[PaperRecord] = []
        for paper in frontier:
            for identifier in related[paper.identifier]:
                outcome = outcomes.get(identifier)
                if outcome is None or not outcome.ok:
                    continue
                record = outcome.record
                if identifier in visited or record.identifier in visited:
                    visited.add(identifier)
                    continue

                self.network.add_paper(record)
                self.network.add_link(paper.identifier, record.identifier)
                visited.update((identifier, record.identifier))
                next_frontier.append(record)

        return next_frontier

    def _check_cancelled(self) -> None:
        if self.cancelled:
            raise BuildCancelledError("Network build was cancelled")


def build_network(
    repository: PaperRepository,
    root_id: str,
    max_depth: int = 2,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> NetworkGraph:
    """Build a citation network with a fresh NetworkBuilder."""
    return NetworkBuilder(repository, max_workers=max_workers).build_network(root_id, max_depth)
