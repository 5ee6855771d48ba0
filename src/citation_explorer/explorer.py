"""
Citation Explorer
=================

Build a citation network around a root paper and annotate it for display.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from citation_explorer.analyzers.graph_analytics import process_network
from citation_explorer.client import PaperRepository, SemanticScholarClient
from citation_explorer.config import ExplorerConfig, load_config
from citation_explorer.exceptions import FetchError, UnsupportedOperationError
from citation_explorer.models import AnnotatedNetwork, NetworkGraph, PaperRecord
from citation_explorer.network_builder import NetworkBuilder

logger = logging.getLogger(__name__)


@dataclass
class ExplorationResult:
    """Raw network, its annotated form and the papers that could not be fetched."""

    root_id: str
    network: NetworkGraph
    annotated: AnnotatedNetwork
    unavailable: Dict[str, FetchError] = field(default_factory=dict)


class CitationExplorer:
    """
    Explore citation networks one root paper at a time.

    Starting a new build cancels the build that is still running, so a new
    root selection supersedes the previous one.
    """

    def __init__(
        self,
        repository: Optional[PaperRepository] = None,
        config: Optional[ExplorerConfig] = None,
    ) -> None:
        """
        Args:
            repository: Paper source; a SemanticScholarClient when omitted.
            config: Settings; loaded from the environment when omitted.
        """
        self.config = config or load_config()
        self.repository = repository or SemanticScholarClient(self.config)
        self._lock = threading.Lock()
        self._active_builder: Optional[NetworkBuilder] = None

    def __enter__(self) -> "CitationExplorer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release the repository's resources, such as its HTTP session."""
        close = getattr(self.repository, "close", None)
        if close is not None:
            close()

    def build(self, root_id: str, depth: Optional[int] = None) -> NetworkBuilder:
        """Run a build and return the finished builder with its diagnostics."""
        depth = self.config.default_depth if depth is None else depth
        builder = NetworkBuilder(self.repository, max_workers=self.config.max_workers)

        with self._lock:
            if self._active_builder is not None:
                logger.info("Superseding running build")
                self._active_builder.cancel()
            self._active_builder = builder

        try:
            builder.build_network(root_id, depth)
        finally:
            with self._lock:
                if self._active_builder is builder:
                    self._active_builder = None
        return builder

    def explore(self, root_id: str, depth: Optional[int] = None) -> ExplorationResult:
        """Build the network around ``root_id`` and annotate a frozen snapshot of it."""
        builder = self.build(root_id, depth)
        network = builder.network.snapshot()
        return ExplorationResult(
            root_id=network.papers[0].identifier,
            network=network,
            annotated=process_network(network),
            unavailable=dict(builder.unavailable),
        )

    def cancel(self) -> None:
        """Cancel the running build, if any."""
        with self._lock:
            if self._active_builder is not None:
                self._active_builder.cancel()

    def search(self, query: str, limit: int = 10) -> List[PaperRecord]:
        """Keyword search through the repository."""
        search = getattr(self.repository, "search", None)
        if search is None:
            raise UnsupportedOperationError(f"{type(self.repository).__name__} does not support search")
        return search(query, limit=limit)
