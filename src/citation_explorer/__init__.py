"""
Citation Explorer - Citation Network Construction and Analysis
==============================================================

Build the citation network around a scholarly paper and annotate it for
visualization.

Features:
- Bounded-depth expansion through citers and references (Semantic Scholar)
- Concurrent per-level fetching that tolerates unavailable papers
- Node sizing, PageRank-like importance, greedy clustering, link strength
- JSON/CSV export and Markdown/HTML/JSON reports

Usage:
    # Command line
    citation-explorer explore 10.1038/nature14539 --depth 2
    citation-explorer report --input citation_network

    # Python API
    from citation_explorer import CitationExplorer

    explorer = CitationExplorer()
    result = explorer.explore("10.1038/nature14539", depth=2)
    for node in result.annotated.nodes:
        print(node.title, node.importance, node.cluster)
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

from citation_explorer.analyzers.graph_analytics import process_network
from citation_explorer.client import SemanticScholarClient
from citation_explorer.explorer import CitationExplorer, ExplorationResult
from citation_explorer.models import (
    AnnotatedEdge,
    AnnotatedNetwork,
    AnnotatedNode,
    NetworkGraph,
    PaperRecord,
)
from citation_explorer.network_builder import NetworkBuilder, build_network

__all__ = [
    "__version__",
    "AnnotatedEdge",
    "AnnotatedNetwork",
    "AnnotatedNode",
    "CitationExplorer",
    "ExplorationResult",
    "NetworkBuilder",
    "NetworkGraph",
    "PaperRecord",
    "SemanticScholarClient",
    "build_network",
    "process_network",
]
