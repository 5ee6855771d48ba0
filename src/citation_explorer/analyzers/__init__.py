"""
Analysis Modules
================

Analyzers applied to a built citation network.

- graph_analytics: node size, importance, clusters, link strength
- text_analyzer: keyword extraction for paper details
"""

from citation_explorer.analyzers.graph_analytics import (
    are_related,
    calculate_importance,
    calculate_link_strength,
    calculate_node_size,
    count_shared_references,
    identify_clusters,
    network_statistics,
    process_network,
)
from citation_explorer.analyzers.text_analyzer import extract_keywords, paper_keywords

__all__ = [
    "are_related",
    "calculate_importance",
    "calculate_link_strength",
    "calculate_node_size",
    "count_shared_references",
    "identify_clusters",
    "network_statistics",
    "process_network",
    "extract_keywords",
    "paper_keywords",
]
