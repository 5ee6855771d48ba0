"""
Graph Analytics
===============

Turn a raw citation network into visualization-ready data:
- Node size from citation count (logarithmic)
- Importance via fixed-iteration, PageRank-like propagation
- Research clusters via a single greedy similarity pass
- Link strength from publication-time distance and shared references

All functions are pure: they read a frozen network and return new values.
"""

import math
from collections import Counter
from typing import Dict, List, Optional, Sequence, Union

import networkx as nx
import numpy as np

from citation_explorer.models import (
    AnnotatedEdge,
    AnnotatedNetwork,
    AnnotatedNode,
    NetworkGraph,
    PaperRecord,
)

BASE_SIZE = 5.0
SCALE_FACTOR = 2.0
DAMPING_FACTOR = 0.85
ITERATIONS = 20
SHARED_REFERENCE_THRESHOLD = 0.3
TIME_DECAY_YEARS = 10.0
SHARED_REFERENCE_BONUS = 0.1

Papers = Union[NetworkGraph, Sequence[PaperRecord]]


def _as_papers(papers: Papers) -> List[PaperRecord]:
    if isinstance(papers, NetworkGraph):
        return papers.papers
    return list(papers)


def calculate_node_size(
    citations: int, base_size: float = BASE_SIZE, scale_factor: float = SCALE_FACTOR
) -> float:
    """Node radius on a log scale, so that highly cited papers stay readable."""
    return base_size + scale_factor * math.log(citations + 1)


def calculate_importance(
    papers: Papers, damping: float = DAMPING_FACTOR, iterations: int = ITERATIONS
) -> Dict[str, float]:
    """
    Compute importance scores with a simplified PageRank.

    Every score starts at 1. Each round, a paper receives ``(1 - damping)``
    plus ``damping`` times the sum over its citers in the set of the citer's
    score divided by the number of references the citer lists. Citers that
    list no references contribute nothing. All scores of a round are computed
    from the previous round's scores, and exactly ``iterations`` rounds run;
    there is no convergence test.

    Args:
        papers: Network or papers to score.
        damping: Damping factor.
        iterations: Number of rounds.

    Returns:
        Dict mapping paper identifier to importance.
    """
    papers = _as_papers(papers)
    index: Dict[str, int] = {}
    for i, paper in enumerate(papers):
        index.setdefault(paper.identifier, i)

    # transitions[p, c] holds the share of c's score that flows to p
    n = len(papers)
    transitions = np.zeros((n, n))
    for i, paper in enumerate(papers):
        for citer_id in paper.cited_by:
            j = index.get(citer_id)
            if j is None:
                continue
            out_degree = len(papers[j].references)
            if out_degree == 0:
                continue
            transitions[i, j] += 1.0 / out_degree

    scores = np.ones(n)
    for _ in range(iterations):
        scores = (1 - damping) + damping * (transitions @ scores)

    return {paper.identifier: float(scores[index[paper.identifier]]) for paper in papers}


def count_shared_references(paper1: PaperRecord, paper2: PaperRecord) -> int:
    """Number of paper1's references that paper2 also lists."""
    other = set(paper2.references)
    return sum(1 for ref in paper1.references if ref in other)


def are_related(
    paper1: PaperRecord, paper2: PaperRecord, threshold: float = SHARED_REFERENCE_THRESHOLD
) -> bool:
    """
    Papers are related if one cites the other, or if they share more than
    ``threshold`` of the shorter reference list (bibliographic coupling).
    """
    if paper2.identifier in paper1.references or paper1.identifier in paper2.references:
        return True
    limit = min(len(paper1.references), len(paper2.references)) * threshold
    return count_shared_references(paper1, paper2) > limit


def identify_clusters(
    papers: Papers,
    clusters: Optional[Dict[str, int]] = None,
    threshold: float = SHARED_REFERENCE_THRESHOLD,
) -> Dict[str, int]:
    """
    Group related papers with one greedy pass.

    Papers are visited in input order. An unclustered paper seeds a new
    cluster and every still-unclustered paper related to the seed joins it.
    Relations are only checked against seeds, so papers related through a
    chain (A~B, B~C) can end up in different clusters.

    Args:
        papers: Network or papers to cluster.
        clusters: Existing assignments to keep; new ids continue after the
            largest existing one.
        threshold: Shared-reference fraction used by ``are_related``.

    Returns:
        Dict mapping paper identifier to a positive cluster id.
    """
    papers = _as_papers(papers)
    assigned = dict(clusters or {})
    current_cluster = max(assigned.values(), default=0)

    for paper in papers:
        if paper.identifier in assigned:
            continue

        current_cluster += 1
        assigned[paper.identifier] = current_cluster
        for other in papers:
            if other.identifier not in assigned and are_related(paper, other, threshold):
                assigned[other.identifier] = current_cluster

    return assigned


def calculate_link_strength(source: PaperRecord, target: PaperRecord) -> float:
    """Links are stronger for papers close in time and with shared references."""
    time_distance = abs(source.year - target.year)
    time_decay = math.exp(-time_distance / TIME_DECAY_YEARS)
    return time_decay + SHARED_REFERENCE_BONUS * count_shared_references(source, target)


def process_network(network: Papers) -> AnnotatedNetwork:
    """
    Annotate every paper with radius, importance and cluster, and every
    reference between two papers of the network with a strength.

    Node order follows the input. Links follow each paper's reference order;
    references to papers outside the network are dropped.
    """
    papers = _as_papers(network)
    paper_map: Dict[str, PaperRecord] = {}
    for paper in papers:
        paper_map.setdefault(paper.identifier, paper)

    importance = calculate_importance(papers)
    clusters = identify_clusters(papers)

    nodes = [
        AnnotatedNode(
            id=paper.identifier,
            title=paper.title,
            year=paper.year,
            citations=paper.citation_count,
            radius=calculate_node_size(paper.citation_count),
            importance=importance[paper.identifier],
            cluster=clusters[paper.identifier],
        )
        for paper in papers
    ]

    links: List[AnnotatedEdge] = []
    seen = set()
    for paper in papers:
        for ref_id in paper.references:
            target = paper_map.get(ref_id)
            if target is None or (paper.identifier, ref_id) in seen:
                continue
            seen.add((paper.identifier, ref_id))
            links.append(
                AnnotatedEdge(
                    source=paper.identifier,
                    target=ref_id,
                    strength=calculate_link_strength(paper, target),
                )
            )

    return AnnotatedNetwork(nodes=nodes, links=links)


def network_statistics(annotated: AnnotatedNetwork, top_n: int = 10) -> Dict:
    """
    Summary statistics of an annotated network.

    Returns:
        Dict with counts, density, weakly connected components, cluster
        sizes and the top papers by importance.
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(node.id for node in annotated.nodes)
    graph.add_edges_from((link.source, link.target) for link in annotated.links)

    node_count = graph.number_of_nodes()
    cluster_sizes = Counter(node.cluster for node in annotated.nodes)
    top_papers = sorted(annotated.nodes, key=lambda node: node.importance, reverse=True)[:top_n]

    stats = {
        "node_count": node_count,
        "edge_count": graph.number_of_edges(),
        "density": round(nx.density(graph), 6) if node_count > 0 else 0,
        "num_weakly_connected_components": (
            nx.number_weakly_connected_components(graph) if node_count > 0 else 0
        ),
        "cluster_count": len(cluster_sizes),
        "cluster_sizes": dict(cluster_sizes.most_common()),
        "top_papers": [
            {"id": node.id, "title": node.title, "importance": round(node.importance, 4)}
            for node in top_papers
        ],
    }

    if annotated.links:
        strongest = max(annotated.links, key=lambda link: link.strength)
        stats["strongest_link"] = {
            "source": strongest.source,
            "target": strongest.target,
            "strength": round(strongest.strength, 4),
        }

    return stats
