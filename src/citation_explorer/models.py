"""
Data Models
===========

Paper records, the raw citation network and the annotated network handed to
visualization layers.

NetworkGraph edges follow "source -> target" where the target was reached
while expanding the source. Annotated edges follow "source cites target".
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import networkx as nx

from citation_explorer.exceptions import FetchError


@dataclass(frozen=True)
class PaperRecord:
    """Metadata for one paper, immutable once fetched."""

    identifier: str
    title: str
    year: int
    abstract: str = ""
    citation_count: int = 0
    references: Tuple[str, ...] = ()  # papers this paper cites
    cited_by: Tuple[str, ...] = ()  # papers that cite this paper
    authors: Tuple[str, ...] = ()
    venue: str = ""
    doi: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.identifier,
            "title": self.title,
            "abstract": self.abstract,
            "year": self.year,
            "citations": self.citation_count,
            "references": list(self.references),
            "citedBy": list(self.cited_by),
            "authors": list(self.authors),
            "venue": self.venue,
            "doi": self.doi,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaperRecord":
        """Rebuild a record from the shape produced by ``to_dict``."""
        return cls(
            identifier=str(data["id"]),
            title=data.get("title") or "",
            year=int(data["year"]),
            abstract=data.get("abstract") or "",
            citation_count=int(data.get("citations") or 0),
            references=tuple(data.get("references") or ()),
            cited_by=tuple(data.get("citedBy") or ()),
            authors=tuple(data.get("authors") or ()),
            venue=data.get("venue") or "",
            doi=data.get("doi"),
        )


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one attempted fetch: either a record or the error that occurred."""

    identifier: str
    record: Optional[PaperRecord] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


class NetworkGraph:
    """
    Deduplicated citation network produced by the network builder.

    Papers are keyed by identifier and kept in insertion order; the first
    record inserted for an identifier wins. Links are directed and unique.
    Both endpoints of every link must already be papers in the graph.
    """

    def __init__(self, graph: Optional[nx.DiGraph] = None) -> None:
        self.graph: nx.DiGraph = graph if graph is not None else nx.DiGraph()

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def __contains__(self, identifier: str) -> bool:
        return self.has_paper(identifier)

    def __iter__(self) -> Iterator[PaperRecord]:
        return iter(self.papers)

    def has_paper(self, identifier: str) -> bool:
        return self.graph.has_node(identifier)

    def get_paper(self, identifier: str) -> Optional[PaperRecord]:
        if not self.graph.has_node(identifier):
            return None
        return self.graph.nodes[identifier]["paper"]

    def add_paper(self, paper: PaperRecord) -> bool:
        """Insert a paper. Returns False if its identifier is already present."""
        if self.graph.has_node(paper.identifier):
            return False
        self.graph.add_node(paper.identifier, paper=paper)
        return True

    def add_link(self, source: str, target: str) -> bool:
        """Insert a directed link. Returns False if the link already exists."""
        for endpoint in (source, target):
            if not self.graph.has_node(endpoint):
                raise ValueError(f"Cannot link unknown paper {endpoint!r}")
        if self.graph.has_edge(source, target):
            return False
        self.graph.add_edge(source, target)
        return True

    @property
    def papers(self) -> List[PaperRecord]:
        return [attrs["paper"] for _, attrs in self.graph.nodes(data=True)]

    @property
    def links(self) -> List[Tuple[str, str]]:
        return list(self.graph.edges())

    def snapshot(self) -> "NetworkGraph":
        """Return a frozen copy; mutating it raises ``networkx.NetworkXError``."""
        return NetworkGraph(nx.freeze(self.graph.copy()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [paper.to_dict() for paper in self.papers],
            "links": [{"source": s, "target": t} for s, t in self.links],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkGraph":
        network = cls()
        for node in data.get("nodes", []):
            network.add_paper(PaperRecord.from_dict(node))
        for link in data.get("links", []):
            source, target = link["source"], link["target"]
            # Links to papers absent from the node list are dangling; drop them
            if network.has_paper(source) and network.has_paper(target):
                network.add_link(source, target)
        return network


@dataclass(frozen=True)
class AnnotatedNode:
    id: str
    title: str
    year: int
    citations: int
    radius: float
    importance: float
    cluster: int


@dataclass(frozen=True)
class AnnotatedEdge:
    source: str
    target: str
    strength: float


@dataclass
class AnnotatedNetwork:
    """Visualization-ready network with per-node metrics and per-link strength."""

    nodes: List[AnnotatedNode] = field(default_factory=list)
    links: List[AnnotatedEdge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [asdict(node) for node in self.nodes],
            "links": [asdict(link) for link in self.links],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnotatedNetwork":
        return cls(
            nodes=[AnnotatedNode(**node) for node in data.get("nodes", [])],
            links=[AnnotatedEdge(**link) for link in data.get("links", [])],
        )
