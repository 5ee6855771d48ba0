"""
Report Generator
================

Export annotated citation networks and generate reports in various formats.
"""

import html
import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from citation_explorer.analyzers.graph_analytics import network_statistics
from citation_explorer.analyzers.text_analyzer import paper_keywords
from citation_explorer.models import AnnotatedNetwork, NetworkGraph, PaperRecord

logger = logging.getLogger(__name__)

NODE_COLUMNS = ["id", "title", "year", "citations", "radius", "importance", "cluster"]
LINK_COLUMNS = ["source", "target", "strength"]


def format_citation(paper: PaperRecord) -> str:
    """Format a paper as an APA-style reference string."""
    if paper.authors:
        authors = ", ".join(paper.authors)
        if len(paper.authors) > 1:
            head, _, last = authors.rpartition(", ")
            authors = f"{head} & {last}"
    else:
        authors = "No authors listed"

    citation = f"{authors} ({paper.year}). {paper.title}."
    if paper.venue:
        citation += f" {paper.venue}."
    if paper.doi:
        citation += f" https://doi.org/{paper.doi}"
    return citation


def export_network(
    annotated: AnnotatedNetwork,
    output_dir: str,
    raw: Optional[NetworkGraph] = None,
) -> Dict[str, str]:
    """Write the annotated network as JSON and CSV, plus the raw network if given.

    Args:
        annotated: Output of ``process_network``.
        output_dir: Directory to write into; created if missing.
        raw: Raw network from the builder.

    Returns:
        Dict mapping file kind to the path written.
    """
    os.makedirs(output_dir, exist_ok=True)
    paths = {
        "annotated": os.path.join(output_dir, "annotated.json"),
        "nodes": os.path.join(output_dir, "nodes.csv"),
        "links": os.path.join(output_dir, "links.csv"),
    }

    data = annotated.to_dict()
    with open(paths["annotated"], "w") as f:
        json.dump(data, f, indent=2)

    nodes_df = pd.DataFrame(data["nodes"], columns=NODE_COLUMNS)
    nodes_df.to_csv(paths["nodes"], index=False)
    links_df = pd.DataFrame(data["links"], columns=LINK_COLUMNS)
    links_df.to_csv(paths["links"], index=False)

    if raw is not None:
        paths["network"] = os.path.join(output_dir, "network.json")
        with open(paths["network"], "w") as f:
            json.dump(raw.to_dict(), f, indent=2)

    logger.info("Exported %d nodes and %d links to %s", len(annotated.nodes), len(annotated.links), output_dir)
    return paths


class ReportGenerator:
    """Generate citation network reports in various formats."""

    def __init__(self, annotated: AnnotatedNetwork, raw: Optional[NetworkGraph] = None) -> None:
        """Initialize the report generator.

        Args:
            annotated: Annotated network to report on.
            raw: Raw network; enables the root paper section.
        """
        self.annotated = annotated
        self.raw = raw

    @classmethod
    def from_directory(cls, data_dir: str) -> "ReportGenerator":
        """Load ``annotated.json`` and, if present, ``network.json`` from a directory."""
        with open(os.path.join(data_dir, "annotated.json"), "r") as f:
            annotated = AnnotatedNetwork.from_dict(json.load(f))

        raw = None
        network_file = os.path.join(data_dir, "network.json")
        if os.path.exists(network_file):
            with open(network_file, "r") as f:
                raw = NetworkGraph.from_dict(json.load(f))

        return cls(annotated, raw)

    def generate(self, format: str = "markdown") -> str:
        """Generate a report in the specified format.

        Args:
            format: Output format ('markdown', 'html', 'json').

        Returns:
            Report content as a string.
        """
        if format == "markdown":
            return self._generate_markdown()
        elif format == "html":
            return self._generate_html()
        elif format == "json":
            return json.dumps(self._report_data(), indent=2, default=str)
        else:
            raise ValueError(f"Unknown format: {format}")

    def _root_paper(self) -> Optional[PaperRecord]:
        if self.raw is None or len(self.raw) == 0:
            return None
        return self.raw.papers[0]

    def _report_data(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"statistics": network_statistics(self.annotated)}
        root = self._root_paper()
        if root is not None:
            data["root"] = {
                **root.to_dict(),
                "citation": format_citation(root),
                "keywords": paper_keywords(root),
            }
        data.update(self.annotated.to_dict())
        return data

    def _generate_markdown(self) -> str:
        """Generate markdown report."""
        stats = network_statistics(self.annotated)
        lines = [
            "# Citation Network Report",
            "",
            f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
            "",
            "---",
            "",
        ]

        root = self._root_paper()
        if root is not None:
            lines.extend([
                "## Root Paper",
                "",
                f"**{root.title}** ({root.year})",
                "",
                format_citation(root),
                "",
            ])
            keywords = paper_keywords(root)
            if keywords:
                lines.append("Keywords: " + ", ".join(f"{word} ({count})" for word, count in keywords))
                lines.append("")

        lines.extend([
            "## Overview",
            "",
            f"- **Papers**: {stats['node_count']:,}",
            f"- **Citation Links**: {stats['edge_count']:,}",
            f"- **Density**: {stats['density']}",
            f"- **Connected Components**: {stats['num_weakly_connected_components']}",
            f"- **Clusters**: {stats['cluster_count']}",
            "",
            "## Most Important Papers",
            "",
            "| Paper | Year | Citations | Importance | Cluster |",
            "|-------|------|-----------|------------|---------|",
        ])

        by_importance = sorted(self.annotated.nodes, key=lambda node: node.importance, reverse=True)
        for node in by_importance[:10]:
            lines.append(
                f"| {node.title} | {node.year} | {node.citations:,} | {node.importance:.3f} | {node.cluster} |"
            )
        lines.append("")

        lines.extend(self._cluster_lines())

        strongest = sorted(self.annotated.links, key=lambda link: link.strength, reverse=True)[:10]
        if strongest:
            titles = {node.id: node.title for node in self.annotated.nodes}
            lines.extend(["## Strongest Links", ""])
            for link in strongest:
                lines.append(
                    f"- {titles.get(link.source, link.source)} → "
                    f"{titles.get(link.target, link.target)}: {link.strength:.3f}"
                )
            lines.append("")

        lines.extend([
            "---",
            "",
            "*Report generated by Citation Explorer*",
        ])

        return "\n".join(lines)

    def _cluster_lines(self) -> List[str]:
        members: Dict[int, List[str]] = {}
        for node in self.annotated.nodes:
            members.setdefault(node.cluster, []).append(node.title)

        lines = ["## Research Clusters", ""]
        for cluster, titles in sorted(members.items(), key=lambda item: len(item[1]), reverse=True)[:10]:
            sample = "; ".join(titles[:3])
            lines.append(f"- **Cluster {cluster}** ({len(titles)} papers): {sample}")
        lines.append("")
        return lines

    def _generate_html(self) -> str:
        """Generate HTML report."""
        body = []
        in_table = False
        for line in self._generate_markdown().splitlines():
            if line.startswith("|") != in_table:
                in_table = not in_table
                body.append("<table>" if in_table else "</table>")

            if line.startswith("## "):
                body.append(f"<h2>{html.escape(line[3:])}</h2>")
            elif line.startswith("# "):
                body.append(f"<h1>{html.escape(line[2:])}</h1>")
            elif line.startswith("- "):
                body.append(f"<li>{html.escape(line[2:]).replace('**', '')}</li>")
            elif line.startswith("|") and not line.startswith("|--"):
                cells = "".join(f"<td>{html.escape(cell.strip())}</td>" for cell in line.strip("|").split("|"))
                body.append(f"<tr>{cells}</tr>")
            elif line and not line.startswith("|--") and line != "---":
                body.append(f"<p>{html.escape(line).replace('**', '')}</p>")
        content = "\n".join(body)

        return f"""<!DOCTYPE html>
<html>
<head>
    <title>Citation Network Report</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; }}
        h1, h2, h3 {{ color: #333; }}
        table {{ border-collapse: collapse; width: 100%; }}
        th, td {{ border: 1px solid #ddd; padding: 8px; text-align: left; }}
        th {{ background-color: #f5f5f5; }}
    </style>
</head>
<body>
{content}
</body>
</html>"""
