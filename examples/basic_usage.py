#!/usr/bin/env python3
"""
Basic Usage Example
===================

This example builds the citation network around a well-known paper,
annotates it, and writes the results and a markdown report to disk.
"""

# Import the main classes
from citation_explorer import CitationExplorer
from citation_explorer.analyzers import network_statistics
from citation_explorer.reporter import ReportGenerator, export_network


def main():
    """Run a basic exploration and report."""

    # 1. Build the network one level around the root paper
    print("=" * 60)
    print("Citation Explorer - Basic Usage Example")
    print("=" * 60)

    explorer = CitationExplorer()
    result = explorer.explore("10.1038/nature14539", depth=1)  # Deep learning, Nature 2015

    print(f"\nFetched {len(result.network)} papers")
    if result.unavailable:
        print(f"Skipped {len(result.unavailable)} papers that could not be fetched")

    # 2. Save the annotated network
    export_network(result.annotated, "example_data", raw=result.network)

    # 3. Show some results
    print("\n" + "=" * 60)
    print("Results Summary")
    print("=" * 60)

    stats = network_statistics(result.annotated, top_n=5)
    print(f"\nLinks: {stats['edge_count']}  Clusters: {stats['cluster_count']}")

    print("\nMost Important Papers:")
    for paper in stats["top_papers"]:
        print(f"  - {paper['title']} ({paper['importance']:.3f})")

    if "strongest_link" in stats:
        link = stats["strongest_link"]
        print(f"\nStrongest link: {link['source']} -> {link['target']} ({link['strength']:.2f})")

    # 4. Write a report
    report = ReportGenerator(result.annotated, raw=result.network).generate("markdown")
    with open("example_data/report.md", "w") as f:
        f.write(report)

    print("\n" + "=" * 60)
    print("Full results saved to: example_data/")
    print("=" * 60)


if __name__ == "__main__":
    main()
