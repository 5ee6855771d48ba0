#!/usr/bin/env python3
"""
Citation Explorer CLI
=====================

Command-line interface for building and analyzing citation networks.

Usage:
    citation-explorer build ROOT_ID [options]
    citation-explorer analyze [options]
    citation-explorer explore ROOT_ID [options]
    citation-explorer search QUERY [options]
    citation-explorer report [options]
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from citation_explorer import __version__
from citation_explorer.config import load_config


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="citation-explorer",
        description="Citation Explorer - Build and analyze the citation network of a paper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build and analyze the network two levels deep
  citation-explorer explore 10.1038/nature14539 --depth 2 --output my_network

  # Raw network only
  citation-explorer build 10.1038/nature14539 --depth 1 --output my_network

  # Analysis only (existing network)
  citation-explorer analyze --input my_network/network.json

  # Generate report
  citation-explorer report --input my_network --format html

  # Find a root paper
  citation-explorer search "attention is all you need"
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("build", "Fetch the citation network around a root paper"),
        ("explore", "Fetch the citation network and annotate it"),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument(
            "root_id",
            type=str,
            help="Root paper identifier (Semantic Scholar id, DOI or arXiv id)"
        )
        command_parser.add_argument(
            "--depth", "-d",
            type=int,
            default=None,
            help="Expansion depth (default: CITATION_EXPLORER_DEPTH or 2)"
        )
        command_parser.add_argument(
            "--max-workers", "-w",
            type=int,
            default=None,
            help="Concurrent fetches per level (default: CITATION_EXPLORER_MAX_WORKERS or 8)"
        )
        command_parser.add_argument(
            "--output", "-o",
            type=str,
            default="citation_network",
            help="Output directory (default: citation_network)"
        )

    # Analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Annotate an existing raw network"
    )
    analyze_parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Input network JSON file or directory containing network.json"
    )
    analyze_parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output directory (default: same as input)"
    )

    # Search command
    search_parser = subparsers.add_parser(
        "search",
        help="Search papers by keyword"
    )
    search_parser.add_argument(
        "query",
        type=str,
        help="Search terms"
    )
    search_parser.add_argument(
        "--limit", "-n",
        type=int,
        default=10,
        help="Maximum results (default: 10)"
    )

    # Report command
    report_parser = subparsers.add_parser(
        "report",
        help="Generate network report"
    )
    report_parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Directory containing annotated.json"
    )
    report_parser.add_argument(
        "--format", "-f",
        type=str,
        choices=["markdown", "html", "json"],
        default="markdown",
        help="Output format (default: markdown)"
    )
    report_parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file (default: stdout)"
    )

    return parser


def _print_banner() -> None:
    print(f"Citation Explorer v{__version__}")
    print("=" * 60)


def _make_explorer(args: argparse.Namespace):
    from citation_explorer.explorer import CitationExplorer

    config = load_config()
    if getattr(args, "max_workers", None):
        config.max_workers = args.max_workers
    return CitationExplorer(config=config)


def cmd_build(args: argparse.Namespace) -> int:
    """Execute the build command."""
    _print_banner()
    print(f"Building network for {args.root_id}...")
    with _make_explorer(args) as explorer:
        builder = explorer.build(args.root_id, args.depth)
    network = builder.network

    os.makedirs(args.output, exist_ok=True)
    network_file = os.path.join(args.output, "network.json")
    with open(network_file, "w") as f:
        json.dump(network.to_dict(), f, indent=2)

    print(f"\nNetwork: {len(network):,} papers, {len(network.links):,} links")
    print(f"Papers unavailable: {len(builder.unavailable):,}")
    print(f"Saved to: {network_file}")

    return 0


def cmd_explore(args: argparse.Namespace) -> int:
    """Execute the explore command."""
    from citation_explorer.reporter import export_network

    _print_banner()
    print(f"Exploring network for {args.root_id}...")
    with _make_explorer(args) as explorer:
        result = explorer.explore(args.root_id, args.depth)
    export_network(result.annotated, args.output, raw=result.network)

    print(f"\nNetwork: {len(result.annotated.nodes):,} papers, {len(result.annotated.links):,} links")
    print(f"Papers unavailable: {len(result.unavailable):,}")
    print(f"Results saved to: {args.output}/")

    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    """Execute the analyze command."""
    from citation_explorer.analyzers.graph_analytics import process_network
    from citation_explorer.models import NetworkGraph
    from citation_explorer.reporter import export_network

    _print_banner()

    input_path = args.input
    if os.path.isdir(input_path):
        input_path = os.path.join(input_path, "network.json")

    print(f"Loading network from: {input_path}")
    with open(input_path, "r") as f:
        network = NetworkGraph.from_dict(json.load(f))

    print(f"Loaded {len(network):,} papers")

    output_dir = args.output
    if output_dir is None:
        if os.path.isdir(args.input):
            output_dir = args.input
        else:
            output_dir = os.path.dirname(args.input) or "."

    annotated = process_network(network.snapshot())
    export_network(annotated, output_dir)

    print("\nAnalysis complete!")
    print(f"Results saved to: {output_dir}/")

    return 0


def cmd_search(args: argparse.Namespace) -> int:
    """Execute the search command."""
    with _make_explorer(args) as explorer:
        papers = explorer.search(args.query, limit=args.limit)

    if not papers:
        print("No papers found")
        return 0

    for paper in papers:
        print(f"{paper.identifier}  {paper.year}  {paper.title}")
        print(f"    citations: {paper.citation_count:,}" + (f"  doi: {paper.doi}" if paper.doi else ""))

    return 0


def cmd_report(args: argparse.Namespace) -> int:
    """Execute the report command."""
    from citation_explorer.reporter import ReportGenerator

    generator = ReportGenerator.from_directory(args.input)
    report = generator.generate(format=args.format)

    if args.output:
        with open(args.output, "w") as f:
            f.write(report)
        print(f"Report saved to: {args.output}")
    else:
        print(report)

    return 0


COMMANDS = {
    "build": cmd_build,
    "explore": cmd_explore,
    "analyze": cmd_analyze,
    "search": cmd_search,
    "report": cmd_report,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        return COMMANDS[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
