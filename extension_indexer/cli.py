#!/usr/bin/env python3
"""
Extension Indexer CLI

Scans a platform core and its plugins for extension points and their
implementations, and writes an index and a catalogue in various formats.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from extension_indexer.config import IndexerConfig
from extension_indexer.errors import DuplicateDefinitionError, IndexerError, RepositoryError, ScanError
from extension_indexer.scanner import ManifestMetadataProvider, ScanCoordinator, SourceExtractor, load_corpus
from extension_indexer.exporters import to_ascii, to_confluence, to_json, to_mermaid


OUTPUT_FILES = {
    "json": "extension-points.json",
    "confluence": "extension-points.page",
    "ascii": "extension-points.txt",
    "mermaid": "extension-points.mmd",
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_args(args=None, config: Optional[IndexerConfig] = None):
    """Parse command line arguments."""
    if config is None:
        config = IndexerConfig.from_env()

    parser = argparse.ArgumentParser(
        prog="extension-indexer",
        description="List extension points and their implementations across a platform and its plugins.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  extension-indexer corpus.yaml                    # JSON index + Confluence page in .
  extension-indexer corpus.yaml -o site/           # Write into site/
  extension-indexer corpus.yaml -f ascii mermaid   # Tree and flowchart only
  extension-indexer corpus.yaml --workers 8 -v     # More threads, debug logging
  extension-indexer corpus.toml --limit 20         # Trial run over 20 plugins
        """,
    )

    # Positional arguments
    parser.add_argument(
        "manifest",
        help="Corpus manifest (YAML, JSON or TOML) listing the core and plugins",
    )

    # Output options
    parser.add_argument(
        "-o", "--output-dir",
        type=str,
        default=config.output_dir,
        help=f"Directory for the output files (default: {config.output_dir})",
    )

    parser.add_argument(
        "-f", "--format",
        nargs="+",
        choices=sorted(OUTPUT_FILES),
        default=config.formats,
        help=f"Output formats (default: {' '.join(config.formats)})",
    )

    # Mermaid-specific options
    parser.add_argument(
        "--orientation",
        choices=["LR", "TD", "TB", "RL", "BT"],
        default="LR",
        help="Mermaid flowchart orientation (default: LR)",
    )

    parser.add_argument(
        "--group-by-module",
        action="store_true",
        help="Group types by module in Mermaid output",
    )

    # ASCII-specific options
    parser.add_argument(
        "--ascii-style",
        choices=["tree", "ascii"],
        default="tree",
        help="ASCII output style: 'tree' (Unicode) or 'ascii' (pure ASCII)",
    )

    parser.add_argument(
        "--show-undefined",
        action="store_true",
        help="List implementations of extension points that no scanned module defines (ASCII output)",
    )

    # Scanning options
    parser.add_argument(
        "--workers",
        type=int,
        default=config.workers,
        help=f"Number of plugins scanned in parallel (default: {config.workers})",
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=config.limit,
        help="Scan at most this many plugins",
    )

    parser.add_argument(
        "--plugin-url-template",
        type=str,
        default=config.plugin_url_template,
        help="URL for plugins the manifest gives no URL for, e.g. 'https://plugins.example.org/{artifact_id}'",
    )

    # Logging options
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every extension found",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )

    return parser.parse_args(args)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT, stream=sys.stderr)


def main(args=None):
    """Main entry point."""
    try:
        config = IndexerConfig.from_env()
    except ValueError as e:
        print(f"Error in environment configuration: {e}", file=sys.stderr)
        return 1
    parsed = parse_args(args, config)

    if parsed.verbose:
        config.log_level = "DEBUG"
    elif parsed.quiet:
        config.log_level = "WARNING"
    configure_logging(config.log_level)

    if parsed.workers < 1:
        print(f"Error: --workers must be at least 1, got {parsed.workers}", file=sys.stderr)
        return 1

    if parsed.limit is not None and parsed.limit < 0:
        print(f"Error: --limit must not be negative, got {parsed.limit}", file=sys.stderr)
        return 1

    config.workers = parsed.workers
    config.limit = parsed.limit
    config.output_dir = parsed.output_dir
    config.formats = parsed.format
    config.plugin_url_template = parsed.plugin_url_template

    # Load the corpus
    try:
        corpus = load_corpus(Path(parsed.manifest))
    except RepositoryError as e:
        print(f"Error loading manifest: {e}", file=sys.stderr)
        return 1

    # Scan it
    coordinator = ScanCoordinator.from_config(
        config,
        extractor=SourceExtractor(),
        metadata=ManifestMetadataProvider(corpus, config.plugin_url_template),
    )
    try:
        report = coordinator.run(corpus)
    except ScanError as e:
        print(f"Error scanning core: {e}", file=sys.stderr)
        return 1
    except DuplicateDefinitionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Generate output
    outputs = {}
    try:
        for fmt in config.formats:
            if fmt == "json":
                outputs[fmt] = to_json(report.graph, report.registry)
            elif fmt == "confluence":
                outputs[fmt] = to_confluence(report.graph, report.registry)
            elif fmt == "mermaid":
                outputs[fmt] = to_mermaid(
                    report.graph,
                    report.registry,
                    orientation=parsed.orientation,
                    group_by_module=parsed.group_by_module,
                )
            else:  # ascii
                outputs[fmt] = to_ascii(
                    report.graph,
                    report.registry,
                    style=parsed.ascii_style,
                    include_orphans=parsed.show_undefined,
                )
    except IndexerError as e:
        print(f"Error generating output: {e}", file=sys.stderr)
        return 1

    # Write output
    output_dir = Path(config.output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for fmt, output in outputs.items():
            output_path = output_dir / OUTPUT_FILES[fmt]
            output_path.write_text(output, encoding="utf-8")
            print(f"Output written to: {output_path}", file=sys.stderr)
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    if report.failures:
        print(
            f"{len(report.failures)} plugin(s) could not be scanned: "
            + ", ".join(f.artifact.gav_id for f in report.failures),
            file=sys.stderr,
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
