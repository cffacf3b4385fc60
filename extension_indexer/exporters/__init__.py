"""Exporters for converting the extension graph to various output formats."""

from .aggregate import build_index, collect_artifacts, collect_extension_points, group_by_module
from .json_exporter import to_json
from .confluence_exporter import to_confluence
from .ascii_exporter import to_ascii
from .mermaid_exporter import to_mermaid

__all__ = [
    "build_index",
    "collect_artifacts",
    "collect_extension_points",
    "group_by_module",
    "to_json",
    "to_confluence",
    "to_ascii",
    "to_mermaid",
]
