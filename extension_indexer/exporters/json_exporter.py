"""JSON exporter for the extension index (machine-friendly format)."""

import json

from extension_indexer.graph.model import ExtensionGraph
from extension_indexer.graph.modules import ModuleRegistry
from .aggregate import build_index


def to_json(
    graph: ExtensionGraph,
    registry: ModuleRegistry,
    indent: int = 2,
) -> str:
    """
    Convert the extension graph to the JSON index document.

    Args:
        graph: The populated extension graph.
        registry: The modules that were scanned.
        indent: JSON indentation level.

    Returns:
        JSON string with ``extensionPoints`` and ``artifacts`` sections.
    """
    return json.dumps(build_index(graph, registry), indent=indent, sort_keys=True)
