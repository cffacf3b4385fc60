"""Mermaid flowchart exporter for the extension graph."""

import re
from typing import Dict, List, Set

from extension_indexer.graph.model import ExtensionGraph, Family
from extension_indexer.graph.modules import Module, ModuleRegistry


def to_mermaid(
    graph: ExtensionGraph,
    registry: ModuleRegistry,
    orientation: str = "LR",
    group_by_module: bool = False,
) -> str:
    """
    Convert the extension graph to Mermaid flowchart syntax.

    Extension points are drawn as stadium nodes, implementations as boxes,
    with an edge from each implementation to the extension point it plugs
    into. Only families with a definition are drawn.

    Args:
        graph: The populated extension graph.
        registry: The modules that were scanned.
        orientation: Flowchart orientation (LR, TD, TB, RL, BT).
        group_by_module: If True, wrap each module's types in a subgraph.

    Returns:
        Mermaid flowchart string.
    """
    lines = [f"flowchart {orientation}"]

    families = graph.complete_families()
    node_ids = _build_node_ids(families)

    if group_by_module:
        lines.extend(_generate_grouped_mermaid(families, registry, node_ids))
    else:
        lines.extend(_generate_flat_mermaid(families, node_ids))

    lines.append("")
    lines.extend(_generate_edges(families, node_ids))

    return "\n".join(lines)


def _build_node_ids(families: List[Family]) -> Dict[str, str]:
    """Assign each qualified type name a unique Mermaid node ID."""
    node_ids: Dict[str, str] = {}
    used: Set[str] = set()
    names = []
    for family in families:
        names.append(family.name)
        names.extend(impl.implementation for impl in family.implementations)

    for name in sorted(set(names)):
        base = _sanitize_id(name)
        node_id = base
        counter = 2
        while node_id in used:
            node_id = f"{base}_{counter}"
            counter += 1
        used.add(node_id)
        node_ids[name] = node_id

    return node_ids


def _generate_flat_mermaid(families: List[Family], node_ids: Dict[str, str]) -> List[str]:
    """Generate flat (non-grouped) node definitions."""
    lines = []
    implementations: Set[str] = set()

    for family in sorted(families, key=lambda f: f.name):
        lines.append(f'    {node_ids[family.name]}(["{family.name}"])')
        implementations.update(impl.implementation for impl in family.implementations)

    for name in sorted(implementations - {f.name for f in families}):
        lines.append(f'    {node_ids[name]}["{name}"]')

    return lines


def _generate_grouped_mermaid(
    families: List[Family],
    registry: ModuleRegistry,
    node_ids: Dict[str, str],
) -> List[str]:
    """Generate node definitions wrapped in one subgraph per module."""
    lines = []
    extension_points = {f.name for f in families}

    # Each type is placed in the module that contributed it first
    owners: Dict[Module, List[str]] = {}
    placed: Set[str] = set()
    for module, owned in _types_by_module(families, registry):
        for name in owned:
            if name not in placed:
                owners.setdefault(module, []).append(name)
                placed.add(name)

    for module, names in owners.items():
        subgraph_id = "module_" + _sanitize_id(module.artifact.gav_id)
        lines.append(f'    subgraph {subgraph_id}["{module.display_name}"]')
        for name in names:
            if name in extension_points:
                lines.append(f'        {node_ids[name]}(["{name}"])')
            else:
                lines.append(f'        {node_ids[name]}["{name}"]')
        lines.append("    end")
        lines.append("")

    return lines


def _types_by_module(families: List[Family], registry: ModuleRegistry):
    """
    Yield (module, type names) for definitions and implementations alike.

    Unlike the report grouping, implementations are attributed to the module
    they were found in rather than to the module of their extension point.
    """
    by_module: Dict[Module, List[str]] = {}
    for family in families:
        module = registry.require(family.definition.artifact)
        by_module.setdefault(module, []).append(family.name)
        for impl in family.sorted_implementations():
            impl_module = registry.require(impl.artifact)
            by_module.setdefault(impl_module, []).append(impl.implementation)

    for module in registry.modules():
        if module in by_module:
            yield module, by_module[module]


def _generate_edges(families: List[Family], node_ids: Dict[str, str]) -> List[str]:
    lines = []
    seen: Set[str] = set()
    for family in sorted(families, key=lambda f: f.name):
        target_id = node_ids[family.name]
        for impl in family.sorted_implementations():
            edge = f"    {node_ids[impl.implementation]} --> {target_id}"
            if edge not in seen:
                seen.add(edge)
                lines.append(edge)
    return lines


def _sanitize_id(value: str) -> str:
    """Sanitize a string to be a valid Mermaid ID."""
    # Replace separators and dots with underscores
    sanitized = re.sub(r"[/\\.\-:]", "_", value)
    # Remove any remaining invalid characters
    sanitized = re.sub(r"[^a-zA-Z0-9_]", "", sanitized)
    # Ensure it starts with a letter
    if sanitized and not sanitized[0].isalpha():
        sanitized = "n_" + sanitized
    return sanitized or "unknown"
