"""Confluence wiki markup exporter for the extension catalogue."""

import re
from typing import List

from extension_indexer.graph.model import Extension, ExtensionGraph, Family
from extension_indexer.graph.modules import ModuleRegistry, wiki_link
from .aggregate import group_by_module


NO_IMPLEMENTATION = "(No known implementation)"


def to_confluence(graph: ExtensionGraph, registry: ModuleRegistry) -> str:
    """
    Render the extension catalogue as a Confluence wiki page.

    One top-level section per defining module, one sub-section per extension
    point listing its implementations.

    Args:
        graph: The populated extension graph.
        registry: The modules that were scanned.

    Returns:
        Wiki markup string.

    Raises:
        UnknownModuleError: If an extension belongs to an unregistered artifact.
    """
    lines: List[str] = ["{toc:maxLevel=2}", ""]

    for module, families in group_by_module(graph, registry):
        lines.append(f"h1.Extension Points in {wiki_link(module)}")
        for family in families:
            _render_family(family, registry, lines)

    return "\n".join(lines) + "\n"


def _render_family(family: Family, registry: ModuleRegistry, lines: List[str]) -> None:
    lines.append(f"h2.{family.name}")
    lines.append(_synopsis(family.definition, registry))
    lines.append(confluence_doc(family.definition.documentation))
    lines.append("")
    lines.append("{expand:title=Implementations}")

    implementations = family.sorted_implementations()
    for impl in implementations:
        lines.append(f"h3.{impl.implementation}")
        lines.append(_synopsis(impl, registry))
        lines.append(confluence_doc(impl.documentation))
    if not implementations:
        lines.append(NO_IMPLEMENTATION)

    lines.append("{expand}")
    lines.append("")


def _synopsis(extension: Extension, registry: ModuleRegistry) -> str:
    module = registry.require(extension.artifact)
    return f"*Defined in*: {wiki_link(module)}  ([javadoc|{extension.implementation}@javadoc])\n"


def confluence_doc(text: str) -> str:
    """Escape Confluence markup characters in a docstring."""
    if not text:
        return ""
    return re.sub(r"([{}\[\]|*_])", r"\\\1", text.strip())
