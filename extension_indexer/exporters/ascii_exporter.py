"""ASCII tree-style exporter for the extension catalogue."""

from typing import List, Tuple

from extension_indexer.graph.model import Extension, ExtensionGraph, Family
from extension_indexer.graph.modules import ModuleRegistry
from .aggregate import group_by_module


# Unicode tree characters
UNICODE_BRANCH = "├── "
UNICODE_LAST = "└── "
UNICODE_VERTICAL = "│   "
UNICODE_SPACE = "    "

# ASCII fallback characters
ASCII_BRANCH = "|-- "
ASCII_LAST = "\\-- "
ASCII_VERTICAL = "|   "
ASCII_SPACE = "    "

NO_IMPLEMENTATION = "(no known implementation)"
ORPHAN_HEADING = "Undefined extension points"


def to_ascii(
    graph: ExtensionGraph,
    registry: ModuleRegistry,
    style: str = "tree",
    include_orphans: bool = False,
) -> str:
    """
    Convert the extension catalogue to an ASCII tree.

    Each defining module is a root, its extension points are children and
    their implementations are grandchildren, labelled with the module that
    contributes them.

    Args:
        graph: The populated extension graph.
        registry: The modules that were scanned.
        style: Output style - "tree" (Unicode) or "ascii" (pure ASCII).
        include_orphans: If True, append the implementations whose extension
            point was not found in any scanned module, marked [UNDEFINED].

    Returns:
        ASCII tree string.
    """
    if style == "ascii":
        chars = (ASCII_BRANCH, ASCII_LAST, ASCII_VERTICAL, ASCII_SPACE)
    else:
        chars = (UNICODE_BRANCH, UNICODE_LAST, UNICODE_VERTICAL, UNICODE_SPACE)

    lines: List[str] = []
    groups = group_by_module(graph, registry)

    for i, (module, families) in enumerate(groups):
        lines.append(f"{module.display_name} ({module.artifact.gav_id})")
        for j, family in enumerate(families):
            _render_family(family, registry, j == len(families) - 1, chars, lines, mark_undefined=False)

        # Blank line between module trees (except after last)
        if i < len(groups) - 1:
            lines.append("")

    if include_orphans:
        orphans = graph.orphans()
        if orphans:
            if lines:
                lines.append("")
            lines.append(ORPHAN_HEADING)
            for j, family in enumerate(orphans):
                _render_family(family, registry, j == len(orphans) - 1, chars, lines, mark_undefined=True)

    return "\n".join(lines)


def _render_family(
    family: Family,
    registry: ModuleRegistry,
    is_last: bool,
    chars: Tuple[str, str, str, str],
    lines: List[str],
    mark_undefined: bool,
) -> None:
    """
    Render one extension point and its implementations.

    Args:
        family: The family to render.
        registry: Used to label implementations with their module.
        is_last: Whether this is the last extension point of its module.
        chars: Character set (branch, last, vertical, space).
        lines: Output lines list (modified in place).
        mark_undefined: If True, tag the extension point as [UNDEFINED].
    """
    branch, last, vertical, space = chars

    marker = " [UNDEFINED]" if mark_undefined else ""
    lines.append(f"{last if is_last else branch}{family.name}{marker}")

    prefix = space if is_last else vertical
    implementations = family.sorted_implementations()
    if not implementations:
        lines.append(f"{prefix}{last}{NO_IMPLEMENTATION}")
        return

    for k, impl in enumerate(implementations):
        connector = last if k == len(implementations) - 1 else branch
        lines.append(f"{prefix}{connector}{impl.implementation} [{_module_label(impl, registry)}]")


def _module_label(extension: Extension, registry: ModuleRegistry) -> str:
    """Get the display name of the module an extension came from."""
    return registry.require(extension.artifact).display_name
