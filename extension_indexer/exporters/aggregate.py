"""Aggregation of the scanned graph into the structures writers consume."""

import logging
from typing import Any, Dict, List, Tuple

from extension_indexer.graph.model import ExtensionGraph, Family
from extension_indexer.graph.modules import Module, ModuleRegistry

logger = logging.getLogger(__name__)


def collect_extension_points(graph: ExtensionGraph) -> Dict[str, Dict[str, Any]]:
    """
    Build the ``extensionPoints`` section of the index.

    Families whose extension point was never found are left out.

    Args:
        graph: The populated extension graph.

    Returns:
        Mapping from extension point name to its definition fields plus an
        ``implementations`` list sorted by implementing type.
    """
    extension_points: Dict[str, Dict[str, Any]] = {}
    skipped = 0

    for family in graph.families():
        if not family.is_complete:
            logger.debug(
                "Skipping undefined extension point %s (%d implementations)",
                family.name, len(family.implementations),
            )
            skipped += 1
            continue

        entry = family.definition.to_dict()
        entry["implementations"] = [impl.to_dict() for impl in family.sorted_implementations()]
        extension_points[family.name] = entry

    if skipped:
        logger.warning("Skipped %d extension points with no definition in the scanned modules", skipped)

    return extension_points


def collect_artifacts(registry: ModuleRegistry) -> Dict[str, Dict[str, Any]]:
    """Build the ``artifacts`` section of the index, keyed by GAV."""
    return {module.artifact.gav_id: module.to_dict() for module in registry.modules()}


def build_index(graph: ExtensionGraph, registry: ModuleRegistry) -> Dict[str, Any]:
    """Assemble the full index document."""
    return {
        "extensionPoints": collect_extension_points(graph),
        "artifacts": collect_artifacts(registry),
    }


def group_by_module(graph: ExtensionGraph, registry: ModuleRegistry) -> List[Tuple[Module, List[Family]]]:
    """
    Group complete families by the module that defines them.

    Modules come in registry order, so the core leads; families keep their
    discovery order. Modules that define nothing are left out.

    Raises:
        UnknownModuleError: If a definition belongs to an unregistered artifact.
    """
    by_module: Dict[Module, List[Family]] = {}
    for family in graph.complete_families():
        module = registry.require(family.definition.artifact)
        by_module.setdefault(module, []).append(family)

    return [(module, by_module[module]) for module in registry.modules() if module in by_module]
