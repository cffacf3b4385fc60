"""Corpus loading: the platform core and the plugins to scan."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from extension_indexer.errors import RepositoryError
from extension_indexer.graph.model import Artifact
from .parser import parse_manifest
from .resolver import resolve_module_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PluginMetadata:
    """Display metadata listed for a module in the manifest."""
    title: Optional[str] = None
    url: Optional[str] = None


@dataclass
class Corpus:
    """
    Everything one run scans.

    ``plugins`` holds the latest release of each plugin, in manifest order.
    ``metadata`` is keyed by ``(group_id, artifact_id)``.
    """
    core: Artifact
    plugins: List[Artifact] = field(default_factory=list)
    metadata: Dict[Tuple[str, str], PluginMetadata] = field(default_factory=dict)

    def metadata_for(self, artifact: Artifact) -> PluginMetadata:
        return self.metadata.get((artifact.group_id, artifact.artifact_id), PluginMetadata())

    def __len__(self) -> int:
        return 1 + len(self.plugins)


def load_corpus(manifest_path: Path) -> Corpus:
    """
    Read the corpus manifest.

    Several entries for the same plugin make up its release history; the
    last one listed is taken as the latest release and is the only one
    scanned.

    Args:
        manifest_path: Path to a YAML, JSON or TOML manifest.

    Returns:
        The corpus to scan.

    Raises:
        RepositoryError: If the manifest is missing or malformed.
    """
    manifest_path = Path(manifest_path)
    if not manifest_path.is_file():
        raise RepositoryError(f"Manifest not found: {manifest_path}")

    data = parse_manifest(manifest_path)
    if not isinstance(data, dict):
        raise RepositoryError(f"Manifest {manifest_path} must be a mapping")

    base_dir = manifest_path.resolve().parent

    core_entry = data.get("core")
    if not isinstance(core_entry, dict):
        raise RepositoryError(f"Manifest {manifest_path} has no 'core' entry")
    core = _parse_artifact(core_entry, base_dir)

    plugin_entries = data.get("plugins", [])
    if plugin_entries is None:
        plugin_entries = []
    if not isinstance(plugin_entries, list):
        raise RepositoryError(f"'plugins' in {manifest_path} must be a list")

    latest: Dict[Tuple[str, str], Artifact] = {}
    metadata: Dict[Tuple[str, str], PluginMetadata] = {
        (core.group_id, core.artifact_id): _parse_metadata(core_entry),
    }
    for entry in plugin_entries:
        if not isinstance(entry, dict):
            raise RepositoryError(f"Plugin entry must be a mapping, got {entry!r}")
        artifact = _parse_artifact(entry, base_dir)
        key = (artifact.group_id, artifact.artifact_id)
        if key in latest:
            logger.debug("Superseding %s with %s", latest[key].gav_id, artifact.gav_id)
        # Plugins keep their first-listed position
        latest[key] = artifact
        metadata[key] = _parse_metadata(entry)

    corpus = Corpus(core=core, plugins=list(latest.values()), metadata=metadata)
    logger.info("Loaded corpus of %d modules from %s", len(corpus), manifest_path)
    return corpus


def _parse_artifact(entry: Dict[str, Any], base_dir: Path) -> Artifact:
    """Build an artifact from a manifest entry."""
    gav = entry.get("gav")
    if gav:
        parts = str(gav).split(":")
        if len(parts) != 3 or not all(parts):
            raise RepositoryError(f"Invalid coordinates {gav!r}; expected group:artifact:version")
        group_id, artifact_id, version = parts
    else:
        group_id = entry.get("group")
        artifact_id = entry.get("artifact")
        version = entry.get("version")
        if not (group_id and artifact_id and version is not None):
            raise RepositoryError(f"Entry {entry!r} needs 'gav' or 'group', 'artifact' and 'version'")

    path: Optional[Path] = None
    candidate = entry.get("path")
    if candidate:
        path = resolve_module_path(base_dir, str(candidate))
        if path is None:
            # Keep the unresolved location so the scan reports it
            path = base_dir / str(candidate)

    return Artifact(str(group_id), str(artifact_id), str(version), path)


def _parse_metadata(entry: Dict[str, Any]) -> PluginMetadata:
    title = entry.get("title")
    url = entry.get("url")
    return PluginMetadata(
        title=str(title) if title else None,
        url=str(url) if url else None,
    )
