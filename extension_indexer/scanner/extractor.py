"""
Extension point extraction from Python sources.

A module declares an extension point by subclassing a marker class
(``ExtensionPoint`` by default) and contributes an implementation by
decorating a subclass with an extension decorator (``@extension`` by
default). Extraction is read-only: sources are parsed, never imported.
"""

import ast
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set

from extension_indexer.errors import ScanError
from extension_indexer.graph.model import Artifact, Extension
from .discovery import iter_source_files, module_name_for
from .resolver import build_import_table, resolve_name

logger = logging.getLogger(__name__)


DEFAULT_MARKERS = ("ExtensionPoint",)
DEFAULT_DECORATORS = ("extension", "Extension")


@dataclass
class _ClassInfo:
    """A class statement found in one source file."""
    qualified_name: str
    bases: List[str]
    is_definition: bool
    is_extension: bool
    documentation: str


class SourceExtractor:
    """
    Finds extension point definitions and implementations in a module's sources.

    Stateless apart from its configuration, so one instance may be shared by
    every worker of a scan.
    """

    def __init__(
        self,
        markers: Sequence[str] = DEFAULT_MARKERS,
        decorators: Sequence[str] = DEFAULT_DECORATORS,
    ):
        self.markers = set(markers)
        self.decorators = set(decorators)

    def extract(self, artifact: Artifact) -> List[Extension]:
        """
        Extract every extension relationship declared by an artifact.

        Args:
            artifact: The module to scan; its ``path`` must be a directory.

        Returns:
            Extensions in source order.

        Raises:
            ScanError: If the sources are missing or a file cannot be parsed.
        """
        root = artifact.path
        if root is None or not Path(root).is_dir():
            raise ScanError(f"No source directory for {artifact.gav_id}: {root}")

        classes: Dict[str, _ClassInfo] = {}
        for file_path in iter_source_files(Path(root)):
            for info in self._scan_file(file_path, Path(root)):
                classes[info.qualified_name] = info

        extensions: List[Extension] = []
        for info in classes.values():
            if info.is_definition:
                extensions.append(Extension(
                    artifact=artifact,
                    implementation=info.qualified_name,
                    extension_point=info.qualified_name,
                    is_definition=True,
                    documentation=info.documentation,
                ))
            if info.is_extension:
                for extension_point in _extension_points_of(info, classes, self.markers):
                    extensions.append(Extension(
                        artifact=artifact,
                        implementation=info.qualified_name,
                        extension_point=extension_point,
                        documentation=info.documentation,
                    ))

        logger.debug("Extracted %d extensions from %d classes in %s", len(extensions), len(classes), artifact.gav_id)
        return extensions

    def _scan_file(self, file_path: Path, root: Path) -> List[_ClassInfo]:
        """Parse one file and describe each class statement in it."""
        try:
            content = file_path.read_text(encoding="utf-8")
            tree = ast.parse(content, filename=str(file_path))
        except (OSError, UnicodeDecodeError, SyntaxError, ValueError) as e:
            raise ScanError(f"Unable to parse {file_path}: {e}") from e

        module_name = module_name_for(file_path, root)
        is_package = file_path.name == "__init__.py"
        imports = build_import_table(tree, module_name, is_package)

        class_nodes = list(_iter_classes(tree.body, module_name))
        local_names = {name for name, _ in class_nodes}

        infos = []
        for qualified_name, node in class_nodes:
            bases = [resolve_name(b, imports, module_name, local_names) for b in node.bases]
            bases = [b for b in bases if b]
            decorators = [resolve_name(d, imports, module_name, local_names) for d in node.decorator_list]
            infos.append(_ClassInfo(
                qualified_name=qualified_name,
                bases=[b for b in bases if _short_name(b) not in self.markers],
                is_definition=any(_short_name(b) in self.markers for b in bases),
                is_extension=any(d and _short_name(d) in self.decorators for d in decorators),
                documentation=ast.get_docstring(node) or "",
            ))
        return infos


def _iter_classes(body: Iterable[ast.stmt], prefix: str):
    """Yield (qualified name, node) for classes, descending into class bodies only."""
    for node in body:
        if isinstance(node, ast.ClassDef):
            qualified_name = f"{prefix}.{node.name}" if prefix else node.name
            yield qualified_name, node
            yield from _iter_classes(node.body, qualified_name)


def _extension_points_of(info: _ClassInfo, classes: Dict[str, _ClassInfo], markers: Set[str]) -> List[str]:
    """
    Collect the extension points an implementation plugs into.

    Every direct base counts. Bases defined in the same module are followed
    up to the first definition on each path, so an implementation of an
    abstract helper class is attached to the extension point above it too.
    """
    found: List[str] = []
    seen: Set[str] = set()
    pending = list(info.bases)

    while pending:
        name = pending.pop(0)
        if name in seen or name == info.qualified_name:
            continue
        seen.add(name)
        found.append(name)

        local = classes.get(name)
        if local is not None and not local.is_definition:
            pending.extend(local.bases)

    return found


def _short_name(qualified_name: Optional[str]) -> str:
    return qualified_name.rsplit(".", 1)[-1] if qualified_name else ""
