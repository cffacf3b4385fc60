"""Graph data model for extension points and their implementations."""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from extension_indexer.errors import DuplicateDefinitionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artifact:
    """
    One versioned module of the corpus.

    Identity is the ``group:artifact:version`` coordinate; the local source
    path is carried along but does not take part in equality.
    """
    group_id: str
    artifact_id: str
    version: str
    path: Optional[Path] = field(default=None, compare=False)

    @property
    def gav_id(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def __str__(self) -> str:
        return self.gav_id


@dataclass(frozen=True)
class Extension:
    """
    One discovered relationship between a type and an extension point.

    For a definition, ``implementation`` and ``extension_point`` name the
    same type.
    """
    artifact: Artifact
    implementation: str
    extension_point: str
    is_definition: bool = False
    documentation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "extensionPoint": self.extension_point,
            "implementation": self.implementation,
            "artifact": self.artifact.gav_id,
            "isDefinition": self.is_definition,
            "documentation": self.documentation,
        }


@dataclass
class Family:
    """An extension point together with every implementation found for it."""
    name: str
    definition: Optional[Extension] = None
    implementations: List[Extension] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """A family is complete once the extension point itself was found."""
        return self.definition is not None

    def sorted_implementations(self) -> List[Extension]:
        """Implementations ordered by implementing type, duplicates kept."""
        return sorted(self.implementations, key=lambda e: (e.implementation, e.artifact.gav_id))

    def copy(self) -> "Family":
        return Family(self.name, self.definition, list(self.implementations))


class ExtensionGraph:
    """
    Extension point families keyed by the extension point's qualified name.

    Safe to record into from several threads at once. Every mutation and
    every read happens under a single lock, and reads hand out copies so no
    caller ever holds the live mapping.
    """

    def __init__(self):
        self._families: Dict[str, Family] = {}
        self._lock = threading.Lock()

    def record(self, extension: Extension) -> None:
        """
        Add one extension to the family of its extension point.

        Args:
            extension: The relationship to record.

        Raises:
            DuplicateDefinitionError: If the extension is a definition and
                the family already has one.
        """
        key = extension.extension_point
        with self._lock:
            logger.debug("Found %s as %s", extension.implementation, key)

            family = self._families.get(key)
            if family is None:
                family = self._families[key] = Family(key)

            if extension.is_definition:
                if family.definition is not None:
                    raise DuplicateDefinitionError(
                        key,
                        family.definition.artifact.gav_id,
                        extension.artifact.gav_id,
                    )
                family.definition = extension
            else:
                family.implementations.append(extension)

    def record_all(self, extensions: Iterable[Extension]) -> int:
        """Record extensions in order and return how many were recorded."""
        count = 0
        for extension in extensions:
            self.record(extension)
            count += 1
        return count

    def get(self, name: str) -> Optional[Family]:
        """Return a copy of the family for an extension point, if any."""
        with self._lock:
            family = self._families.get(name)
            return family.copy() if family is not None else None

    def families(self) -> List[Family]:
        """Return copies of all families in discovery order."""
        with self._lock:
            return [family.copy() for family in self._families.values()]

    def complete_families(self) -> List[Family]:
        """Return copies of the families that have a definition."""
        return [family for family in self.families() if family.is_complete]

    def orphans(self) -> List[Family]:
        """Return copies of the families whose extension point was never found."""
        return [family for family in self.families() if not family.is_complete]

    def __iter__(self) -> Iterator[Family]:
        return iter(self.families())

    def __len__(self) -> int:
        with self._lock:
            return len(self._families)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._families

    def __repr__(self) -> str:
        with self._lock:
            defined = sum(1 for f in self._families.values() if f.definition is not None)
            implementations = sum(len(f.implementations) for f in self._families.values())
            return (
                f"ExtensionGraph(families={len(self._families)}, "
                f"defined={defined}, implementations={implementations})"
            )
