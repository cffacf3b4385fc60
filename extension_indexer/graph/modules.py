"""Scanned modules and the registry that maps artifacts to them."""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from extension_indexer.errors import UnknownModuleError
from .model import Artifact


class ModuleKind(str, Enum):
    """What role a module plays in the corpus"""
    PLATFORM = "platform"
    PLUGIN = "plugin"


@dataclass(frozen=True)
class Module:
    """A module that was scanned for extensions."""
    artifact: Artifact
    url: str
    display_name: str
    kind: ModuleKind = ModuleKind.PLUGIN
    link_target: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gav": self.artifact.gav_id,
            "url": self.url,
            "displayName": self.display_name,
        }


def platform_module(artifact: Artifact, url: str, display_name: str, link_target: str) -> Module:
    """Build the module for the platform core."""
    return Module(artifact, url, display_name, ModuleKind.PLATFORM, link_target)


def plugin_module(artifact: Artifact, url: str, display_name: str) -> Module:
    """Build the module for a plugin."""
    return Module(artifact, url, display_name, ModuleKind.PLUGIN)


def wiki_link(module: Module) -> str:
    """
    Return a Confluence-format link pointing at a module.

    The platform core links to its fixed page; plugins link to the page
    named after them.
    """
    if module.kind is ModuleKind.PLATFORM:
        return f"[{module.display_name}|{module.link_target}]"
    return f"[{module.display_name}]"


class ModuleRegistry:
    """
    Thread-safe mapping from artifact to the module scanned for it.

    Modules come back in the order they were first registered.
    """

    def __init__(self):
        self._modules: Dict[Artifact, Module] = {}
        self._lock = threading.Lock()

    def put(self, artifact: Artifact, module: Module) -> None:
        """Register a module, replacing any earlier one for the artifact."""
        with self._lock:
            self._modules[artifact] = module

    def get(self, artifact: Artifact) -> Optional[Module]:
        with self._lock:
            return self._modules.get(artifact)

    def require(self, artifact: Artifact) -> Module:
        """
        Return the module for an artifact.

        Raises:
            UnknownModuleError: If the artifact was never registered.
        """
        module = self.get(artifact)
        if module is None:
            raise UnknownModuleError(f"Unable to find module for {artifact.gav_id}")
        return module

    def arrange(self, order: Iterable[Artifact]) -> None:
        """
        Move the given artifacts to the front, in the given order.

        Artifacts that are not registered are ignored; modules not named keep
        their relative order after the arranged ones.
        """
        with self._lock:
            arranged = {a: self._modules[a] for a in order if a in self._modules}
            for artifact, module in self._modules.items():
                arranged.setdefault(artifact, module)
            self._modules = arranged

    def modules(self) -> List[Module]:
        with self._lock:
            return list(self._modules.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._modules)

    def __contains__(self, artifact: Artifact) -> bool:
        with self._lock:
            return artifact in self._modules

    def __repr__(self) -> str:
        return f"ModuleRegistry(modules={len(self)})"
