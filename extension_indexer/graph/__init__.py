"""Shared graph state: extension families and scanned modules."""

from .model import Artifact, Extension, Family, ExtensionGraph
from .modules import Module, ModuleKind, ModuleRegistry, platform_module, plugin_module, wiki_link

__all__ = [
    "Artifact",
    "Extension",
    "Family",
    "ExtensionGraph",
    "Module",
    "ModuleKind",
    "ModuleRegistry",
    "platform_module",
    "plugin_module",
    "wiki_link",
]
