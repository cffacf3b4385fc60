"""Scanner module for corpus loading, extension extraction and scan coordination."""

from .discovery import iter_source_files, module_name_for
from .parser import parse_manifest
from .resolver import resolve_module_path, resolve_name
from .extractor import SourceExtractor
from .repository import Corpus, PluginMetadata, load_corpus
from .metadata import DisplayInfo, ManifestMetadataProvider
from .builder import ScanCoordinator, ScanFailure, ScanReport, ScanSuccess

__all__ = [
    "iter_source_files",
    "module_name_for",
    "parse_manifest",
    "resolve_module_path",
    "resolve_name",
    "SourceExtractor",
    "Corpus",
    "PluginMetadata",
    "load_corpus",
    "DisplayInfo",
    "ManifestMetadataProvider",
    "ScanCoordinator",
    "ScanFailure",
    "ScanReport",
    "ScanSuccess",
]
