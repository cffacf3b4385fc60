"""Scan coordinator that drives extraction and graph construction."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Union

from extension_indexer.config import IndexerConfig, DEFAULT_CORE_LINK, DEFAULT_CORE_NAME, DEFAULT_WORKERS
from extension_indexer.errors import DuplicateDefinitionError
from extension_indexer.graph.model import Artifact, Extension, ExtensionGraph
from extension_indexer.graph.modules import Module, ModuleRegistry, platform_module, plugin_module
from .metadata import DisplayInfo
from .repository import Corpus

logger = logging.getLogger(__name__)


class Extractor(Protocol):
    def extract(self, artifact: Artifact) -> List[Extension]: ...


class MetadataProvider(Protocol):
    def resolve(self, artifact: Artifact) -> DisplayInfo: ...


@dataclass(frozen=True)
class ScanSuccess:
    """A plugin that was scanned and registered."""
    artifact: Artifact
    module: Module
    extension_count: int

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ScanFailure:
    """A plugin whose scan failed; it contributes nothing to the index."""
    artifact: Artifact
    error: Exception

    @property
    def ok(self) -> bool:
        return False


ScanResult = Union[ScanSuccess, ScanFailure]


@dataclass
class ScanReport:
    """Outcome of a full run: the shared state plus one result per plugin."""
    graph: ExtensionGraph
    registry: ModuleRegistry
    core: Module
    results: List[ScanResult] = field(default_factory=list)

    @property
    def successes(self) -> List[ScanSuccess]:
        return [r for r in self.results if isinstance(r, ScanSuccess)]

    @property
    def failures(self) -> List[ScanFailure]:
        return [r for r in self.results if isinstance(r, ScanFailure)]


class ScanCoordinator:
    """
    Scans the platform core, then every plugin on a bounded thread pool.

    The core is scanned and registered on the calling thread before any
    plugin task is submitted. Each plugin task extracts and resolves
    metadata before touching shared state, so a plugin that fails leaves no
    trace in the graph or the registry. Scan and metadata failures are
    logged and returned as ``ScanFailure``; a duplicate definition is not a
    scan failure and aborts the run once every task has finished.
    """

    def __init__(
        self,
        extractor: Extractor,
        metadata: MetadataProvider,
        max_workers: int = DEFAULT_WORKERS,
        core_name: str = DEFAULT_CORE_NAME,
        core_url: str = "",
        core_link: str = DEFAULT_CORE_LINK,
        limit: Optional[int] = None,
        graph: Optional[ExtensionGraph] = None,
        registry: Optional[ModuleRegistry] = None,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        if limit is not None and limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        self.extractor = extractor
        self.metadata = metadata
        self.max_workers = max_workers
        self.core_name = core_name
        self.core_url = core_url
        self.core_link = core_link
        self.limit = limit
        self.graph = graph if graph is not None else ExtensionGraph()
        self.registry = registry if registry is not None else ModuleRegistry()

    @classmethod
    def from_config(cls, config: IndexerConfig, extractor: Extractor, metadata: MetadataProvider) -> "ScanCoordinator":
        return cls(
            extractor,
            metadata,
            max_workers=config.workers,
            core_name=config.core_name,
            core_url=config.core_url,
            core_link=config.core_link,
            limit=config.limit,
        )

    def run(self, corpus: Corpus) -> ScanReport:
        """
        Scan a whole corpus.

        Args:
            corpus: The core and plugins to scan.

        Returns:
            The populated graph and registry with one result per plugin, in
            the order the plugins were submitted.

        Raises:
            ScanError: If the core itself cannot be scanned.
            DuplicateDefinitionError: If an extension point was defined twice.
        """
        listed = corpus.metadata_for(corpus.core)
        core = self.scan_core(
            corpus.core,
            url=listed.url or self.core_url,
            display_name=listed.title or self.core_name,
        )

        plugins = corpus.plugins if self.limit is None else corpus.plugins[: self.limit]
        results: List[ScanResult] = []
        violations: List[DuplicateDefinitionError] = []

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="scan") as executor:
            futures = [executor.submit(self.scan_plugin, plugin) for plugin in plugins]
            for future in futures:
                try:
                    results.append(future.result())
                except DuplicateDefinitionError as e:
                    logger.error("%s", e)
                    violations.append(e)

        if violations:
            raise violations[0]

        # Reports follow the scan sequence, not the order plugin threads finished in
        self.registry.arrange([corpus.core] + [r.artifact for r in results if r.ok])

        report = ScanReport(self.graph, self.registry, core, results)
        logger.info(
            "Scanned %d plugins: %d succeeded, %d failed; %d extension point families",
            len(results), len(report.successes), len(report.failures), len(self.graph),
        )
        return report

    def scan_core(self, artifact: Artifact, url: str, display_name: str) -> Module:
        """Scan and register the platform core on the calling thread."""
        logger.info("Scanning core %s", artifact.gav_id)
        extensions = self.extractor.extract(artifact)
        self.graph.record_all(extensions)

        module = platform_module(artifact, url, display_name, self.core_link)
        self.registry.put(artifact, module)
        return module

    def scan_plugin(self, artifact: Artifact) -> ScanResult:
        """
        Scan one plugin and fold it into the shared graph and registry.

        Runs on a worker thread. Never raises except for a duplicate
        definition.
        """
        logger.info("Scanning %s", artifact.artifact_id)
        try:
            extensions = self.extractor.extract(artifact)
            info = self.metadata.resolve(artifact)

            module = plugin_module(artifact, info.url, info.display_name)
            self.registry.put(artifact, module)
            count = self.graph.record_all(extensions)
        except DuplicateDefinitionError:
            raise
        except Exception as e:
            logger.exception("Failed to process %s", artifact.gav_id)
            return ScanFailure(artifact, e)

        return ScanSuccess(artifact, module, count)
