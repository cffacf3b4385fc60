"""Tests for the scan coordinator."""

import logging
import threading
import time

import pytest

from extension_indexer.config import IndexerConfig
from extension_indexer.errors import DuplicateDefinitionError, MetadataError, ScanError
from extension_indexer.exporters.aggregate import build_index
from extension_indexer.exporters.confluence_exporter import to_confluence
from extension_indexer.graph.model import Artifact, Extension
from extension_indexer.graph.modules import ModuleKind
from extension_indexer.scanner.builder import ScanCoordinator, ScanFailure, ScanSuccess
from extension_indexer.scanner.metadata import DisplayInfo
from extension_indexer.scanner.repository import Corpus, PluginMetadata


CORE = Artifact("org.example", "core", "2.0")


def plugin(name):
    return Artifact("org.example.plugins", name, "1.0")


class StubExtractor:
    """Returns canned extensions per artifact; raises for the ones told to fail."""

    def __init__(self, extensions=None, failing=(), delay=0.0, on_extract=None):
        self.extensions = extensions or {}
        self.failing = set(failing)
        self.delay = delay
        self.on_extract = on_extract
        self.calls = []
        self._lock = threading.Lock()

    def extract(self, artifact):
        with self._lock:
            self.calls.append(artifact)
        if self.on_extract is not None:
            self.on_extract(artifact)
        if self.delay:
            time.sleep(self.delay)
        if artifact.artifact_id in self.failing:
            raise ScanError(f"cannot read {artifact.artifact_id}")
        return list(self.extensions.get(artifact.artifact_id, []))


class StubMetadata:
    """Derives display metadata from the artifact id."""

    def __init__(self, failing=()):
        self.failing = set(failing)

    def resolve(self, artifact):
        if artifact.artifact_id in self.failing:
            raise MetadataError(f"no page for {artifact.artifact_id}")
        return DisplayInfo(
            url=f"https://wiki.example.org/{artifact.artifact_id}",
            display_name=artifact.artifact_id.upper(),
        )


def definition(name, artifact):
    return Extension(artifact, name, name, is_definition=True)


def implementation(impl, extension_point, artifact):
    return Extension(artifact, impl, extension_point)


class TestScanCoordinator:
    """Tests for ScanCoordinator."""

    def test_end_to_end_example(self, caplog):
        """Test core definition, one implementing plugin, one empty, one failing."""
        p1, p2, p3 = plugin("p1"), plugin("p2"), plugin("p3")
        extractor = StubExtractor(
            extensions={
                "core": [definition("Ext.A", CORE)],
                "p1": [implementation("P1.Impl", "Ext.A", p1)],
            },
            failing={"p3"},
        )
        coordinator = ScanCoordinator(extractor, StubMetadata(), max_workers=2)

        with caplog.at_level(logging.ERROR):
            report = coordinator.run(Corpus(CORE, [p1, p2, p3]))

        index = build_index(report.graph, report.registry)
        assert list(index["extensionPoints"]) == ["Ext.A"]
        impls = index["extensionPoints"]["Ext.A"]["implementations"]
        assert [i["implementation"] for i in impls] == ["P1.Impl"]
        assert set(index["artifacts"]) == {CORE.gav_id, p1.gav_id, p2.gav_id}

        assert [f.artifact for f in report.failures] == [p3]
        assert isinstance(report.failures[0].error, ScanError)
        assert p3.gav_id in caplog.text

    def test_results_in_submission_order(self):
        """Test that each plugin yields exactly one result, in submission order."""
        plugins = [plugin(f"p{i}") for i in range(6)]
        extractor = StubExtractor(failing={"p2", "p4"})
        coordinator = ScanCoordinator(extractor, StubMetadata(), max_workers=3)

        report = coordinator.run(Corpus(CORE, plugins))

        assert [r.artifact for r in report.results] == plugins
        assert [r.ok for r in report.results] == [True, True, False, True, False, True]
        assert all(isinstance(r, ScanSuccess) for r in report.successes)
        assert all(isinstance(r, ScanFailure) for r in report.failures)

    def test_core_registered_before_plugins(self):
        """Test that the core is in the registry before any plugin task starts."""
        seen_core = []
        coordinator = None

        def check(artifact):
            if artifact != CORE:
                seen_core.append(CORE in coordinator.registry)

        extractor = StubExtractor(on_extract=check)
        coordinator = ScanCoordinator(extractor, StubMetadata(), max_workers=4)

        coordinator.run(Corpus(CORE, [plugin(f"p{i}") for i in range(8)]))

        assert extractor.calls[0] == CORE
        assert seen_core == [True] * 8

    def test_core_module(self):
        """Test the core's display name, URL and link target."""
        coordinator = ScanCoordinator(
            StubExtractor(),
            StubMetadata(),
            core_name="Jenkins Core",
            core_url="https://github.com/example/core",
            core_link="Building Jenkins",
        )

        report = coordinator.run(Corpus(CORE, []))

        core = report.registry.require(CORE)
        assert core is report.core
        assert core.kind is ModuleKind.PLATFORM
        assert core.display_name == "Jenkins Core"
        assert core.url == "https://github.com/example/core"
        assert core.link_target == "Building Jenkins"

    def test_core_metadata_from_manifest(self):
        """Test that manifest title and URL override the configured core defaults."""
        corpus = Corpus(CORE, [], {
            (CORE.group_id, CORE.artifact_id): PluginMetadata("Listed Core", "https://core.example.org"),
        })
        coordinator = ScanCoordinator(StubExtractor(), StubMetadata(), core_name="Default")

        core = coordinator.run(corpus).core

        assert core.display_name == "Listed Core"
        assert core.url == "https://core.example.org"

    def test_core_failure_propagates(self):
        """Test that a core scan failure aborts the run."""
        coordinator = ScanCoordinator(StubExtractor(failing={"core"}), StubMetadata())

        with pytest.raises(ScanError):
            coordinator.run(Corpus(CORE, [plugin("p1")]))

    def test_metadata_failure_contributes_nothing(self):
        """Test that a plugin whose metadata lookup fails leaves no trace."""
        p1 = plugin("p1")
        extractor = StubExtractor(extensions={
            "core": [definition("Ext.A", CORE)],
            "p1": [implementation("P1.Impl", "Ext.A", p1)],
        })
        coordinator = ScanCoordinator(extractor, StubMetadata(failing={"p1"}))

        report = coordinator.run(Corpus(CORE, [p1]))

        assert p1 not in report.registry
        assert report.graph.get("Ext.A").implementations == []
        assert isinstance(report.failures[0].error, MetadataError)

    def test_duplicate_definition_aborts(self):
        """Test that two modules defining the same extension point abort the run."""
        p1, p2 = plugin("p1"), plugin("p2")
        extractor = StubExtractor(extensions={
            "core": [definition("Ext.A", CORE)],
            "p1": [definition("Ext.A", p1)],
            "p2": [definition("Ext.B", p2)],
        })
        coordinator = ScanCoordinator(extractor, StubMetadata(), max_workers=2)

        with pytest.raises(DuplicateDefinitionError):
            coordinator.run(Corpus(CORE, [p1, p2]))

        # Every task still ran to completion
        assert {a.artifact_id for a in extractor.calls} == {"core", "p1", "p2"}

    def test_concurrent_matches_sequential(self):
        """Test that a pool smaller than the corpus yields the sequential graph."""
        plugins = [plugin(f"p{i}") for i in range(24)]
        extensions = {"core": [definition(f"Ext.{k}", CORE) for k in range(5)]}
        for i, p in enumerate(plugins):
            extensions[p.artifact_id] = [
                implementation(f"P{i}.Impl{k}", f"Ext.{k}", p) for k in range(5)
            ] + [implementation(f"P{i}.Impl0", "Ext.0", p)]

        def snapshot(report):
            return {
                f.name: (f.definition, sorted(e.implementation for e in f.implementations))
                for f in report.graph.families()
            }

        sequential = ScanCoordinator(StubExtractor(extensions), StubMetadata(), max_workers=1)
        concurrent = ScanCoordinator(StubExtractor(extensions, delay=0.001), StubMetadata(), max_workers=4)

        expected = snapshot(sequential.run(Corpus(CORE, plugins)))
        actual = snapshot(concurrent.run(Corpus(CORE, plugins)))

        assert actual == expected
        assert len(actual["Ext.0"][1]) == 24 * 2

    def test_bounded_concurrency(self):
        """Test that no more than max_workers scans run at once."""
        active = []
        peak = []
        lock = threading.Lock()

        def track(artifact):
            with lock:
                active.append(artifact)
                peak.append(len(active))
            time.sleep(0.01)
            with lock:
                active.remove(artifact)

        coordinator = ScanCoordinator(StubExtractor(on_extract=track), StubMetadata(), max_workers=3)
        coordinator.run(Corpus(CORE, [plugin(f"p{i}") for i in range(12)]))

        assert max(peak) <= 3

    def test_limit(self):
        """Test scanning only the first plugins."""
        plugins = [plugin(f"p{i}") for i in range(5)]
        extractor = StubExtractor()
        coordinator = ScanCoordinator(extractor, StubMetadata(), limit=2)

        report = coordinator.run(Corpus(CORE, plugins))

        assert [r.artifact for r in report.results] == plugins[:2]
        assert len(extractor.calls) == 3

    def test_from_config(self):
        """Test building a coordinator from configuration."""
        config = IndexerConfig(workers=7, core_name="Core", core_link="Home", limit=3)

        coordinator = ScanCoordinator.from_config(config, StubExtractor(), StubMetadata())

        assert coordinator.max_workers == 7
        assert coordinator.core_name == "Core"
        assert coordinator.core_link == "Home"
        assert coordinator.limit == 3

    def test_invalid_workers(self):
        """Test that the pool needs at least one worker."""
        with pytest.raises(ValueError):
            ScanCoordinator(StubExtractor(), StubMetadata(), max_workers=0)

    def test_negative_limit_rejected(self):
        """Test that a negative plugin limit is rejected."""
        with pytest.raises(ValueError):
            ScanCoordinator(StubExtractor(), StubMetadata(), limit=-1)

    def test_zero_limit_scans_core_only(self):
        """Test that a limit of zero scans no plugins."""
        extractor = StubExtractor()
        coordinator = ScanCoordinator(extractor, StubMetadata(), limit=0)

        report = coordinator.run(Corpus(CORE, [plugin("p0"), plugin("p1")]))

        assert report.results == []
        assert extractor.calls == [CORE]

    def test_report_modules_follow_scan_sequence(self):
        """Test that a slow first plugin still comes first in the reports."""
        p0, p1 = plugin("p0"), plugin("p1")

        def slow_first(artifact):
            if artifact == p0:
                time.sleep(0.2)

        extractor = StubExtractor(
            extensions={
                "p0": [definition("P0.Ext", p0)],
                "p1": [definition("P1.Ext", p1)],
            },
            on_extract=slow_first,
        )
        coordinator = ScanCoordinator(extractor, StubMetadata(), max_workers=2)

        report = coordinator.run(Corpus(CORE, [p0, p1]))

        assert [m.artifact for m in report.registry.modules()] == [CORE, p0, p1]
        page = to_confluence(report.graph, report.registry)
        headings = [line for line in page.splitlines() if line.startswith("h1.")]
        assert headings == ["h1.Extension Points in [P0]", "h1.Extension Points in [P1]"]
