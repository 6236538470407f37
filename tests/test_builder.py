"""Tests for building feature and repository graphs."""

import logging

import pytest

from featurelevels import (
    CycleDetectedError,
    Dependency,
    Feature,
    FeatureCatalog,
    FeatureNode,
    LevelSorter,
    MissingOriginError,
    OnCycle,
    UnresolvedDependencyError,
    build_graphs,
    compact_repository_url,
)
from featurelevels._builder import GraphBuilder, TraversalContext

REPO = "mvn:org.example/root/1.0.0/xml/features"


def _feature(name: str, *deps: str, repository: str = REPO, version: str = "1.0.0") -> Feature:
    return Feature(
        name=name,
        version=version,
        repository=repository,
        dependencies=tuple(Dependency(name=dep, version="1.0.0") for dep in deps),
    )


@pytest.fixture
def chain_catalog() -> FeatureCatalog:
    """root -> a -> b, all in the same repository."""
    return FeatureCatalog(features=[_feature("root", "a"), _feature("a", "b"), _feature("b")])


@pytest.fixture
def cyclic_catalog() -> FeatureCatalog:
    """root -> a -> b -> root."""
    return FeatureCatalog(features=[_feature("root", "a"), _feature("a", "b"), _feature("b", "root")])


class TestSameRepositoryChain:
    def test_feature_graph_has_two_edges(self, chain_catalog: FeatureCatalog) -> None:
        graphs = build_graphs(chain_catalog, "root", "1.0.0")
        assert graphs.feature_graph.edges() == [(FeatureNode("root"), FeatureNode("a")), (FeatureNode("a"), FeatureNode("b"))]

    def test_repository_graph_has_no_edges(self, chain_catalog: FeatureCatalog) -> None:
        graphs = build_graphs(chain_catalog, "root", "1.0.0")
        assert graphs.repository_graph.edges() == []
        assert graphs.repository_graph.nodes == frozenset({"org.example/root/1.0.0"})

    def test_levels_put_leaf_at_bottom(self, chain_catalog: FeatureCatalog) -> None:
        graphs = build_graphs(chain_catalog, "root", "1.0.0")
        sorter: LevelSorter[FeatureNode] = LevelSorter()
        sorter.sort(graphs.feature_graph)
        level_map = {level: {str(node) for node in nodes} for level, nodes in sorter.level_map.items()}
        assert level_map[1] == {"root"}
        assert "b" in level_map[max(level_map)]

    def test_nodes_keep_repository(self, chain_catalog: FeatureCatalog) -> None:
        graphs = build_graphs(chain_catalog, "root", "1.0.0")
        assert {node.repository for node in graphs.feature_graph.nodes} == {REPO}

    def test_default_version(self, chain_catalog: FeatureCatalog) -> None:
        graphs = build_graphs(chain_catalog, "root")
        assert len(graphs.feature_graph) == 3

    def test_standalone_root(self) -> None:
        graphs = build_graphs(FeatureCatalog(features=[_feature("solo")]), "solo")
        assert graphs.feature_graph.nodes == frozenset({FeatureNode("solo")})
        assert graphs.feature_graph.edges() == []


class TestRepositoryGraph:
    def test_cross_repository_edges(self) -> None:
        catalog = FeatureCatalog(
            features=[
                _feature("app", "core", "web", repository="mvn:org.example/app/1.0/xml/features"),
                _feature("web", "core", repository="mvn:org.example/web/1.0/xml/features"),
                _feature("core", repository="mvn:org.example/core/1.0/xml/features"),
            ],
        )
        graphs = build_graphs(catalog, "app")
        assert set(graphs.repository_graph.edges()) == {
            ("org.example/app/1.0", "org.example/core/1.0"),
            ("org.example/app/1.0", "org.example/web/1.0"),
            ("org.example/web/1.0", "org.example/core/1.0"),
        }

    def test_no_compaction(self) -> None:
        catalog = FeatureCatalog(
            features=[_feature("app", "core", repository="mvn:a/xml/features"), _feature("core", repository="mvn:b")],
        )
        graphs = build_graphs(catalog, "app", compact_repositories=False)
        assert graphs.repository_graph.edges() == [("mvn:a/xml/features", "mvn:b")]

    def test_compact_repository_url(self) -> None:
        assert compact_repository_url("mvn:org.example/core/1.0/xml/features") == "org.example/core/1.0"
        assert compact_repository_url("file:/tmp/features.xml") == "file:/tmp/features.xml"


class TestBuildErrors:
    def test_unresolved_dependency_aborts(self) -> None:
        catalog = FeatureCatalog(features=[_feature("root", "a"), _feature("a", "missing")])
        with pytest.raises(UnresolvedDependencyError, match="'missing' '1.0.0' required by 'a'"):
            build_graphs(catalog, "root")

    def test_unresolved_root(self) -> None:
        with pytest.raises(UnresolvedDependencyError, match="'nope'"):
            build_graphs(FeatureCatalog(), "nope")

    def test_missing_source_repository(self) -> None:
        catalog = FeatureCatalog(features=[_feature("root", "a", repository=""), _feature("a")])
        with pytest.raises(MissingOriginError, match="'root'"):
            build_graphs(catalog, "root")

    def test_missing_target_repository(self) -> None:
        catalog = FeatureCatalog(features=[_feature("root", "a"), _feature("a", repository="  ")])
        with pytest.raises(MissingOriginError, match="'a'"):
            build_graphs(catalog, "root")


class TestCyclePolicy:
    def test_abort_raises_before_sort(self, cyclic_catalog: FeatureCatalog) -> None:
        with pytest.raises(CycleDetectedError, match="'b' -> 'root'") as excinfo:
            build_graphs(cyclic_catalog, "root", "1.0.0")
        assert excinfo.value.graph_kind == "feature"

    def test_abort_is_default(self, cyclic_catalog: FeatureCatalog) -> None:
        with pytest.raises(CycleDetectedError):
            GraphBuilder(cyclic_catalog).build("root")

    def test_skip_and_warn_keeps_acyclic_graph(
        self,
        cyclic_catalog: FeatureCatalog,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING):
            graphs = build_graphs(cyclic_catalog, "root", on_cycle=OnCycle.SKIP_AND_WARN)

        assert not graphs.feature_graph.has_edge(FeatureNode("b"), FeatureNode("root"))
        assert graphs.feature_graph.edge_count() == 2
        assert "Circular dependency" in caplog.text
        LevelSorter().sort(graphs.feature_graph)

    def test_repository_cycle(self) -> None:
        catalog = FeatureCatalog(
            features=[
                _feature("x1", "y1", repository="repo-x"),
                _feature("y1", "x2", repository="repo-y"),
                _feature("x2", repository="repo-x"),
            ],
        )
        with pytest.raises(CycleDetectedError, match="'repo-y' -> 'repo-x'") as excinfo:
            build_graphs(catalog, "x1")
        assert excinfo.value.graph_kind == "repository"

    def test_repository_cycle_skipped_but_features_kept(self) -> None:
        catalog = FeatureCatalog(
            features=[
                _feature("x1", "y1", repository="repo-x"),
                _feature("y1", "x2", repository="repo-y"),
                _feature("x2", repository="repo-x"),
            ],
        )
        graphs = build_graphs(catalog, "x1", on_cycle=OnCycle.SKIP_AND_WARN)
        assert graphs.feature_graph.edge_count() == 2
        assert graphs.repository_graph.edges() == [("repo-x", "repo-y")]


class TestTraversalContext:
    def test_existing_edge_is_kept(self) -> None:
        context = TraversalContext()
        assert context.add_repository_edge("a", "b") is True
        assert context.add_repository_edge("a", "b") is True
        assert context.repository_graph.edge_count() == 1

    def test_skipped_edges_recorded(self) -> None:
        context = TraversalContext(on_cycle=OnCycle.SKIP_AND_WARN)
        context.add_feature_edge(FeatureNode("a"), FeatureNode("b"))
        assert context.add_feature_edge(FeatureNode("b"), FeatureNode("a")) is False
        assert context.skipped_edges == [("b", "a")]

    def test_feature_self_loop_is_cycle(self) -> None:
        context = TraversalContext()
        with pytest.raises(CycleDetectedError):
            context.add_feature_edge(FeatureNode("a", "one"), FeatureNode("a", "two"))
