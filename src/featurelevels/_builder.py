"""Building feature and repository graphs from a feature provider."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from ._catalog import DEFAULT_VERSION
from ._errors import CycleDetectedError, MissingOriginError, UnresolvedDependencyError
from ._graph import DiGraph, OnCycle, creates_cycle

if TYPE_CHECKING:
    from ._catalog import Feature, FeatureProvider

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FeatureNode:
    """A feature in the feature graph.

    Equality and hashing use the name only: two features with the same name
    from different repositories are the same node.
    """

    name: str
    repository: str = field(default="", compare=False)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class FeatureGraphs:
    """The two graphs produced by a build."""

    feature_graph: DiGraph[FeatureNode]
    repository_graph: DiGraph[str]


def compact_repository_url(url: str) -> str:
    """Strip the parts of a feature repository URL that carry no information.

    Example:
        >>> compact_repository_url("mvn:org.example/core/1.0/xml/features")
        'org.example/core/1.0'

    """
    return url.replace("mvn:", "").replace("/xml/features", "")


@dataclass(slots=True)
class TraversalContext:
    """Mutable state of one build: the two graphs and the cycle policy.

    All edge insertions go through :meth:`add_feature_edge` and
    :meth:`add_repository_edge`, which check each edge before it is added.
    """

    on_cycle: OnCycle = OnCycle.ABORT
    feature_graph: DiGraph[FeatureNode] = field(default_factory=lambda: DiGraph(allows_self_loops=False))
    repository_graph: DiGraph[str] = field(default_factory=lambda: DiGraph(allows_self_loops=True))
    expanded: set[tuple[str, str]] = field(default_factory=set)
    skipped_edges: list[tuple[str, str]] = field(default_factory=list)

    def add_feature_edge(self, source: FeatureNode, target: FeatureNode) -> bool:
        """Add source -> target to the feature graph.

        Returns:
            False if the edge was skipped because it would close a cycle.

        Raises:
            CycleDetectedError: If the edge closes a cycle and the policy is ABORT.

        """
        logger.debug(f"Adding edge to feature graph {source} -> {target}")
        return self._add_edge(self.feature_graph, source, target, "feature")

    def add_repository_edge(self, source: str, target: str) -> bool:
        """Add source -> target to the repository graph.

        Returns:
            False if the edge was skipped because it would close a cycle.

        Raises:
            CycleDetectedError: If the edge closes a cycle and the policy is ABORT.

        """
        logger.debug(f"Adding edge to feature repository graph {source} -> {target}")
        return self._add_edge(self.repository_graph, source, target, "repository")

    def _add_edge(self, graph: DiGraph[T], source: T, target: T, kind: str) -> bool:
        if graph.has_edge(source, target):
            return True
        if creates_cycle(graph, source, target):
            if self.on_cycle is OnCycle.ABORT:
                raise CycleDetectedError(source, target, kind)
            logger.warning(f"Circular dependency '{source}' -> '{target}' in {kind} graph, skipping edge")
            self.skipped_edges.append((str(source), str(target)))
            return False
        graph.add_edge(source, target)
        return True


class GraphBuilder:
    """Walks a feature provider from a root feature and grows both graphs."""

    def __init__(
        self,
        provider: FeatureProvider,
        *,
        on_cycle: OnCycle = OnCycle.ABORT,
        compact_repositories: bool = True,
    ) -> None:
        self._provider = provider
        self._on_cycle = on_cycle
        self._compact_repositories = compact_repositories

    def build(self, name: str, version: str | None = None) -> FeatureGraphs:
        """Build the feature and repository graphs rooted at a feature.

        Args:
            name: Root feature name.
            version: Root feature version; defaults to any version.

        Returns:
            The feature graph and the repository graph.

        Raises:
            UnresolvedDependencyError: If the root or any dependency cannot be resolved.
            MissingOriginError: If a feature has no repository.
            CycleDetectedError: If an edge closes a cycle and the policy is ABORT.

        """
        version = version or DEFAULT_VERSION
        logger.debug(f"Computing feature graph for '{name}' '{version}'")

        roots = self._provider.get_features(name, version)
        if not roots:
            raise UnresolvedDependencyError(name, version)

        context = TraversalContext(on_cycle=self._on_cycle)
        for feature in roots:
            repository = self._require_repository(feature)
            context.feature_graph.add_node(FeatureNode(name, repository))
            context.repository_graph.add_node(self._repository_node(repository))

        self._expand(context, name, version, roots)
        return FeatureGraphs(feature_graph=context.feature_graph, repository_graph=context.repository_graph)

    def _expand(self, context: TraversalContext, name: str, version: str, features: list[Feature]) -> None:
        if (name, version) in context.expanded:
            return
        context.expanded.add((name, version))

        for feature in features:
            from_repository = self._require_repository(feature)
            source = FeatureNode(name, from_repository)

            for dependency in feature.dependencies:
                resolved = self._provider.get_feature(dependency.name, dependency.version)
                if resolved is None:
                    raise UnresolvedDependencyError(dependency.name, dependency.version, required_by=name)
                to_repository = self._require_repository(resolved)

                target = FeatureNode(dependency.name, to_repository)
                if not context.add_feature_edge(source, target):
                    continue

                if from_repository != to_repository:
                    context.add_repository_edge(
                        self._repository_node(from_repository),
                        self._repository_node(to_repository),
                    )

                self._expand(
                    context,
                    dependency.name,
                    dependency.version,
                    self._provider.get_features(dependency.name, dependency.version),
                )

    def _require_repository(self, feature: Feature) -> str:
        if not feature.repository.strip():
            raise MissingOriginError(feature.name, feature.version)
        return feature.repository

    def _repository_node(self, repository: str) -> str:
        if self._compact_repositories:
            return compact_repository_url(repository)
        return repository


def build_graphs(
    provider: FeatureProvider,
    name: str,
    version: str | None = None,
    *,
    on_cycle: OnCycle = OnCycle.ABORT,
    compact_repositories: bool = True,
) -> FeatureGraphs:
    """Build the feature and repository graphs rooted at a feature.

    See :meth:`GraphBuilder.build`.
    """
    builder = GraphBuilder(provider, on_cycle=on_cycle, compact_repositories=compact_repositories)
    return builder.build(name, version)
