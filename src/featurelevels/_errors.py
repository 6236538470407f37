"""Exceptions raised while building, sorting and rendering dependency graphs."""


class FeatureLevelsError(Exception):
    """Base class for all featurelevels errors."""


class UnresolvedDependencyError(FeatureLevelsError):
    """Raised when the feature provider cannot resolve a dependency."""

    def __init__(self, name: str, version: str, required_by: str | None = None) -> None:
        self.name = name
        self.version = version
        self.required_by = required_by
        if required_by is None:
            msg = f"Could not resolve feature '{name}' '{version}'"
        else:
            msg = f"Could not resolve feature '{name}' '{version}' required by '{required_by}'"
        super().__init__(msg)


class MissingOriginError(FeatureLevelsError):
    """Raised when a feature carries no origin repository."""

    def __init__(self, name: str, version: str) -> None:
        self.name = name
        self.version = version
        super().__init__(f"Repository URL for feature '{name}' '{version}' is empty")


class CycleDetectedError(FeatureLevelsError):
    """Raised when inserting an edge would close a cycle."""

    def __init__(self, source: object, target: object, graph_kind: str = "feature") -> None:
        self.source = source
        self.target = target
        self.graph_kind = graph_kind
        super().__init__(
            f"Circular dependency detected while adding edge '{source}' -> '{target}' to the {graph_kind} graph",
        )


class NotADagError(FeatureLevelsError, ValueError):
    """Raised when a level sort is attempted on a graph that is not a DAG."""


class InvalidEdgeError(FeatureLevelsError, ValueError):
    """Raised when an edge violates the graph's self-loop policy."""
