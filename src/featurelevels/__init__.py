"""Dependency-level reports for feature graphs."""

__all__ = [
    "CatalogError",
    "CycleDetectedError",
    "Dependency",
    "DiGraph",
    "Feature",
    "FeatureCatalog",
    "FeatureGraphs",
    "FeatureLevelsError",
    "FeatureNode",
    "FeatureProvider",
    "GraphBuilder",
    "InvalidEdgeError",
    "LevelSorter",
    "MissingOriginError",
    "NotADagError",
    "OnCycle",
    "TraversalContext",
    "UnresolvedDependencyError",
    "build_graphs",
    "compact_repository_url",
    "creates_cycle",
    "find_cycle",
    "format_level_listing",
    "format_ordering",
    "generate_dot",
    "has_cycle",
    "load_catalog",
    "reclassify_bottom_feeders",
    "regex_predicate",
    "render_level_table",
]

from ._builder import FeatureGraphs, FeatureNode, GraphBuilder, TraversalContext, build_graphs, compact_repository_url
from ._catalog import CatalogError, Dependency, Feature, FeatureCatalog, FeatureProvider, load_catalog
from ._errors import (
    CycleDetectedError,
    FeatureLevelsError,
    InvalidEdgeError,
    MissingOriginError,
    NotADagError,
    UnresolvedDependencyError,
)
from ._graph import DiGraph, OnCycle, creates_cycle, find_cycle, has_cycle
from ._levels import LevelSorter, reclassify_bottom_feeders, regex_predicate
from ._render import format_level_listing, format_ordering, generate_dot, render_level_table
