"""Graph module providing the directed graph and cycle checks.

This module contains:
- DiGraph[T]: A generic, mutable simple directed graph
- find_cycle / has_cycle: Global cycle detection
- creates_cycle: Incremental cycle check for a prospective edge
"""

from ._algorithms import OnCycle, creates_cycle, find_cycle, has_cycle
from ._digraph import DiGraph

__all__ = ["DiGraph", "OnCycle", "creates_cycle", "find_cycle", "has_cycle"]
