"""Generic algorithms used by the testbridge application layer."""

from .dedupe import deduplicate_stable
from .directed_graph import DirectedGraph

__all__ = ["DirectedGraph", "deduplicate_stable"]
