"""
Graph module for the member relationship graph.

Provides:
- Graph construction from member/relation snapshots
- Filter state and visible-subgraph computation
- Member detail and graph statistics
"""

from .schema import (
    Member, Patron, MemberRelation, GraphNode, GraphEdge,
    RelationType, EdgeType, NodeType, StatusFilter, ViewMode,
)
from .builder import RelationGraph, build_graph, build_patron_overlay
from .filters import GraphFilters, FacetOptions, FACETS, apply_filters, available_options, ego_neighbors
from .detail import MemberDetail, member_detail
from .analysis import graph_stats

__all__ = [
    "Member",
    "Patron",
    "MemberRelation",
    "GraphNode",
    "GraphEdge",
    "RelationType",
    "EdgeType",
    "NodeType",
    "StatusFilter",
    "ViewMode",
    "RelationGraph",
    "build_graph",
    "build_patron_overlay",
    "GraphFilters",
    "FacetOptions",
    "FACETS",
    "apply_filters",
    "available_options",
    "ego_neighbors",
    "MemberDetail",
    "member_detail",
    "graph_stats",
]
