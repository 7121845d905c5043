"""
Graph filtering.

Holds the admin's filter state and computes the visible subgraph.

The state is a frozen value: every mutator returns a new GraphFilters and
leaves the receiver untouched, so a caller can publish the result as one
atomic replacement.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Any, Optional, List, FrozenSet, Iterable, Set

import networkx as nx

from .schema import GraphNode, GraphEdge, NodeType, EdgeType, RelationType, StatusFilter, ViewMode
from .builder import RelationGraph

logger = logging.getLogger(__name__)


# Facet name -> record attribute it restricts
FACETS: Dict[str, str] = {
    "companies": "company",
    "roles": "role",
    "cjd_roles": "cjd_role",
    "departments": "department",
    "cities": "city",
    "postal_codes": "postal_code",
    "sectors": "sector",
}

# Facets that never restrict patron nodes
MEMBER_ONLY_FACETS = frozenset({"cjd_roles"})


@dataclass(frozen=True)
class GraphFilters:
    """
    Filter state of the relation graph.

    Facet sets follow open-set semantics: an empty set places no
    restriction, it does not mean "match nothing".
    """
    relation_types: FrozenSet[RelationType] = frozenset(RelationType)
    member_status: StatusFilter = StatusFilter.ALL
    min_engagement_score: float = 0
    search_query: str = ""
    view_mode: ViewMode = ViewMode.NETWORK
    ego_network_center: Optional[str] = None
    show_patrons: bool = True

    # Facets
    companies: FrozenSet[str] = frozenset()
    roles: FrozenSet[str] = frozenset()
    cjd_roles: FrozenSet[str] = frozenset()
    departments: FrozenSet[str] = frozenset()
    cities: FrozenSet[str] = frozenset()
    postal_codes: FrozenSet[str] = frozenset()
    sectors: FrozenSet[str] = frozenset()

    # === Mutators ===

    def update_relation_type_filter(self, relation_type, enabled: bool) -> "GraphFilters":
        """Enable or disable one relation type."""
        relation_type = RelationType(relation_type)
        if enabled:
            types = self.relation_types | {relation_type}
        else:
            types = self.relation_types - {relation_type}
        return replace(self, relation_types=frozenset(types))

    def update_member_status_filter(self, status) -> "GraphFilters":
        return replace(self, member_status=StatusFilter(status))

    def update_search_query(self, query: str) -> "GraphFilters":
        return replace(self, search_query=query or "")

    def update_min_engagement_score(self, score: float) -> "GraphFilters":
        """
        Set the inclusive lower bound on the engagement score.

        Raises:
            ValueError: If score is outside 0-100
        """
        if not 0 <= score <= 100:
            raise ValueError(f"Engagement score must be between 0 and 100, got {score}")
        return replace(self, min_engagement_score=score)

    def update_facet_filter(self, facet: str, value: str, enabled: bool) -> "GraphFilters":
        """
        Add a value to, or remove it from, a facet set.

        Args:
            facet: Facet name (one of FACETS)
            value: Facet value
            enabled: True to add, False to remove

        Raises:
            ValueError: If the facet is unknown
        """
        if facet not in FACETS:
            raise ValueError(f"Unknown facet '{facet}'. Available: {sorted(FACETS)}")

        current: FrozenSet[str] = getattr(self, facet)
        updated = current | {value} if enabled else current - {value}
        return replace(self, **{facet: frozenset(updated)})

    def update_company_filter(self, company: str, enabled: bool) -> "GraphFilters":
        return self.update_facet_filter("companies", company, enabled)

    def update_role_filter(self, role: str, enabled: bool) -> "GraphFilters":
        return self.update_facet_filter("roles", role, enabled)

    def update_cjd_role_filter(self, cjd_role: str, enabled: bool) -> "GraphFilters":
        return self.update_facet_filter("cjd_roles", cjd_role, enabled)

    def update_department_filter(self, department: str, enabled: bool) -> "GraphFilters":
        return self.update_facet_filter("departments", department, enabled)

    def update_city_filter(self, city: str, enabled: bool) -> "GraphFilters":
        return self.update_facet_filter("cities", city, enabled)

    def update_postal_code_filter(self, postal_code: str, enabled: bool) -> "GraphFilters":
        return self.update_facet_filter("postal_codes", postal_code, enabled)

    def update_sector_filter(self, sector: str, enabled: bool) -> "GraphFilters":
        return self.update_facet_filter("sectors", sector, enabled)

    def toggle_patrons(self, show: bool) -> "GraphFilters":
        return replace(self, show_patrons=bool(show))

    # === View mode ===

    def set_ego_network_mode(self, center_id: str) -> "GraphFilters":
        """
        Center the view on one node; other filters are kept.

        Raises:
            ValueError: If center_id is empty
        """
        if not center_id:
            raise ValueError("Ego network center is required")
        return replace(self, view_mode=ViewMode.EGO_NETWORK, ego_network_center=center_id)

    def reset_to_network_mode(self) -> "GraphFilters":
        """Back to the full network; only the view mode and center change."""
        return replace(self, view_mode=ViewMode.NETWORK, ego_network_center=None)

    def reset_all_filters(self) -> "GraphFilters":
        return GraphFilters()

    # === Helpers ===

    def is_ego_network(self) -> bool:
        return self.view_mode == ViewMode.EGO_NETWORK and bool(self.ego_network_center)

    def active_facets(self) -> Dict[str, FrozenSet[str]]:
        """Facets that currently restrict the node set."""
        return {facet: getattr(self, facet) for facet in FACETS if getattr(self, facet)}

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "relation_types": sorted(t.value for t in self.relation_types),
            "member_status": self.member_status.value,
            "min_engagement_score": self.min_engagement_score,
            "search_query": self.search_query,
            "view_mode": self.view_mode.value,
            "ego_network_center": self.ego_network_center,
            "show_patrons": self.show_patrons,
        }
        for facet in FACETS:
            data[facet] = sorted(getattr(self, facet))
        return data


@dataclass(frozen=True)
class FacetOptions:
    """Every selectable value of each facet, sorted."""
    companies: List[str] = field(default_factory=list)
    roles: List[str] = field(default_factory=list)
    cjd_roles: List[str] = field(default_factory=list)
    departments: List[str] = field(default_factory=list)
    cities: List[str] = field(default_factory=list)
    postal_codes: List[str] = field(default_factory=list)
    sectors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {facet: list(getattr(self, facet)) for facet in FACETS}


def _facet_value(node: GraphNode, facet: str) -> Optional[str]:
    return getattr(node.record, FACETS[facet], None)


def available_options(
    graph: RelationGraph,
    patrons: Optional[RelationGraph] = None
) -> FacetOptions:
    """
    Collect the facet values offered to the admin.

    Values come from the full, unfiltered node set so that every value stays
    selectable whatever the current filters are.

    Args:
        graph: Unfiltered member graph
        patrons: Optional patron overlay, whose values are offered too

    Returns:
        FacetOptions with distinct non-empty values in lexical order
    """
    nodes = list(graph.nodes) + (list(patrons.nodes) if patrons else [])
    values: Dict[str, Set[str]] = {facet: set() for facet in FACETS}

    for node in nodes:
        if node.record is None:
            continue
        for facet in FACETS:
            if facet in MEMBER_ONLY_FACETS and node.type == NodeType.PATRON:
                continue
            value = _facet_value(node, facet)
            if value:
                values[facet].add(value)

    return FacetOptions(**{facet: sorted(found) for facet, found in values.items()})


def ego_neighbors(center: str, edges: Iterable[GraphEdge]) -> Set[str]:
    """
    Get the direct neighbors of a node.

    Edges are treated as undirected: both endpoint fields are checked.

    Args:
        center: Center node ID
        edges: Edges to search (the full, unfiltered edge list)

    Returns:
        Set of neighbor node IDs (the center itself only on a self-relation)
    """
    graph = nx.Graph()
    graph.add_edges_from((e.source, e.target) for e in edges)

    if not graph.has_node(center):
        return set()
    return set(graph.neighbors(center))


def _matches_search(node: GraphNode, query: str) -> bool:
    record = node.record
    if record is None:
        return False
    return query in record.full_name.lower() or query in record.email.lower()


def _matches_facets(node: GraphNode, facets: Dict[str, FrozenSet[str]]) -> bool:
    for facet, selected in facets.items():
        if facet in MEMBER_ONLY_FACETS and node.type == NodeType.PATRON:
            continue
        value = _facet_value(node, facet)
        if not value or value not in selected:
            return False
    return True


def _edge_type_enabled(edge: GraphEdge, filters: GraphFilters) -> bool:
    if edge.type == EdgeType.PATRON_REFERRAL:
        return filters.show_patrons
    return RelationType(edge.type.value) in filters.relation_types


def apply_filters(
    graph: RelationGraph,
    filters: GraphFilters,
    patrons: Optional[RelationGraph] = None
) -> RelationGraph:
    """
    Compute the visible subgraph.

    Node filters run in a fixed order: status, engagement, search, facets,
    then the ego network. The ego network neighbors come from the full edge
    list, but are intersected with the nodes that survived the earlier
    filters, so the center itself is not exempt from them. Edges are kept
    only when both endpoints are visible and their type is enabled.

    Args:
        graph: Unfiltered member graph
        filters: Filter state
        patrons: Optional patron overlay, merged when filters.show_patrons

    Returns:
        RelationGraph whose edges only reference its own nodes
    """
    if patrons is not None and filters.show_patrons:
        graph = graph.merge(patrons)

    nodes = list(graph.nodes)

    # Patrons have neither a member status nor an engagement score
    if filters.member_status != StatusFilter.ALL:
        status = filters.member_status.value
        nodes = [
            n for n in nodes
            if n.type == NodeType.PATRON or (n.member is not None and n.member.status == status)
        ]

    if filters.min_engagement_score > 0:
        nodes = [
            n for n in nodes
            if n.type == NodeType.PATRON
            or (n.member is not None and n.member.engagement_score >= filters.min_engagement_score)
        ]

    if filters.search_query.strip():
        query = filters.search_query.lower()
        nodes = [n for n in nodes if _matches_search(n, query)]

    facets = filters.active_facets()
    if facets:
        nodes = [n for n in nodes if _matches_facets(n, facets)]

    if filters.is_ego_network():
        center = filters.ego_network_center
        ego_ids = {center} | ego_neighbors(center, graph.edges)
        nodes = [n for n in nodes if n.id in ego_ids]

    visible_ids = {n.id for n in nodes}
    edges = [
        e for e in graph.edges
        if e.source in visible_ids and e.target in visible_ids and _edge_type_enabled(e, filters)
    ]

    logger.debug(
        f"Filtered graph: {len(nodes)}/{len(graph.nodes)} nodes, "
        f"{len(edges)}/{len(graph.edges)} edges"
    )
    return RelationGraph(nodes=tuple(nodes), edges=tuple(edges))
