"""
Graph construction.

Turns member/relation snapshots into renderer nodes and edges. Every call
recomputes the whole graph from its inputs; nothing is cached here.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Any, List, Iterable, Set, Tuple

from .schema import (
    Member, Patron, MemberRelation, GraphNode, GraphEdge,
    NodeType, EdgeType, RELATION_COLORS, MEMBER_STATUS_COLORS, PATRON_STATUS_COLORS,
    DEFAULT_NODE_COLOR, NODE_BASE_SIZE, NODE_SIZE_RANGE,
    create_patron_node_id, create_edge_id,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelationGraph:
    """An immutable set of nodes and the edges between them."""
    nodes: Tuple[GraphNode, ...] = ()
    edges: Tuple[GraphEdge, ...] = ()

    def node_ids(self) -> Set[str]:
        return {n.id for n in self.nodes}

    def get_node(self, node_id: str):
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def merge(self, other: "RelationGraph") -> "RelationGraph":
        """Append another graph's nodes and edges to this one."""
        return RelationGraph(
            nodes=self.nodes + other.nodes,
            edges=self.edges + other.edges
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "total_nodes": len(self.nodes),
            "total_edges": len(self.edges)
        }


def member_node_size(engagement_score: float) -> float:
    """Node size grows with the engagement score (clamped to 0-100)."""
    score = min(100.0, max(0.0, float(engagement_score or 0)))
    return NODE_BASE_SIZE + NODE_SIZE_RANGE * score / 100.0


def patron_node_size(connection_count: int) -> float:
    """Patrons have no engagement score; size them by their referrals."""
    return NODE_BASE_SIZE + min(NODE_SIZE_RANGE, connection_count * 2)


def edge_size(edge_type: EdgeType) -> int:
    return 2 if edge_type == EdgeType.SPONSOR else 1


def _relation_edge(relation: MemberRelation) -> GraphEdge:
    edge_type = EdgeType(relation.relation_type.value)
    return GraphEdge(
        id=create_edge_id(relation.member_email, relation.related_member_email),
        source=relation.member_email,
        target=relation.related_member_email,
        type=edge_type,
        label=edge_type.value,
        color=RELATION_COLORS[edge_type],
        size=edge_size(edge_type),
        relation=relation
    )


def build_graph(
    members: Iterable[Member],
    relations: Iterable[MemberRelation]
) -> RelationGraph:
    """
    Build the member graph.

    Args:
        members: Member roster snapshot
        relations: Relation snapshot

    Returns:
        RelationGraph with one node per member and one edge per relation
        whose two endpoints are members. Relations naming an unknown member
        are dropped.
    """
    members = list(members)
    relations = list(relations)

    connection_counts: Dict[str, int] = defaultdict(int)
    connection_types: Dict[str, Set[EdgeType]] = defaultdict(set)

    for relation in relations:
        edge_type = EdgeType(relation.relation_type.value)
        # A self-relation counts once
        for email in {relation.member_email, relation.related_member_email}:
            connection_counts[email] += 1
            connection_types[email].add(edge_type)

    nodes: List[GraphNode] = []
    for member in members:
        nodes.append(GraphNode(
            id=member.email,
            label=member.full_name,
            size=member_node_size(member.engagement_score),
            color=MEMBER_STATUS_COLORS.get(member.status, DEFAULT_NODE_COLOR),
            type=NodeType.MEMBER,
            member=member,
            connection_count=connection_counts.get(member.email, 0),
            relation_types=frozenset(connection_types.get(member.email, ()))
        ))

    node_ids = {n.id for n in nodes}
    edges = [
        _relation_edge(relation)
        for relation in relations
        if relation.member_email in node_ids and relation.related_member_email in node_ids
    ]

    dropped = len(relations) - len(edges)
    if dropped:
        logger.debug(f"Dropped {dropped} relation(s) referencing unknown members")
    logger.debug(f"Built graph: {len(nodes)} nodes, {len(edges)} edges")

    return RelationGraph(nodes=tuple(nodes), edges=tuple(edges))


def build_patron_overlay(
    members: Iterable[Member],
    patrons: Iterable[Patron]
) -> RelationGraph:
    """
    Build the patron overlay.

    One node per patron, plus a referral edge from the referring member to
    the patron when the patron's referrer is a known member.

    Args:
        members: Member roster snapshot (used to resolve referrers)
        patrons: Patron snapshot

    Returns:
        RelationGraph holding patron nodes and patron_referral edges
    """
    members_by_id = {m.id: m for m in members}
    patrons = list(patrons)

    referrals: List[Tuple[Patron, Member]] = []
    for patron in patrons:
        referrer = members_by_id.get(patron.referrer_id) if patron.referrer_id else None
        if referrer is not None:
            referrals.append((patron, referrer))

    referral_counts: Dict[str, int] = defaultdict(int)
    for patron, _ in referrals:
        referral_counts[patron.id] += 1

    nodes: List[GraphNode] = []
    for patron in patrons:
        count = referral_counts.get(patron.id, 0)
        nodes.append(GraphNode(
            id=create_patron_node_id(patron.id),
            label=f"{patron.full_name} (M)",
            size=patron_node_size(count),
            color=PATRON_STATUS_COLORS.get(patron.status, DEFAULT_NODE_COLOR),
            type=NodeType.PATRON,
            patron=patron,
            connection_count=count,
            relation_types=frozenset({EdgeType.PATRON_REFERRAL}) if count else frozenset()
        ))

    edges: List[GraphEdge] = []
    for patron, referrer in referrals:
        patron_node_id = create_patron_node_id(patron.id)
        edges.append(GraphEdge(
            id=create_edge_id(patron_node_id, referrer.email),
            source=referrer.email,
            target=patron_node_id,
            type=EdgeType.PATRON_REFERRAL,
            label=EdgeType.PATRON_REFERRAL.value,
            color=RELATION_COLORS[EdgeType.PATRON_REFERRAL],
            size=edge_size(EdgeType.PATRON_REFERRAL),
            patron=patron
        ))

    logger.debug(f"Built patron overlay: {len(nodes)} patrons, {len(edges)} referrals")
    return RelationGraph(nodes=tuple(nodes), edges=tuple(edges))
