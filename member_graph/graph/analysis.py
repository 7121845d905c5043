"""
Graph statistics.

Summaries of a (full or filtered) relation graph, computed with NetworkX.
"""

from collections import Counter
from typing import Dict, Any

import networkx as nx

from .builder import RelationGraph

TOP_CONNECTED_LIMIT = 5


def to_networkx(graph: RelationGraph) -> nx.MultiGraph:
    """
    Convert a RelationGraph to an undirected NetworkX multigraph.

    Relations are undirected and never deduplicated, so parallel edges
    between the same pair are kept.
    """
    g = nx.MultiGraph()
    for node in graph.nodes:
        g.add_node(node.id, type=node.type.value)
    for edge in graph.edges:
        g.add_edge(edge.source, edge.target, key=edge.id, type=edge.type.value)
    return g


def graph_stats(graph: RelationGraph) -> Dict[str, Any]:
    """
    Get graph statistics.

    Args:
        graph: Graph to summarize

    Returns:
        Dictionary with counts by node type, member status and edge type,
        connected components, isolated nodes and the most connected nodes
    """
    g = to_networkx(graph)

    nodes_by_type = Counter(n.type.value for n in graph.nodes)
    members_by_status = Counter(n.member.status for n in graph.nodes if n.member is not None)
    edges_by_type = Counter(e.type.value for e in graph.edges)

    degrees = sorted(
        ((node_id, degree) for node_id, degree in g.degree()),
        key=lambda item: (-item[1], item[0])
    )
    most_connected = [
        {"id": node_id, "degree": degree}
        for node_id, degree in degrees[:TOP_CONNECTED_LIMIT]
        if degree > 0
    ]

    return {
        "total_nodes": g.number_of_nodes(),
        "total_edges": g.number_of_edges(),
        "nodes_by_type": dict(nodes_by_type),
        "members_by_status": dict(members_by_status),
        "edges_by_type": dict(edges_by_type),
        "connected_components": nx.number_connected_components(g) if g.number_of_nodes() else 0,
        "isolated": sorted(nx.isolates(g)),
        "most_connected": most_connected
    }
