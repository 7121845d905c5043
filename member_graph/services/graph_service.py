"""
Relation graph service.

Keeps the latest member/relation snapshot, the graph built from it and the
shared filter state, and computes the visible graph on demand.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Iterable, Callable, Tuple
from dataclasses import dataclass

from ..graph import (
    Member, MemberRelation, Patron,
    RelationGraph, GraphFilters, FacetOptions, MemberDetail,
    build_graph, build_patron_overlay, apply_filters, available_options,
    member_detail, graph_stats,
)
from .base import BaseService, ServiceContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphSnapshot:
    """Immutable snapshot of the association data and the graphs built from it."""
    members: Tuple[Member, ...] = ()
    relations: Tuple[MemberRelation, ...] = ()
    patrons: Tuple[Patron, ...] = ()
    graph: RelationGraph = RelationGraph()
    patron_overlay: RelationGraph = RelationGraph()
    loaded_at: Optional[str] = None

    def summary(self) -> Dict[str, Any]:
        return {
            "members": len(self.members),
            "relations": len(self.relations),
            "patrons": len(self.patrons),
            "nodes": len(self.graph.nodes),
            "edges": len(self.graph.edges),
            "loaded_at": self.loaded_at
        }


class RelationGraphService(BaseService):
    """
    Service for the member relationship graph.

    Provides:
    - Snapshot loading from the association API
    - The full graph and the visible graph under the current filters
    - Filter updates, published as atomic replacements
    - Facet options, member detail and statistics

    The filter state outlives snapshot refreshes: reloading the data never
    resets the filters.
    """

    def __init__(self, context: ServiceContext):
        super().__init__(context)
        self._lock = threading.Lock()
        self._snapshot = GraphSnapshot()
        self._filters = GraphFilters()

        # Last visible graph, keyed by the snapshot and filters it came from
        self._visible_cache: Optional[Tuple[GraphSnapshot, GraphFilters, RelationGraph]] = None

    # === Snapshot ===

    @property
    def snapshot(self) -> GraphSnapshot:
        with self._lock:
            return self._snapshot

    def refresh(self) -> GraphSnapshot:
        """
        Fetch members, relations and patrons from the association API.

        Returns:
            The new snapshot

        Raises:
            httpx.HTTPError: On transport or HTTP errors
            RuntimeError: If the API reports a failure
        """
        members = self.api.get_members()
        relations = self.api.get_relations()
        patrons = self.api.get_patrons() if self.config.graph.include_patrons else []

        snapshot = self.load_snapshot(members, relations, patrons)
        logger.info(
            f"Graph refreshed: {len(snapshot.members)} members, "
            f"{len(snapshot.relations)} relations, {len(snapshot.patrons)} patrons"
        )
        return snapshot

    def load_snapshot(
        self,
        members: Iterable[Member],
        relations: Iterable[MemberRelation],
        patrons: Iterable[Patron] = ()
    ) -> GraphSnapshot:
        """
        Replace the snapshot and rebuild the graphs from it.

        Args:
            members: Member roster
            relations: Member relations
            patrons: Patrons (optional)

        Returns:
            The new snapshot
        """
        members = tuple(members)
        relations = tuple(relations)
        patrons = tuple(patrons)

        snapshot = GraphSnapshot(
            members=members,
            relations=relations,
            patrons=patrons,
            graph=build_graph(members, relations),
            patron_overlay=build_patron_overlay(members, patrons),
            loaded_at=datetime.now(timezone.utc).isoformat()
        )

        with self._lock:
            self._snapshot = snapshot
            self._visible_cache = None

        return snapshot

    # === Filters ===

    @property
    def filters(self) -> GraphFilters:
        with self._lock:
            return self._filters

    def update_filters(self, change: Callable[[GraphFilters], GraphFilters]) -> GraphFilters:
        """
        Derive and publish the next filter state.

        Args:
            change: Function from the current state to the next one

        Returns:
            The published filter state

        Raises:
            ValueError: If ``change`` rejects its input; the state is unchanged
        """
        with self._lock:
            updated = change(self._filters)
            self._filters = updated

        logger.info(f"Filters updated: {updated.to_dict()}")
        return updated

    def reset_filters(self) -> GraphFilters:
        """Restore every filter to its default."""
        return self.update_filters(lambda f: f.reset_all_filters())

    # === Graph queries ===

    def get_full_graph(self) -> RelationGraph:
        """Get the unfiltered member graph."""
        return self.snapshot.graph

    def get_visible_graph(self, filters: Optional[GraphFilters] = None) -> RelationGraph:
        """
        Get the graph visible under the given (or current) filters.

        Args:
            filters: Optional filter state, defaults to the shared one

        Returns:
            Visible RelationGraph
        """
        with self._lock:
            snapshot = self._snapshot
            filters = filters or self._filters
            cached = self._visible_cache

        if cached and cached[0] is snapshot and cached[1] == filters:
            return cached[2]

        visible = apply_filters(snapshot.graph, filters, snapshot.patron_overlay)

        with self._lock:
            if self._snapshot is snapshot:
                self._visible_cache = (snapshot, filters, visible)

        return visible

    def get_options(self) -> FacetOptions:
        """Get every selectable facet value of the full graph."""
        snapshot = self.snapshot
        return available_options(snapshot.graph, snapshot.patron_overlay)

    def get_member_detail(self, email: str) -> Optional[MemberDetail]:
        """Get a member's relations grouped by type."""
        snapshot = self.snapshot
        return member_detail(email, snapshot.members, snapshot.relations)

    def stats(self, visible: bool = True) -> Dict[str, Any]:
        """
        Get graph statistics.

        Args:
            visible: True for the visible graph, False for the full graph
        """
        graph = self.get_visible_graph() if visible else self.get_full_graph()
        return graph_stats(graph)
