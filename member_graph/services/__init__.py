"""
Services layer for the member relationship graph.

This module provides the business logic as reusable services that can be
consumed by the HTTP API or any other interface.
"""

from .base import BaseService, ServiceContext
from .graph_service import RelationGraphService, GraphSnapshot

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Services
    "RelationGraphService",
    # Data classes
    "GraphSnapshot",
]


def create_services(context: ServiceContext = None):
    """
    Factory function to create all services with proper dependencies.

    Args:
        context: Optional ServiceContext (creates one if not provided)

    Returns:
        Tuple of (context, graph)
    """
    if context is None:
        context = ServiceContext.create()

    graph_service = RelationGraphService(context)

    return context, graph_service
