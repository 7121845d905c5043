"""
Graph endpoints.

Serves the visible and full relation graph, facet options and statistics.
"""

import logging

import httpx
from fastapi import APIRouter, HTTPException, status, Query

from ..deps import ServicesDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def get_visible_graph(services: ServicesDep):
    """
    Get the graph visible under the current filters.

    Nodes and edges are in the renderer's shape
    ({id, label, size, color, data}).
    """
    visible = services.graph.get_visible_graph()
    return {
        **visible.to_dict(),
        "filters": services.graph.filters.to_dict()
    }


@router.get("/full")
async def get_full_graph(services: ServicesDep):
    """
    Get the unfiltered member graph.
    """
    return services.graph.get_full_graph().to_dict()


@router.get("/options")
async def get_facet_options(services: ServicesDep):
    """
    Get every selectable value of each facet.

    Values come from the full graph, whatever the current filters are.
    """
    return services.graph.get_options().to_dict()


@router.get("/stats")
async def get_graph_stats(
    services: ServicesDep,
    scope: str = Query("visible", description="Graph to summarize (visible or full)")
):
    """
    Get statistics of the visible or full graph.
    """
    if scope not in ("visible", "full"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid scope. Must be one of: ['visible', 'full']"
        )
    return {
        "scope": scope,
        **services.graph.stats(visible=scope == "visible")
    }


@router.post("/refresh")
def refresh_graph(services: ServicesDep):
    """
    Reload members, relations and patrons from the association API.

    Filters are kept across refreshes. Declared without async so FastAPI
    runs the blocking HTTP calls in its threadpool.
    """
    try:
        snapshot = services.graph.refresh()
    except (httpx.HTTPError, RuntimeError) as e:
        logger.error(f"Graph refresh failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to load data from the association API: {e}"
        )

    return {"success": True, **snapshot.summary()}
