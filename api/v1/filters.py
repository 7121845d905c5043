"""
Filter endpoints.

Reads and updates the shared graph filter state. Every update replaces
the whole state at once and answers with the new state.
"""

from typing import Callable, Dict, Any

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from member_graph.graph import GraphFilters
from ..deps import ServicesDep, Services

router = APIRouter()


# Request models

class ToggleRequest(BaseModel):
    """Enable or disable a value."""
    enabled: bool = Field(..., description="True to enable, False to disable")


class StatusRequest(BaseModel):
    """Member status filter."""
    status: str = Field(..., description="all, active or inactive")


class SearchRequest(BaseModel):
    """Search query."""
    query: str = Field("", description="Case-insensitive match on name or email")


class MinEngagementRequest(BaseModel):
    """Minimum engagement score."""
    score: float = Field(..., description="Inclusive lower bound (0-100)")


class FacetRequest(BaseModel):
    """Facet value toggle."""
    value: str = Field(..., description="Facet value")
    enabled: bool = Field(..., description="True to add, False to remove")


class PatronsRequest(BaseModel):
    """Patron overlay toggle."""
    show: bool = Field(..., description="Show patrons and their referrals")


def _update(services: Services, change: Callable[[GraphFilters], GraphFilters]) -> Dict[str, Any]:
    try:
        updated = services.graph.update_filters(change)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    visible = services.graph.get_visible_graph(updated)
    return {
        "filters": updated.to_dict(),
        "total_nodes": len(visible.nodes),
        "total_edges": len(visible.edges)
    }


# Endpoints

@router.get("")
async def get_filters(services: ServicesDep):
    """
    Get the current filter state.
    """
    return services.graph.filters.to_dict()


@router.post("/reset")
async def reset_filters(services: ServicesDep):
    """
    Restore every filter to its default.
    """
    return _update(services, lambda f: f.reset_all_filters())


@router.put("/relation-types/{relation_type}")
async def update_relation_type(relation_type: str, request: ToggleRequest, services: ServicesDep):
    """
    Show or hide one relation type (sponsor, team or custom).
    """
    return _update(services, lambda f: f.update_relation_type_filter(relation_type, request.enabled))


@router.put("/status")
async def update_member_status(request: StatusRequest, services: ServicesDep):
    """
    Filter members by status.
    """
    return _update(services, lambda f: f.update_member_status_filter(request.status))


@router.put("/search")
async def update_search(request: SearchRequest, services: ServicesDep):
    """
    Set the search query.
    """
    return _update(services, lambda f: f.update_search_query(request.query))


@router.put("/min-engagement")
async def update_min_engagement(request: MinEngagementRequest, services: ServicesDep):
    """
    Set the minimum engagement score.
    """
    return _update(services, lambda f: f.update_min_engagement_score(request.score))


@router.put("/facets/{facet}")
async def update_facet(facet: str, request: FacetRequest, services: ServicesDep):
    """
    Add or remove a value of a facet (companies, roles, cjd_roles,
    departments, cities, postal_codes, sectors).
    """
    return _update(services, lambda f: f.update_facet_filter(facet, request.value, request.enabled))


@router.put("/patrons")
async def toggle_patrons(request: PatronsRequest, services: ServicesDep):
    """
    Show or hide patrons and their referral edges.
    """
    return _update(services, lambda f: f.toggle_patrons(request.show))


@router.post("/ego/{center}")
async def set_ego_network(center: str, services: ServicesDep):
    """
    Center the graph on one member and its direct neighbors.

    Other filters still apply, to the center as well.
    """
    return _update(services, lambda f: f.set_ego_network_mode(center))


@router.delete("/ego")
async def reset_ego_network(services: ServicesDep):
    """
    Back to the full network view. Other filters are kept.
    """
    return _update(services, lambda f: f.reset_to_network_mode())
