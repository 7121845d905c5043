"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from . import graph, filters, members, system

router = APIRouter()

# Include all route modules
router.include_router(graph.router, prefix="/graph", tags=["Graph"])
router.include_router(filters.router, prefix="/filters", tags=["Filters"])
router.include_router(members.router, prefix="/members", tags=["Members"])
router.include_router(system.router, prefix="/system", tags=["System"])
