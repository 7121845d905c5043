"""
System endpoints.

Health checks and snapshot status.
"""

from fastapi import APIRouter

from ..deps import ServicesDep

router = APIRouter()


@router.get("/status")
async def get_status(services: ServicesDep):
    """
    Health check endpoint.

    Returns system status and a summary of the loaded snapshot.
    """
    return {
        "status": "healthy",
        "service": "member-graph-api",
        "snapshot": services.graph.snapshot.summary()
    }
