"""
Members endpoints.

Detail of a member selected in the graph.
"""

from fastapi import APIRouter, HTTPException, status

from ..deps import ServicesDep

router = APIRouter()


@router.get("/{email}/detail")
async def get_member_detail(email: str, services: ServicesDep):
    """
    Get a member with its relations grouped by type.
    """
    detail = services.graph.get_member_detail(email)
    if detail is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Member {email} not found"
        )

    return detail.to_dict()
