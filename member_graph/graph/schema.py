"""
Graph schema definitions.

Defines the member/relation records received from the association API
and the node and edge shapes handed to the graph renderer.
"""

from enum import Enum
from typing import Dict, Any, Optional, FrozenSet
from dataclasses import dataclass, field


class RelationType(str, Enum):
    """Canonical types of member-to-member relations."""
    SPONSOR = "sponsor"
    TEAM = "team"
    CUSTOM = "custom"


class EdgeType(str, Enum):
    """Types of edges in the graph."""
    SPONSOR = "sponsor"
    TEAM = "team"
    CUSTOM = "custom"

    # Patron -> referring member, only produced by the patron overlay
    PATRON_REFERRAL = "patron_referral"


class NodeType(str, Enum):
    """Types of nodes in the graph."""
    MEMBER = "member"
    PATRON = "patron"


class StatusFilter(str, Enum):
    """Member status filter values."""
    ALL = "all"
    ACTIVE = "active"
    INACTIVE = "inactive"


class ViewMode(str, Enum):
    """Graph view modes."""
    NETWORK = "network"
    EGO_NETWORK = "ego-network"


# Display constants
RELATION_COLORS: Dict[EdgeType, str] = {
    EdgeType.SPONSOR: "#60a5fa",
    EdgeType.TEAM: "#34d399",
    EdgeType.CUSTOM: "#c084fc",
    EdgeType.PATRON_REFERRAL: "#f59e0b",
}

MEMBER_STATUS_COLORS: Dict[str, str] = {
    "active": "#059669",
    "inactive": "#9ca3af",
}

PATRON_STATUS_COLORS: Dict[str, str] = {
    "active": "#f59e0b",
    "prospect": "#fbbf24",
    "inactive": "#d1d5db",
}

DEFAULT_NODE_COLOR = "#9ca3af"
NODE_BASE_SIZE = 8.0
NODE_SIZE_RANGE = 12.0


def create_patron_node_id(patron_id: str) -> str:
    """
    Create the node ID of a patron.

    Patron IDs live in a different keyspace than member emails, so they are
    prefixed to never collide with a member node.
    """
    return f"patron-{patron_id}"


def create_edge_id(source: str, target: str) -> str:
    """Create an edge ID from its two endpoints."""
    return f"{source}-{target}"


@dataclass(frozen=True)
class Member:
    """A member of the association, as returned by the API."""
    id: str
    email: str
    first_name: str
    last_name: str
    status: str = "active"
    engagement_score: float = 0
    activity_count: int = 0
    company: Optional[str] = None
    department: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    sector: Optional[str] = None
    role: Optional[str] = None
    cjd_role: Optional[str] = None
    last_activity_at: Optional[str] = None
    proposed_by: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "status": self.status,
            "engagement_score": self.engagement_score,
            "activity_count": self.activity_count,
            "company": self.company,
            "department": self.department,
            "city": self.city,
            "postal_code": self.postal_code,
            "sector": self.sector,
            "role": self.role,
            "cjd_role": self.cjd_role,
            "last_activity_at": self.last_activity_at,
            "proposed_by": self.proposed_by,
        }

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Member":
        """Parse a member from the association API payload (camelCase)."""
        return cls(
            id=str(data.get("id") or data["email"]),
            email=data["email"],
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            status=data.get("status") or "active",
            engagement_score=data.get("engagementScore") or 0,
            activity_count=data.get("activityCount") or 0,
            company=data.get("company") or None,
            department=data.get("department") or None,
            city=data.get("city") or None,
            postal_code=data.get("postalCode") or None,
            sector=data.get("sector") or None,
            role=data.get("role") or None,
            cjd_role=data.get("cjdRole") or None,
            last_activity_at=data.get("lastActivityAt"),
            proposed_by=data.get("proposedBy"),
        )


@dataclass(frozen=True)
class Patron:
    """A patron (sponsor/donor) record, optionally referred by a member."""
    id: str
    email: str
    first_name: str
    last_name: str
    status: str = "active"
    company: Optional[str] = None
    department: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    sector: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    referrer_id: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "status": self.status,
            "company": self.company,
            "department": self.department,
            "city": self.city,
            "postal_code": self.postal_code,
            "sector": self.sector,
            "role": self.role,
            "phone": self.phone,
            "referrer_id": self.referrer_id,
            "created_at": self.created_at,
        }

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Patron":
        """Parse a patron from the association API payload (camelCase)."""
        referrer = data.get("referrerId")
        return cls(
            id=str(data["id"]),
            email=data.get("email") or "",
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            status=data.get("status") or "active",
            company=data.get("company") or None,
            department=data.get("department") or None,
            city=data.get("city") or None,
            postal_code=data.get("postalCode") or None,
            sector=data.get("sector") or None,
            role=data.get("role") or None,
            phone=data.get("phone") or None,
            referrer_id=str(referrer) if referrer else None,
            created_at=data.get("createdAt"),
        )


@dataclass(frozen=True)
class MemberRelation:
    """A relation between two members, stored with two directed endpoints."""
    id: str
    member_email: str
    related_member_email: str
    relation_type: RelationType
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None

    def involves(self, email: str) -> bool:
        """Whether the member appears as either endpoint."""
        return self.member_email == email or self.related_member_email == email

    def other_end(self, email: str) -> str:
        """The endpoint that is not ``email``."""
        return self.related_member_email if self.member_email == email else self.member_email

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "member_email": self.member_email,
            "related_member_email": self.related_member_email,
            "relation_type": self.relation_type.value,
            "description": self.description,
            "created_by": self.created_by,
            "created_at": self.created_at,
        }

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "MemberRelation":
        """Parse a relation from the association API payload (camelCase)."""
        return cls(
            id=str(data["id"]),
            member_email=data["memberEmail"],
            related_member_email=data["relatedMemberEmail"],
            relation_type=RelationType(data["relationType"]),
            description=data.get("description"),
            created_by=data.get("createdBy"),
            created_at=data.get("createdAt"),
        )


@dataclass(frozen=True)
class GraphNode:
    """Node representation handed to the renderer."""
    id: str
    label: str
    size: float
    color: str
    type: NodeType = NodeType.MEMBER
    member: Optional[Member] = None
    patron: Optional[Patron] = None
    connection_count: int = 0
    relation_types: FrozenSet[EdgeType] = field(default_factory=frozenset)

    @property
    def record(self):
        """The member or patron behind this node."""
        return self.member if self.type == NodeType.MEMBER else self.patron

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "size": self.size,
            "color": self.color,
            "data": {
                "node_type": self.type.value,
                "member": self.member.to_dict() if self.member else None,
                "patron": self.patron.to_dict() if self.patron else None,
                "connection_count": self.connection_count,
                "relation_types": sorted(t.value for t in self.relation_types),
            }
        }


@dataclass(frozen=True)
class GraphEdge:
    """Edge representation handed to the renderer."""
    id: str
    source: str
    target: str
    type: EdgeType
    label: str
    color: str
    size: int
    relation: Optional[MemberRelation] = None
    patron: Optional[Patron] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "label": self.label,
            "color": self.color,
            "size": self.size,
            "data": {
                "relation_type": self.type.value,
                "relation": self.relation.to_dict() if self.relation else None,
                "patron_id": self.patron.id if self.patron else None,
            }
        }
