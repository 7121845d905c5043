"""
Member detail.

Groups a selected member's relations by type for the detail panel.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List, Iterable

from .schema import Member, MemberRelation, RelationType


@dataclass(frozen=True)
class RelatedMember:
    """One entry of the detail panel: a relation and who is on the other end."""
    relation: MemberRelation
    email: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "relation_id": self.relation.id,
            "email": self.email,
            "name": self.name,
            "description": self.relation.description,
            "created_at": self.relation.created_at,
        }


@dataclass(frozen=True)
class MemberDetail:
    """A member with its relations grouped by type."""
    member: Member
    relations: Dict[RelationType, List[RelatedMember]] = field(default_factory=dict)

    @property
    def total_connections(self) -> int:
        return sum(len(entries) for entries in self.relations.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "member": self.member.to_dict(),
            "total_connections": self.total_connections,
            "relations": {
                relation_type.value: [entry.to_dict() for entry in entries]
                for relation_type, entries in self.relations.items()
            }
        }


def member_detail(
    email: str,
    members: Iterable[Member],
    relations: Iterable[MemberRelation]
) -> Optional[MemberDetail]:
    """
    Build the detail view of a member.

    Args:
        email: Selected member email (node ID)
        members: Full member snapshot
        relations: Full relation snapshot

    Returns:
        MemberDetail, or None if the member is unknown
    """
    members_by_email = {m.email: m for m in members}
    member = members_by_email.get(email)
    if member is None:
        return None

    grouped: Dict[RelationType, List[RelatedMember]] = {t: [] for t in RelationType}
    for relation in relations:
        if not relation.involves(email):
            continue

        other_email = relation.other_end(email)
        other = members_by_email.get(other_email)
        grouped[relation.relation_type].append(RelatedMember(
            relation=relation,
            email=other_email,
            name=other.full_name if other else other_email
        ))

    return MemberDetail(member=member, relations=grouped)
