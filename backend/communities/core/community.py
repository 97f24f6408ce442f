"""Community Aggregate: immutable record plus the pure transitions applied to it.

Invariants:
    - members is a frozenset: joining twice cannot produce a duplicate
    - created_by is a member of the freshly built community
    - id and created_by never change; check_transition() rejects any mutator that tries
    - Transitions return a new Community, the input is never modified

Design Decisions:
    - Frozen dataclass: stores can hand out records as snapshots without copying
    - Leaving does not special-case the creator: created_by is a historical fact,
      not a membership guarantee
"""

from dataclasses import dataclass, replace

from communities.core.domain_types import CommunityId, UserId
from communities.core.errors import CommunityValidationError, ImmutableFieldError, ErrorContext


@dataclass(frozen=True)
class Community:
    """A named group with a member roster and a designated creator."""
    id: CommunityId
    name: str
    description: str
    created_by: UserId
    members: frozenset[UserId]


def validate_name(name: str) -> str:
    """Return the stripped name, rejecting empty or whitespace-only input."""
    stripped = (name or "").strip()
    if not stripped:
        raise CommunityValidationError(
            "Community name cannot be empty or whitespace", field="name",
        )
    return stripped


def build_community(
    community_id: CommunityId, name: str, description: str | None, creator: UserId,
) -> Community:
    """Build a new community with the creator as its only member."""
    return Community(
        id=community_id,
        name=validate_name(name),
        description=description or "",
        created_by=creator,
        members=frozenset({creator}),
    )


def with_member(community: Community, user_id: UserId) -> Community:
    if user_id in community.members:
        return community
    return replace(community, members=community.members | {user_id})


def without_member(community: Community, user_id: UserId) -> Community:
    if user_id not in community.members:
        return community
    return replace(community, members=community.members - {user_id})


def with_details(community: Community, name: str, description: str | None) -> Community:
    """Overwrite name and description; membership and creator are untouched."""
    return replace(
        community, name=validate_name(name), description=description or "",
    )


def check_transition(before: Community, after: Community) -> None:
    """Raise ImmutableFieldError if a mutation changed id or created_by."""
    for field_name in ("id", "created_by"):
        if getattr(before, field_name) != getattr(after, field_name):
            raise ImmutableFieldError(
                field_name, ErrorContext(community_id=before.id),
            )
