"""Community Service: creation, lookup, update, deletion and join/leave transitions.

Invariants:
    - Every mutation of an existing community goes through store.compare_and_update
    - Actor-requiring operations receive an already-resolved UserId (AccessGate ran first)
    - Absence is reported as None/False, never raised

Design Decisions:
    - Pure transitions (core/community.py) passed as mutators: the store owns atomicity,
      the service owns meaning
    - join/leave report community existence only: "already joined" and "joined" are
      both success
    - update/delete take no actor: the public write surface is kept as observed
"""

import logging
from functools import partial
from typing import Callable
from uuid import uuid4

from communities.core.community import (
    Community, build_community, validate_name, with_details, with_member, without_member,
)
from communities.core.domain_types import CommunityId, UserId
from communities.core.repository_protocols import MembershipStore

logger = logging.getLogger(__name__)


def _new_community_id() -> CommunityId:
    return CommunityId(str(uuid4()))


class CommunityService:
    """Invariant-preserving operations over a MembershipStore."""

    def __init__(
        self,
        store: MembershipStore,
        id_factory: Callable[[], CommunityId] = _new_community_id,
    ):
        self._store = store
        self._new_id = id_factory

    async def create_community(
        self, name: str, description: str | None, actor: UserId,
    ) -> Community:
        """Create a community with the actor as creator and sole member."""
        community = build_community(self._new_id(), name, description, actor)
        created = await self._store.insert(community)
        logger.info(
            "Community created",
            extra={"community_id": created.id, "actor_id": actor},
        )
        return created

    async def get_all_communities(self) -> list[Community]:
        return await self._store.get_all()

    async def get_community_by_id(
        self, community_id: CommunityId,
    ) -> Community | None:
        return await self._store.get(community_id)

    async def join_community(
        self, community_id: CommunityId, actor: UserId,
    ) -> bool:
        """Add actor to members. False only when the community does not exist."""
        updated = await self._store.compare_and_update(
            community_id, partial(with_member, user_id=actor),
        )
        if updated is None:
            logger.info(
                "Join on missing community",
                extra={"community_id": community_id, "actor_id": actor},
            )
            return False
        logger.info(
            "Community joined",
            extra={"community_id": community_id, "actor_id": actor},
        )
        return True

    async def leave_community(
        self, community_id: CommunityId, actor: UserId,
    ) -> bool:
        """Remove actor from members. The creator may leave; created_by is kept."""
        updated = await self._store.compare_and_update(
            community_id, partial(without_member, user_id=actor),
        )
        if updated is None:
            logger.info(
                "Leave on missing community",
                extra={"community_id": community_id, "actor_id": actor},
            )
            return False
        logger.info(
            "Community left",
            extra={"community_id": community_id, "actor_id": actor},
        )
        return True

    async def get_communities_by_user(self, actor: UserId) -> list[Community]:
        return await self._store.get_all_where_member_contains(actor)

    async def update_community(
        self, community_id: CommunityId, name: str, description: str | None,
    ) -> Community | None:
        """Overwrite name and description. Membership and creator are untouched."""
        # Reject a bad name before any store access
        validate_name(name)
        updated = await self._store.compare_and_update(
            community_id,
            partial(with_details, name=name, description=description),
        )
        if updated is not None:
            logger.info(
                "Community updated", extra={"community_id": community_id},
            )
        return updated

    async def delete_community(self, community_id: CommunityId) -> bool:
        deleted = await self._store.delete(community_id)
        if deleted:
            logger.info(
                "Community deleted", extra={"community_id": community_id},
            )
        return deleted
