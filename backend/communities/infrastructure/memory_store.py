"""In-Memory Membership Store: reference MembershipStore with per-community locks.

Invariants:
    - compare_and_update holds the community's lock across read, mutate and write
    - Locks are keyed by community id; different ids never contend
    - Records are frozen Community values, so get_all() returns a true snapshot

Design Decisions:
    - WeakValueDictionary of asyncio.Lock: a lock lives while some task holds or
      waits on it, then disappears; no cleanup on delete needed
    - Insertion order is the listing order (dict ordering)
"""

import asyncio
from weakref import WeakValueDictionary

from communities.core.community import Community, check_transition
from communities.core.domain_types import CommunityId, UserId
from communities.core.errors import ConcurrencyError, ErrorContext
from communities.core.repository_protocols import CommunityMutator


class InMemoryMembershipStore:
    """Process-local MembershipStore."""

    def __init__(self):
        self._records: dict[CommunityId, Community] = {}
        self._locks: WeakValueDictionary[CommunityId, asyncio.Lock] = (
            WeakValueDictionary()
        )

    def _lock_for(self, community_id: CommunityId) -> asyncio.Lock:
        lock = self._locks.get(community_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[community_id] = lock
        return lock

    async def insert(self, community: Community) -> Community:
        async with self._lock_for(community.id):
            if community.id in self._records:
                raise ConcurrencyError(
                    "Community id already exists",
                    ErrorContext(community_id=community.id),
                )
            self._records[community.id] = community
        return community

    async def get(self, community_id: CommunityId) -> Community | None:
        return self._records.get(community_id)

    async def get_all(self) -> list[Community]:
        return list(self._records.values())

    async def get_all_where_member_contains(
        self, user_id: UserId,
    ) -> list[Community]:
        return [c for c in list(self._records.values()) if user_id in c.members]

    async def compare_and_update(
        self, community_id: CommunityId, mutator: CommunityMutator,
    ) -> Community | None:
        async with self._lock_for(community_id):
            current = self._records.get(community_id)
            if current is None:
                return None
            updated = mutator(current)
            check_transition(current, updated)
            self._records[community_id] = updated
            return updated

    async def delete(self, community_id: CommunityId) -> bool:
        async with self._lock_for(community_id):
            return self._records.pop(community_id, None) is not None
