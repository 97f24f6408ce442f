"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no base class
    - Async in Protocol: implementations do IO (database, key fetches), but the
      mutators passed to compare_and_update are plain pure functions
"""

from typing import Callable, Protocol

from communities.core.community import Community
from communities.core.domain_types import CommunityId, UserId
from communities.core.identity import User

CommunityMutator = Callable[[Community], Community]


class TokenVerifier(Protocol):
    """Validates an opaque bearer token and returns its subject (e.g. email).

    Raises TokenInvalidError for any token it cannot read.
    """
    async def extract_subject(self, token: str) -> str: ...


class UserDirectory(Protocol):
    """Maps a subject identifier to a directory user."""
    async def find_by_email(self, email: str) -> User | None: ...


class MembershipStore(Protocol):
    """Keyed community storage with an atomic per-community read-modify-write."""
    async def insert(self, community: Community) -> Community: ...
    async def get(self, community_id: CommunityId) -> Community | None: ...
    async def get_all(self) -> list[Community]: ...
    async def get_all_where_member_contains(
        self, user_id: UserId,
    ) -> list[Community]: ...
    async def compare_and_update(
        self, community_id: CommunityId, mutator: CommunityMutator,
    ) -> Community | None: ...
    async def delete(self, community_id: CommunityId) -> bool: ...
