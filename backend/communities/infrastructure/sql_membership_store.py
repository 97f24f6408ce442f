"""SQL Membership Store: MembershipStore over SQLAlchemy with optimistic concurrency.

Invariants:
    - compare_and_update writes only if the row version it read is still current
      (UPDATE ... WHERE version = :seen); otherwise it rolls back and re-reads
    - Membership writes are the diff between the read and mutated member sets, so
      concurrent joins/leaves by different users compose instead of overwriting
    - Retries are bounded by max_retries; exhaustion raises ConcurrencyError (409)
    - Reads select columns, never ORM entities, so the session identity map
      cannot serve a stale roster on retry

Design Decisions:
    - Optimistic versioning over SELECT ... FOR UPDATE: works on SQLite (tests) and
      PostgreSQL (production) with the same code path
    - Roster rows deleted explicitly on delete: SQLite does not enforce the
      ON DELETE CASCADE foreign key unless PRAGMA foreign_keys is on
"""

import logging
from collections import defaultdict

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from communities.core.community import Community, check_transition
from communities.core.domain_types import CommunityId, UserId
from communities.core.errors import ConcurrencyError, ErrorContext
from communities.core.repository_protocols import CommunityMutator
from communities.models.community import CommunityMemberModel, CommunityModel

logger = logging.getLogger(__name__)

_COMMUNITY_COLUMNS = (
    CommunityModel.id,
    CommunityModel.name,
    CommunityModel.description,
    CommunityModel.created_by,
    CommunityModel.version,
)


class SqlMembershipStore:
    """MembershipStore backed by the communities / community_members tables."""

    def __init__(self, db: AsyncSession, max_retries: int = 5):
        self._db = db
        self._max_retries = max_retries

    async def insert(self, community: Community) -> Community:
        try:
            await self._db.execute(
                insert(CommunityModel).values(
                    id=community.id,
                    name=community.name,
                    description=community.description,
                    created_by=community.created_by,
                    version=1,
                ),
            )
            await self._db.execute(
                insert(CommunityMemberModel),
                [
                    {"community_id": community.id, "user_id": user_id}
                    for user_id in sorted(community.members)
                ],
            )
            await self._db.commit()
        except IntegrityError:
            await self._db.rollback()
            raise ConcurrencyError(
                "Community id already exists",
                ErrorContext(community_id=community.id),
            )
        return community

    async def get(self, community_id: CommunityId) -> Community | None:
        loaded = await self._load_versioned(community_id)
        return loaded[0] if loaded else None

    async def get_all(self) -> list[Community]:
        return await self._load_many(
            select(*_COMMUNITY_COLUMNS).order_by(
                CommunityModel.created_at, CommunityModel.id,
            ),
        )

    async def get_all_where_member_contains(
        self, user_id: UserId,
    ) -> list[Community]:
        return await self._load_many(
            select(*_COMMUNITY_COLUMNS)
            .join(
                CommunityMemberModel,
                CommunityMemberModel.community_id == CommunityModel.id,
            )
            .where(CommunityMemberModel.user_id == user_id)
            .order_by(CommunityModel.created_at, CommunityModel.id),
        )

    async def compare_and_update(
        self, community_id: CommunityId, mutator: CommunityMutator,
    ) -> Community | None:
        for attempt in range(1, self._max_retries + 1):
            loaded = await self._load_versioned(community_id)
            if loaded is None:
                return None
            current, version = loaded
            updated = mutator(current)
            check_transition(current, updated)
            if updated == current:
                return current

            result = await self._db.execute(
                update(CommunityModel)
                .where(
                    CommunityModel.id == community_id,
                    CommunityModel.version == version,
                )
                .values(
                    name=updated.name,
                    description=updated.description,
                    version=version + 1,
                )
                .execution_options(synchronize_session=False),
            )
            if result.rowcount == 1:
                await self._write_member_diff(community_id, current, updated)
                await self._db.commit()
                return updated

            await self._db.rollback()
            logger.warning(
                "Community version conflict, retrying",
                extra={"community_id": community_id, "attempt": attempt},
            )

        raise ConcurrencyError(
            f"Community changed concurrently {self._max_retries} times; giving up",
            ErrorContext(community_id=community_id),
        )

    async def delete(self, community_id: CommunityId) -> bool:
        await self._db.execute(
            delete(CommunityMemberModel)
            .where(CommunityMemberModel.community_id == community_id)
            .execution_options(synchronize_session=False),
        )
        result = await self._db.execute(
            delete(CommunityModel)
            .where(CommunityModel.id == community_id)
            .execution_options(synchronize_session=False),
        )
        await self._db.commit()
        return result.rowcount > 0

    # ─── Helpers ────────────────────────────────────────────────

    async def _write_member_diff(
        self, community_id: CommunityId, current: Community, updated: Community,
    ) -> None:
        added = updated.members - current.members
        removed = current.members - updated.members
        if added:
            await self._db.execute(
                insert(CommunityMemberModel),
                [
                    {"community_id": community_id, "user_id": user_id}
                    for user_id in sorted(added)
                ],
            )
        if removed:
            await self._db.execute(
                delete(CommunityMemberModel)
                .where(
                    CommunityMemberModel.community_id == community_id,
                    CommunityMemberModel.user_id.in_(removed),
                )
                .execution_options(synchronize_session=False),
            )

    async def _load_versioned(
        self, community_id: CommunityId,
    ) -> tuple[Community, int] | None:
        row = (await self._db.execute(
            select(*_COMMUNITY_COLUMNS).where(CommunityModel.id == community_id),
        )).one_or_none()
        if row is None:
            return None
        member_ids = (await self._db.execute(
            select(CommunityMemberModel.user_id)
            .where(CommunityMemberModel.community_id == community_id),
        )).scalars().all()
        return _to_domain(row, member_ids), row.version

    async def _load_many(self, stmt) -> list[Community]:
        rows = (await self._db.execute(stmt)).all()
        if not rows:
            return []
        members: dict[str, set[str]] = defaultdict(set)
        member_rows = await self._db.execute(
            select(CommunityMemberModel.community_id, CommunityMemberModel.user_id)
            .where(CommunityMemberModel.community_id.in_([r.id for r in rows])),
        )
        for community_id, user_id in member_rows:
            members[community_id].add(user_id)
        return [_to_domain(row, members[row.id]) for row in rows]


def _to_domain(row, member_ids) -> Community:
    return Community(
        id=CommunityId(row.id),
        name=row.name,
        description=row.description,
        created_by=UserId(row.created_by),
        members=frozenset(UserId(m) for m in member_ids),
    )
