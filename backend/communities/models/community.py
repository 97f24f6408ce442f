"""Community ORM: persists community records and their member roster.

Invariants:
    - id is a string(36) primary key assigned by the service (never by the DB)
    - (community_id, user_id) is the roster primary key: a member cannot appear twice
    - version increases by one on every committed change (optimistic concurrency)

Design Decisions:
    - Roster as its own table over a JSON array column: set semantics enforced by the
      primary key, and "communities of user X" is an indexed join
    - ON DELETE CASCADE on the roster: a hard delete leaves no orphan members
    - created_at only orders listings; it is not part of the domain record
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from communities.db.base import Base


class CommunityModel(Base):
    """Community row. Members live in community_members."""
    __tablename__ = "communities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class CommunityMemberModel(Base):
    """One (community, user) roster entry."""
    __tablename__ = "community_members"

    community_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("communities.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36), primary_key=True, index=True,
    )
