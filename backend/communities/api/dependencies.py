"""Dependency Wiring: builds services and the access gate per request.

Invariants:
    - The gate and the service share the request's database session (get_db is cached
      per request by FastAPI)
    - current_user_id runs the AccessGate before any handler body touches the store

Design Decisions:
    - Every capability is a FastAPI dependency: tests swap them via
      app.dependency_overrides instead of patching globals
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from communities.config import get_settings
from communities.core.domain_types import UserId
from communities.core.repository_protocols import TokenVerifier
from communities.infrastructure.database import get_db
from communities.infrastructure.sql_membership_store import SqlMembershipStore
from communities.infrastructure.sql_user_directory import SqlUserDirectory
from communities.infrastructure.token_verifier import JwtTokenVerifier
from communities.services.access_gate import AccessGate
from communities.services.community_service import CommunityService


def get_token_verifier() -> TokenVerifier:
    settings = get_settings()
    return JwtTokenVerifier(settings.jwt_secret, settings.jwt_algorithm)


def get_access_gate(
    db: AsyncSession = Depends(get_db),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> AccessGate:
    return AccessGate(verifier, SqlUserDirectory(db))


def get_community_service(
    db: AsyncSession = Depends(get_db),
) -> CommunityService:
    settings = get_settings()
    return CommunityService(
        SqlMembershipStore(db, settings.membership_update_max_retries),
    )


async def current_user_id(
    authorization: str | None = Header(None),
    gate: AccessGate = Depends(get_access_gate),
) -> UserId:
    """Resolve the Authorization header to a UserId or fail with 401/404."""
    return await gate.resolve_identity(authorization)
