"""Access Gate: resolves a raw Authorization header to a directory UserId.

Invariants:
    - Header parsed before any IO (UnauthenticatedError short-circuits)
    - Verifier failures and unknown subjects both surface as IdentityResolutionError
      subclasses with one public envelope; only the logs tell them apart
    - No side effects; safe to call concurrently
"""

import logging

from communities.core.domain_types import UserId
from communities.core.errors import IdentityNotFoundError, IdentityResolutionError
from communities.core.identity import parse_bearer_credential
from communities.core.repository_protocols import TokenVerifier, UserDirectory

logger = logging.getLogger(__name__)


class AccessGate:
    """Composes bearer parsing, token verification and directory lookup."""

    def __init__(self, verifier: TokenVerifier, directory: UserDirectory):
        self._verifier = verifier
        self._directory = directory

    async def resolve_identity(self, raw_header_value: str | None) -> UserId:
        token = parse_bearer_credential(raw_header_value)
        try:
            subject = await self._verifier.extract_subject(token)
            user = await self._directory.find_by_email(subject)
            if user is None:
                raise IdentityNotFoundError()
        except IdentityResolutionError as e:
            logger.info(
                "Identity resolution failed", extra={"reason": e.reason},
            )
            raise
        return user.id
