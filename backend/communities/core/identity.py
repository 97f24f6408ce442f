"""Identity: user record and bearer-header parsing.

Invariants:
    - parse_bearer_credential never touches IO; it only inspects the header text
    - The prefix check is case-sensitive ("Bearer ", single space)
"""

from dataclasses import dataclass

from communities.core.domain_types import BEARER_PREFIX, UserId
from communities.core.errors import UnauthenticatedError


@dataclass(frozen=True)
class User:
    """Directory record. Only `id` is referenced by communities."""
    id: UserId
    email: str


def parse_bearer_credential(raw_header: str | None) -> str:
    """Extract the token from an Authorization header value.

    Raises UnauthenticatedError when the header is absent or uses another
    scheme. An empty token after the prefix is returned as-is and left for
    the token verifier to reject.
    """
    if raw_header is None or not raw_header.startswith(BEARER_PREFIX):
        raise UnauthenticatedError()
    return raw_header[len(BEARER_PREFIX):].strip()
