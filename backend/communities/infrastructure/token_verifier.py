"""JWT Token Verifier: extracts the subject claim from a signed bearer token.

Invariants:
    - Signature and (when present) expiry are verified by PyJWT before the subject is read
    - Every failure (expired, malformed, bad signature, no subject) raises TokenInvalidError

Design Decisions:
    - Issuance lives elsewhere; this module only reads tokens
    - Algorithm list pinned from settings: a token cannot choose its own algorithm
"""

import logging

import jwt

from communities.core.errors import TokenInvalidError

logger = logging.getLogger(__name__)


class JwtTokenVerifier:
    """TokenVerifier for HMAC/RSA-signed JWTs carrying the email in `sub`."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self._secret = secret
        self._algorithms = [algorithm]

    async def extract_subject(self, token: str) -> str:
        if not token:
            raise TokenInvalidError()
        try:
            payload = jwt.decode(token, self._secret, algorithms=self._algorithms)
        except jwt.ExpiredSignatureError:
            logger.debug("Bearer token expired")
            raise TokenInvalidError()
        except jwt.InvalidTokenError as e:
            logger.debug(f"Bearer token rejected: {e}")
            raise TokenInvalidError()
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise TokenInvalidError()
        return subject
