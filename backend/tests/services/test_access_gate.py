"""Access Gate: verifies header → token → directory resolution and its failure modes.

Invariants:
    - Bad header fails with 401 before the verifier is called
    - Verifier failure and unknown subject both fail with the IDENTITY_NOT_FOUND envelope
    - Success returns the directory's UserId
"""

import pytest

from communities.core.domain_types import UserId
from communities.core.errors import (
    IdentityNotFoundError, TokenInvalidError, UnauthenticatedError,
)
from communities.core.identity import User
from communities.infrastructure.token_verifier import JwtTokenVerifier
from communities.services.access_gate import AccessGate
from tests.services.tokens import TEST_SECRET, make_token


class _FakeVerifier:
    def __init__(self, subjects: dict[str, str]):
        self._subjects = subjects
        self.calls: list[str] = []

    async def extract_subject(self, token: str) -> str:
        self.calls.append(token)
        if token not in self._subjects:
            raise TokenInvalidError()
        return self._subjects[token]


class _FakeDirectory:
    def __init__(self, users: list[User]):
        self._by_email = {u.email: u for u in users}

    async def find_by_email(self, email: str) -> User | None:
        return self._by_email.get(email)


ALICE = User(id=UserId("u-alice"), email="alice@example.com")


@pytest.fixture
def verifier():
    return _FakeVerifier({
        "good": "alice@example.com", "ghost": "ghost@example.com",
    })


@pytest.fixture
def gate(verifier):
    return AccessGate(verifier, _FakeDirectory([ALICE]))


async def test_resolves_known_user(gate):
    assert await gate.resolve_identity("Bearer good") == ALICE.id


@pytest.mark.parametrize("header", [None, "good", "Token good", "bearer good"])
async def test_bad_header_is_unauthenticated_without_verifying(gate, verifier, header):
    with pytest.raises(UnauthenticatedError):
        await gate.resolve_identity(header)
    assert verifier.calls == []


async def test_unreadable_token_is_token_invalid(gate):
    with pytest.raises(TokenInvalidError):
        await gate.resolve_identity("Bearer forged")


async def test_unknown_subject_is_identity_not_found(gate):
    with pytest.raises(IdentityNotFoundError):
        await gate.resolve_identity("Bearer ghost")


async def test_repeated_calls_are_stable(gate):
    first = await gate.resolve_identity("Bearer good")
    second = await gate.resolve_identity("Bearer good")
    assert first == second == ALICE.id


# ─── With the real JWT verifier ─────────────────────────────────

@pytest.fixture
def jwt_gate():
    return AccessGate(
        JwtTokenVerifier(TEST_SECRET, "HS256"), _FakeDirectory([ALICE]),
    )


async def test_jwt_subject_resolves(jwt_gate):
    token = make_token("alice@example.com")
    assert await jwt_gate.resolve_identity(f"Bearer {token}") == ALICE.id


async def test_jwt_without_expiry_is_accepted(jwt_gate):
    token = make_token("alice@example.com", expires_in=None)
    assert await jwt_gate.resolve_identity(f"Bearer {token}") == ALICE.id
