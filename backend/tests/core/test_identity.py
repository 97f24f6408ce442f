"""Bearer parsing: verifies header checks happen before any token handling."""

import pytest

from communities.core.errors import UnauthenticatedError
from communities.core.identity import parse_bearer_credential


def test_extracts_token_after_prefix():
    assert parse_bearer_credential("Bearer abc.def.ghi") == "abc.def.ghi"


@pytest.mark.parametrize("header", [
    None, "", "abc.def.ghi", "Basic dXNlcjpwYXNz", "bearer abc", "Bearer",
])
def test_missing_or_wrong_scheme_is_unauthenticated(header):
    with pytest.raises(UnauthenticatedError) as exc_info:
        parse_bearer_credential(header)
    assert exc_info.value.http_status == 401


def test_empty_token_is_left_for_the_verifier():
    assert parse_bearer_credential("Bearer ") == ""
