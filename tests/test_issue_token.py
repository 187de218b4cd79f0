# tests/test_issue_token.py
import json

import pytest

from pkg_broadcast.application.use_cases.issue_token import (
    IssueTokenUseCase,
    default_channel_claims,
)
from pkg_broadcast.domain.exceptions import MalformedTokenError

from conftest import KEY_NAME, NOW, SECRET


def _claims(codec, token):
    return codec.decode(token).claims


def _capability(codec, token):
    return json.loads(_claims(codec, token)["x-ably-capability"])


def test_header_uses_key_name(issue_token, codec):
    token = issue_token.execute("")
    assert codec.decode(token).header == {"typ": "JWT", "alg": "HS256", "kid": KEY_NAME}


def test_fresh_token_without_channel_has_only_public_defaults(issue_token, codec):
    token = issue_token.execute("")
    claims = _claims(codec, token)

    assert _capability(codec, token) == {"public:*": ["subscribe", "history", "channel-metadata"]}
    assert claims["iat"] == NOW
    assert claims["exp"] == NOW + 3600
    assert claims["x-ably-clientId"] is None


def test_disabled_public_channels_only_expose_metadata(api_key, clock, codec):
    use_case = IssueTokenUseCase(
        api_key=api_key,
        clock=clock,
        codec=codec,
        default_claims=default_channel_claims(disable_public_channels=True),
    )
    assert _capability(codec, use_case.execute("")) == {"public:*": ["channel-metadata"]}


def test_channel_capability_is_added_to_defaults(api_key, clock, codec):
    use_case = IssueTokenUseCase(api_key=api_key, clock=clock, codec=codec, token_expiry=60)
    token = use_case.execute("public:news")
    claims = _claims(codec, token)

    assert claims["exp"] - claims["iat"] == 60
    assert _capability(codec, token) == {
        "public:*": ["subscribe", "history", "channel-metadata"],
        "public:news": ["*"],
    }


def test_client_id_is_stringified(issue_token, codec):
    assert _claims(codec, issue_token.execute("", client_id=42))["x-ably-clientId"] == "42"
    assert _claims(codec, issue_token.execute("", client_id=""))["x-ably-clientId"] is None


def test_capability_serialization_is_sorted(issue_token, codec):
    token = issue_token.execute("private:a", capability=["subscribe", "presence"])
    assert _claims(codec, token)["x-ably-capability"] == (
        '{"private:a":["subscribe","presence"],'
        '"public:*":["subscribe","history","channel-metadata"]}'
    )


def test_issuance_is_deterministic(issue_token):
    assert issue_token.execute("private:a", client_id="u1") == issue_token.execute(
        "private:a", client_id="u1"
    )


def test_renewal_keeps_window_and_other_capabilities(issue_token, codec, clock):
    first = issue_token.execute("private:room0", client_id="u1", capability=["subscribe"])
    first_claims = _claims(codec, first)

    clock.current = NOW + 600
    renewed = issue_token.execute("private:room1", previous_token=first, client_id="u1")
    renewed_claims = _claims(codec, renewed)

    assert renewed_claims["iat"] == first_claims["iat"]
    assert renewed_claims["exp"] == first_claims["exp"]
    assert _capability(codec, renewed) == {
        **_capability(codec, first),
        "private:room1": ["*"],
    }


def test_renewal_replaces_existing_channel_capability(issue_token, codec):
    first = issue_token.execute("private:room1", capability=["subscribe", "history"])
    renewed = issue_token.execute("private:room1", previous_token=first, capability=["publish"])

    assert _capability(codec, renewed)["private:room1"] == ["publish"]


def test_renewal_does_not_reapply_defaults(api_key, clock, codec):
    restricted = IssueTokenUseCase(
        api_key=api_key,
        clock=clock,
        codec=codec,
        default_claims=default_channel_claims(disable_public_channels=True),
    )
    first = restricted.execute("public:news")

    # a broadcaster with different defaults renews from the token's own claims
    default = IssueTokenUseCase(api_key=api_key, clock=clock, codec=codec)
    renewed = default.execute("private:a", previous_token=first)
    assert _capability(codec, renewed)["public:*"] == ["channel-metadata"]


def test_expired_previous_token_is_not_renewed(issue_token, codec, clock):
    first = issue_token.execute("private:room0")

    clock.current = NOW + 3600
    fresh = issue_token.execute("private:room1", previous_token=first)
    claims = _claims(codec, fresh)

    assert claims["iat"] == NOW + 3600
    assert "private:room0" not in _capability(codec, fresh)


def test_previous_token_signed_with_other_key_is_not_renewed(api_key, issue_token, codec):
    foreign = codec.encode(
        {"typ": "JWT", "alg": "HS256", "kid": "other"},
        {"iat": 1, "exp": NOW + 10, "x-ably-capability": '{"*":["*"]}'},
        "a-completely-different-secret-0123456789",
    )
    token = issue_token.execute("", previous_token=foreign)
    assert "*" not in _capability(codec, token)


def test_malformed_previous_token_takes_fresh_path(issue_token, codec):
    token = issue_token.execute("public:news", previous_token="definitely-not-a-jwt")
    claims = _claims(codec, token)

    assert claims["iat"] == NOW
    assert "public:news" in _capability(codec, token)


def test_valid_previous_token_with_bad_capability_raises(issue_token, codec):
    broken = codec.encode(
        issue_token.header(),
        {"iat": NOW, "exp": NOW + 10, "x-ably-capability": "not json"},
        SECRET,
    )
    with pytest.raises(MalformedTokenError):
        issue_token.execute("private:a", previous_token=broken)
