# tests/conftest.py
import pytest

from pkg_broadcast.adapters.jwt.token_codec import JWTTokenCodec
from pkg_broadcast.application.use_cases.issue_token import IssueTokenUseCase
from pkg_broadcast.domain.value_objects import ApiKey

KEY_NAME = "appId.keyId"
SECRET = "s3cr3t-signing-secret-0123456789abcdef"
NOW = 1_700_000_000


class FixedClock:
    def __init__(self, now: int = NOW) -> None:
        self.current = now

    def now(self) -> int:
        return self.current


@pytest.fixture
def api_key() -> ApiKey:
    return ApiKey(f"{KEY_NAME}:{SECRET}")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def codec() -> JWTTokenCodec:
    return JWTTokenCodec()


@pytest.fixture
def issue_token(api_key, clock, codec) -> IssueTokenUseCase:
    return IssueTokenUseCase(api_key=api_key, clock=clock, codec=codec)
