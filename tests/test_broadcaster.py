# tests/test_broadcaster.py
import json

import pytest

from pkg_broadcast.adapters.jwt.token_codec import JWTTokenCodec
from pkg_broadcast.config.settings import BroadcasterSettings
from pkg_broadcast.domain.entities import AuthRequest
from pkg_broadcast.domain.exceptions import AccessDeniedError, BroadcastError, TransportError
from pkg_broadcast.integrations.common.broadcaster_factory import create_broadcaster

from conftest import FixedClock, KEY_NAME, SECRET


class RecordingPublisher:
    def __init__(self, error=None):
        self.error = error
        self.published = []

    def publish(self, channel, message):
        if self.error is not None:
            raise self.error
        self.published.append((channel, message.to_dict()))


def _settings(**overrides):
    return BroadcasterSettings(key=f"{KEY_NAME}:{SECRET}", **overrides)


def _capability(token):
    return json.loads(JWTTokenCodec().decode(token).claims["x-ably-capability"])


def test_settings_repr_hides_secret():
    assert SECRET not in repr(_settings())
    assert KEY_NAME in repr(_settings())


def test_disable_public_channels():
    broadcaster = create_broadcaster(_settings(disable_public_channels=True), clock=FixedClock())
    token = broadcaster.get_signed_token("")
    assert _capability(token) == {"public:*": ["channel-metadata"]}


def test_auth_with_registered_channel():
    broadcaster = create_broadcaster(_settings(), clock=FixedClock())
    broadcaster.channel("orders.{id}", lambda user, id: user == "ada")

    response = broadcaster.auth(AuthRequest(channel_name="private:orders.1", user="ada"))
    assert "private:orders.1" in _capability(response["token"])

    with pytest.raises(AccessDeniedError):
        broadcaster.auth(AuthRequest(channel_name="private:orders.1", user="bob"))


def test_custom_authorizer_disables_registry():
    broadcaster = create_broadcaster(
        _settings(),
        clock=FixedClock(),
        authorizer=lambda request, channel: True,
    )
    assert broadcaster.auth(AuthRequest(channel_name="private:x", user="ada"))["token"]

    with pytest.raises(RuntimeError):
        broadcaster.channel("x", lambda user: True)


def test_custom_user_resolver():
    broadcaster = create_broadcaster(
        _settings(),
        clock=FixedClock(),
        user_resolver=lambda request: request.raw,
    )
    broadcaster.channel("x", lambda user: user == "from-raw")

    assert broadcaster.auth(AuthRequest(channel_name="private:x", raw="from-raw"))["token"]


def test_broadcast():
    publisher = RecordingPublisher()
    broadcaster = create_broadcaster(_settings(), clock=FixedClock(), publisher=publisher)

    broadcaster.broadcast(["private-a", "b"], "Evt", {"x": 1})
    assert [channel for channel, _ in publisher.published] == ["private:a", "public:b"]
    assert broadcaster.format_channels(["presence-c"]) == ["presence:c"]


def test_broadcast_failure():
    publisher = RecordingPublisher(error=TransportError("boom"))
    broadcaster = create_broadcaster(_settings(), clock=FixedClock(), publisher=publisher)

    with pytest.raises(BroadcastError, match="Ably error: boom"):
        broadcaster.broadcast(["a"], "Evt")
