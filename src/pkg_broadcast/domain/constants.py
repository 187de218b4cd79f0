from enum import Enum


class ChannelClass(Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    PRESENCE = "presence"


# Canonical (colon) prefixes, as used inside capability claims
PUBLIC_PREFIX = "public:"
PRIVATE_PREFIX = "private:"
PRESENCE_PREFIX = "presence:"

# Legacy (hyphen) prefixes sent by broadcasting clients
LEGACY_PRIVATE_PREFIX = "private-"
LEGACY_PRESENCE_PREFIX = "presence-"

JWT_TYPE = "JWT"
JWT_ALGORITHM = "HS256"

CLAIM_CLIENT_ID = "x-ably-clientId"
CLAIM_CAPABILITY = "x-ably-capability"

ALL_OPERATIONS = ("*",)

# See https://ably.com/docs/core-features/authentication#capability-operations
DEFAULT_PUBLIC_CAPABILITY = ("subscribe", "history", "channel-metadata")
RESTRICTED_PUBLIC_CAPABILITY = ("channel-metadata",)

DEFAULT_TOKEN_EXPIRY = 3600
SERVER_TIME_CACHE_KEY = "ably_server_time_diff"
SERVER_TIME_TTL = 6 * 3600
