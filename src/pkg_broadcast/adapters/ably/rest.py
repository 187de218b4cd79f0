from typing import Optional
from urllib.parse import quote

from requests import RequestException, Response, Session

from ...domain.entities import OutboundMessage
from ...domain.exceptions import TransportError
from ...domain.value_objects import ApiKey

DEFAULT_REST_HOST = "rest.ably.io"


class AblyRestClient:
    """
    Minimal Ably REST client implementing the TimeSource and Publisher ports.

    Infrastructure layer:
    - knows Ably's `/time` and channel `messages` endpoints
    - authenticates publishes with HTTP basic auth (key name / secret)
    """

    def __init__(
        self,
        key: ApiKey,
        rest_host: str = DEFAULT_REST_HOST,
        timeout: float = 10.0,
        session: Optional[Session] = None,
    ) -> None:
        self._key = key
        self._base_url = f"https://{rest_host.strip().rstrip('/')}"
        self._timeout = timeout
        self._session = session or Session()

    # ------------------------------------------------------------------ #
    # TimeSource
    # ------------------------------------------------------------------ #

    def server_time_ms(self) -> int:
        try:
            response = self._session.get(f"{self._base_url}/time", timeout=self._timeout)
            response.raise_for_status()
            body = response.json()
            return int(body[0])
        except RequestException as exc:
            raise TransportError(f"Failed to fetch server time: {exc}") from exc
        except (ValueError, TypeError, LookupError) as exc:
            raise TransportError("Unexpected server time response") from exc

    # ------------------------------------------------------------------ #
    # Publisher
    # ------------------------------------------------------------------ #

    def publish(self, channel: str, message: OutboundMessage) -> None:
        url = f"{self._base_url}/channels/{quote(channel, safe='')}/messages"
        try:
            response = self._session.post(
                url,
                json=message.to_dict(),
                auth=(self._key.name, self._key.secret),
                timeout=self._timeout,
            )
        except RequestException as exc:
            raise TransportError(str(exc)) from exc

        if response.status_code >= 400:
            raise TransportError(self._error_message(response))

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _error_message(response: Response) -> str:
        """Prefer Ably's `{"error": {"message": ...}}` body over the raw text."""
        try:
            error = response.json().get("error") or {}
            message = error.get("message")
        except (ValueError, AttributeError):
            message = None
        return f"{response.status_code} {message or response.text}".strip()
