"""REST Client — the client layer's view of the HTTP fallback surface.

Invariants:
    - Every request carries the caller's X-User-Id session identity
    - Non-2xx responses and transport failures raise ApiRequestError
    - Returned payloads are the server's JSON unchanged (camelCase dicts)

Design Decisions:
    - httpx.AsyncClient injected or owned: tests pass one bound to an ASGITransport
"""

import logging

import httpx

from socialhub.core.errors import ApiRequestError

logger = logging.getLogger(__name__)


class SocialHubClient:
    """Async REST client for conversations, messages and notifications."""

    def __init__(
        self,
        base_url: str,
        user_id: int,
        http: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.user_id = user_id
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._prefix = f"{base_url.rstrip('/')}/api/v1"

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _request(self, method: str, path: str, json: dict | None = None):
        try:
            response = await self._http.request(
                method, f"{self._prefix}{path}", json=json,
                headers={"X-User-Id": str(self.user_id)},
            )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}", extra={"user_id": self.user_id})
            raise ApiRequestError(f"{method} {path} failed: {e}")
        if response.is_error:
            raise ApiRequestError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    async def get_conversations(self) -> list[dict]:
        return await self._request("GET", "/conversations")

    async def get_messages(self, other_user_id: int) -> list[dict]:
        return await self._request("GET", f"/messages/{other_user_id}")

    async def send_message(self, receiver_id: int, content: str) -> dict:
        return await self._request(
            "POST", f"/messages/{receiver_id}", json={"content": content},
        )

    async def mark_message_read(self, message_id: int) -> dict:
        return await self._request("POST", f"/messages/{message_id}/read")

    async def get_notifications(self) -> list[dict]:
        return await self._request("GET", "/notifications")

    async def mark_notification_read(self, notification_id: int) -> dict:
        return await self._request("POST", f"/notifications/{notification_id}/read")

    async def get_unread_counts(self) -> dict:
        return await self._request("GET", "/notifications/unread-count")

    async def like_post(self, post_id: int) -> dict:
        return await self._request("POST", f"/posts/{post_id}/like")

    async def follow(self, user_id: int) -> dict:
        return await self._request("POST", f"/users/{user_id}/follow")

    async def unfollow(self, user_id: int) -> dict:
        return await self._request("POST", f"/users/{user_id}/unfollow")
