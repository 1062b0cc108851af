"""Thin async HTTP client for the Writing Buddy API."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_ERROR = "Something went wrong sending your message. Please try again."


class ClientError(Exception):
    """A failed API call. ``message`` is the user-facing text the server sent back."""

    def __init__(self, status: int | None, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class WritingBuddyAPI:
    def __init__(
        self,
        base_url: str,
        owner_id: str,
        owner_header: str = "X-Owner-Id",
        timeout: float = 90.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={owner_header: owner_id},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "WritingBuddyAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ClientError(None, DEFAULT_ERROR) from e

        if resp.is_error:
            try:
                message = resp.json().get("error") or DEFAULT_ERROR
            except ValueError:
                message = DEFAULT_ERROR
            raise ClientError(resp.status_code, message)
        return resp.json()

    async def list_sessions(self) -> list[dict]:
        return await self._request("GET", "/api/sessions/")

    async def create_session(self, title: str, kind: str) -> dict:
        return await self._request("POST", "/api/sessions/", json={"title": title, "kind": kind})

    async def get_session(self, session_id: int) -> dict:
        return await self._request("GET", f"/api/sessions/{session_id}")

    async def update_session(self, session_id: int, **fields: str) -> dict:
        return await self._request("PATCH", f"/api/sessions/{session_id}", json=fields)

    async def submit_turn(self, session_id: int, message: str) -> str:
        data = await self._request("POST", "/api/chat/", json={"session_id": session_id, "message": message})
        return data["message"]

    async def finish_session(self, session_id: int) -> str:
        data = await self._request("POST", "/api/chat/finish", json={"session_id": session_id})
        return data["message"]
