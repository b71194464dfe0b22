from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from src.correlation.domain.exceptions import CandidateTransportError
from src.correlation.domain.protocols import AnnotationSink, CandidateSource
from src.correlation.domain.value_objects import CandidateResource
from src.shared.exceptions import NotConfiguredError
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class HubSpotConversationsClient(CandidateSource, AnnotationSink):
    """
    Minimal client wrapper for the HubSpot Conversations v3 API.
    - Thread listing for poll resolution (newest activity first).
    - Internal COMMENT messages for the follow-up annotation.
    - Keep the token out of logs.
    """

    THREADS_PATH = "/conversations/v3/conversations/threads"

    def __init__(
        self,
        *,
        access_token: Optional[str],
        inbox_id: Optional[str],
        base_url: str = "https://api.hubapi.com",
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._token = access_token
        self._inbox_id = inbox_id
        self._base = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def list_candidates(self, after_ms: int, limit: int) -> List[CandidateResource]:
        """
        GET /conversations/v3/conversations/threads
        ?inboxId=..&sort=latestMessageTimestamp&latestMessageTimestampAfter=..&limit=..
        """
        if not self._inbox_id:
            raise NotConfiguredError("HUBSPOT_INBOX_ID not configured")
        params = {
            "inboxId": str(self._inbox_id),
            "sort": "latestMessageTimestamp",
            "latestMessageTimestampAfter": str(after_ms),
            "limit": str(limit),
        }
        data = await self._request("GET", self.THREADS_PATH, params=params)
        results = data.get("results") if isinstance(data, dict) else None
        rows = results if isinstance(results, list) else []
        candidates = [c for c in (CandidateResource.from_listing(r) for r in rows if isinstance(r, dict)) if c]
        logger.debug("Threads listed", count=len(candidates), after_ms=after_ms)
        return candidates

    async def post_annotation(self, resource_id: str, text: str, rich_text: Optional[str] = None) -> None:
        """
        POST /conversations/v3/conversations/threads/{threadId}/messages
        {"type": "COMMENT", "text": .., "richText": ..}
        """
        body: Dict[str, Any] = {"type": "COMMENT", "text": text}
        if rich_text:
            body["richText"] = rich_text
        await self._request("POST", f"{self.THREADS_PATH}/{resource_id}/messages", json=body)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        if not self._token:
            raise NotConfiguredError("HUBSPOT_ACCESS_TOKEN not configured")
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }
        try:
            r = await self._client.request(method, f"{self._base}{path}", headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise CandidateTransportError(f"HubSpot API timeout: {method} {path}") from exc
        except httpx.HTTPError as exc:
            raise CandidateTransportError(f"HubSpot API unreachable: {exc}") from exc

        if r.status_code >= 400:
            raise CandidateTransportError(f"HubSpot API error {r.status_code}: {r.text}", status=r.status_code)
        if not r.content:
            return {}
        try:
            return r.json()
        except ValueError as exc:
            raise CandidateTransportError("HubSpot API returned invalid JSON", status=r.status_code) from exc
