"""
PM Scan Engine - Sheet Web App Client
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): persist_tasks reports False instead of raising;
                      injectable transport
v1.0.0 (2026-10-05): Initial client (full database fetch, create/update work order)

The remote system of record is a spreadsheet web app. Every call goes to one
URL with the API key as a query parameter; writes are POSTed as
{"action": ..., "payload": ...} and answered with
{"status": "success" | "error", "result": ..., "message": ...}.
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from config import settings
from models.generation import CreatedWorkOrder
from models.maintenance import EntitySnapshot, Task, WorkOrder
from services.sheet_normalizer import build_snapshot

logger = logging.getLogger(__name__)


class RemoteError(Exception):
    """Remote call failed (transport, HTTP status, or error envelope)"""
    pass


class SheetClient:
    """Async client for the sheet web app."""

    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = api_url if api_url is not None else settings.SHEET_API_URL
        self.api_key = api_key if api_key is not None else settings.SHEET_API_KEY
        self.timeout = timeout if timeout is not None else settings.REMOTE_TIMEOUT
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            follow_redirects=True,  # web app deployments answer via redirect
        )

    async def _post(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST an action and return the decoded envelope."""
        if not self.api_url:
            raise RemoteError("SHEET_API_URL is not configured")

        body = json.dumps({"action": action, "payload": payload}, default=str)
        async with self._client() as client:
            try:
                response = await client.post(
                    self.api_url,
                    params={"key": self.api_key},
                    content=body,
                    headers={"Content-Type": "text/plain"},
                )
            except httpx.HTTPError as e:
                raise RemoteError(f"{action}: network error: {e}") from e

        if response.status_code >= 400:
            raise RemoteError(f"{action}: HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"{action}: invalid JSON response") from e

    async def fetch_snapshot(self) -> EntitySnapshot:
        """Load every sheet tab and normalize it into an EntitySnapshot."""
        if not self.api_url:
            raise RemoteError("SHEET_API_URL is not configured")

        async with self._client() as client:
            try:
                response = await client.get(
                    self.api_url,
                    params={"key": self.api_key, "t": int(time.time() * 1000)},
                )
            except httpx.HTTPError as e:
                raise RemoteError(f"fetch database: network error: {e}") from e

        if response.status_code >= 400:
            logger.error(f"Sheet API response status: {response.status_code}")
            raise RemoteError(f"fetch database: HTTP {response.status_code}")

        return build_snapshot(response.json())

    async def create_work_order(self, draft: WorkOrder) -> CreatedWorkOrder:
        """
        Create a work order. The draft's temporary id is ignored remotely.

        Returns:
            CreatedWorkOrder with the canonical id and number

        Raises:
            RemoteError: On any failure
        """
        envelope = await self._post(
            "createWorkOrder",
            {"workOrder": draft.model_dump(by_alias=True, mode="json")},
        )
        if envelope.get("status") != "success":
            message = envelope.get("message") or "Unknown server error"
            logger.error(f"Create work order rejected: {message}")
            raise RemoteError(message)

        result = envelope.get("result") or {}
        if not result.get("id"):
            raise RemoteError("createWorkOrder: response missing id")
        return CreatedWorkOrder(
            id=str(result["id"]),
            number=str(result.get("woNumber") or result.get("number") or result["id"]),
        )

    async def persist_tasks(self, work_order: WorkOrder, tasks: List[Task],
                            parts: Optional[List[Dict[str, Any]]] = None) -> bool:
        """
        Save a full work order record together with its tasks and parts.

        The update replaces the whole record remotely, so re-sending is safe.

        Returns:
            True on success, False otherwise
        """
        try:
            envelope = await self._post("updateWorkOrder", {
                "workOrder": work_order.model_dump(by_alias=True, mode="json"),
                "tasks": [t.model_dump(by_alias=True, mode="json") for t in tasks],
                "parts": parts or [],
            })
        except RemoteError as e:
            logger.error(f"Save of work order {work_order.id} failed: {e}")
            return False
        return envelope.get("status") == "success"


# Singleton
_client = SheetClient()


def get_client() -> SheetClient:
    return _client
