"""Recovery of a generation whose event stream dropped before its terminal event.

The server keeps generating after the client disconnects, so a dropped stream
is reconciled by polling the status endpoint until the version settles.
"""
from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, AsyncIterable, Awaitable, Callable, Dict, Optional
import httpx
from app.core.config import settings
from app.core.workflow import EventType, ProjectStatus, VersionStatus

log = logging.getLogger(__name__)

CONNECTION_ERROR_SIGNATURES = ("network", "aborted", "failed to fetch", "load failed", "connection")


class ReconcileState(str, Enum):
    STREAMING = "streaming"
    COMPLETED = "completed"
    DISCONNECTED_PENDING = "disconnected-pending"
    RECOVERED = "recovered"
    FAILED = "failed"


def is_connection_error(exc: BaseException) -> bool:
    """True when the error means the transport dropped, not that generation failed."""
    if isinstance(exc, (httpx.TransportError, ConnectionError)):
        return True
    message = str(exc).lower()
    return any(sig in message for sig in CONNECTION_ERROR_SIGNATURES)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def is_settled(status: Dict[str, Any], started_at: datetime) -> bool:
    """Whether a status payload shows the run that started at ``started_at`` has finished."""
    latest = status.get("latestVersion")
    if latest:
        created_at = _parse_timestamp(latest.get("createdAt"))
        if created_at is not None and created_at >= started_at:
            if latest.get("status") in (VersionStatus.COMPLETE.value, VersionStatus.ERROR.value):
                return True
    return status.get("projectStatus") in (ProjectStatus.GENERATED.value, ProjectStatus.ERROR.value)


def outcome(status: Optional[Dict[str, Any]]) -> ReconcileState:
    if status is None:
        return ReconcileState.FAILED
    if status.get("projectStatus") == ProjectStatus.GENERATED.value:
        return ReconcileState.RECOVERED
    latest = status.get("latestVersion") or {}
    if latest.get("status") == VersionStatus.COMPLETE.value:
        return ReconcileState.RECOVERED
    return ReconcileState.FAILED


class StreamReconciler:
    """State machine: streaming -> (completed | disconnected-pending -> recovered | failed)."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        project_id: str,
        started_at: Optional[datetime] = None,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.project_id = project_id
        started_at = started_at or datetime.now(timezone.utc)
        if started_at.tzinfo is not None:
            started_at = started_at.astimezone(timezone.utc).replace(tzinfo=None)
        self.started_at = started_at
        self.max_attempts = max_attempts if max_attempts is not None else settings.status_poll_attempts
        self.interval = interval if interval is not None else settings.status_poll_interval
        self._sleep = sleep
        self.state = ReconcileState.STREAMING
        self.last_status: Optional[Dict[str, Any]] = None
        self.error: Optional[str] = None

    def _transition(self, state: ReconcileState) -> None:
        log.info("Reconciler %s -> %s", self.state.value, state.value,
                 extra={"project_id": self.project_id, "stage": "-"})
        self.state = state

    async def watch(self, events: AsyncIterable[Dict[str, Any]]) -> ReconcileState:
        """Consume decoded events, falling back to polling if the stream drops."""
        try:
            async for event in events:
                if event.get("type") == EventType.GENERATION_COMPLETE.value:
                    self._transition(ReconcileState.COMPLETED)
                elif event.get("type") == EventType.ERROR.value:
                    self.error = event.get("error")
                    self._transition(ReconcileState.FAILED)
        except Exception as e:
            return await self.handle_error(e)
        if self.state is ReconcileState.STREAMING:
            # Closed without a terminal event
            return await self.handle_error(ConnectionError("stream ended without a terminal event"))
        return self.state

    async def handle_error(self, exc: BaseException) -> ReconcileState:
        if not is_connection_error(exc):
            self.error = str(exc)
            self._transition(ReconcileState.FAILED)
            return self.state
        self._transition(ReconcileState.DISCONNECTED_PENDING)
        self.last_status = await self.poll()
        if self.last_status is None:
            self.error = "Connection lost and the generation could not be confirmed"
        self._transition(outcome(self.last_status))
        return self.state

    async def poll(self) -> Optional[Dict[str, Any]]:
        """Bounded status polling; None when attempts run out."""
        for attempt in range(self.max_attempts):
            await self._sleep(self.interval)
            try:
                response = await self.client.get("/v1/generate/status", params={"projectId": self.project_id})
            except httpx.TransportError as e:
                log.warning("Status poll %d/%d failed: %s", attempt + 1, self.max_attempts, e,
                            extra={"project_id": self.project_id, "stage": "-"})
                continue
            if response.status_code != 200:
                continue
            status = response.json()
            if is_settled(status, self.started_at):
                return status
        return None
