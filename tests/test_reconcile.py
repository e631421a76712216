"""Tests for recovering a generation after the event stream drops."""
import asyncio
from datetime import datetime
from unittest.mock import AsyncMock
import httpx
from app.core.reconcile import ReconcileState, StreamReconciler, is_connection_error, is_settled

STARTED_AT = datetime(2026, 1, 1, 12, 0, 0)


def _status(project_status, version_status=None, created_at="2026-01-01T12:00:05"):
    latest = None
    if version_status:
        latest = {"id": "v1", "versionNumber": 2, "status": version_status, "createdAt": created_at,
                  "completedAt": None, "generationTimeMs": None}
    return {"projectStatus": project_status, "lastGeneratedAt": None, "latestVersion": latest, "fileCount": 0}


def _client(responses, calls):
    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=responses[min(len(calls), len(responses)) - 1])
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")


async def _events(items, error=None):
    for item in items:
        yield item
    if error is not None:
        raise error


def _watch(responses, items, error=None, max_attempts=5):
    calls = []

    async def run():
        async with _client(responses, calls) as client:
            reconciler = StreamReconciler(client, "project-1", started_at=STARTED_AT,
                                          max_attempts=max_attempts, interval=0.0, sleep=AsyncMock())
            state = await reconciler.watch(_events(items, error))
            return reconciler, state

    reconciler, state = asyncio.run(run())
    return reconciler, state, calls


def test_terminal_event_completes_without_polling():
    """A stream that reaches generation-complete never polls."""
    reconciler, state, calls = _watch([], [{"type": "stage-start"}, {"type": "generation-complete"}])
    assert state == ReconcileState.COMPLETED
    assert calls == []


def test_error_event_fails_without_polling():
    reconciler, state, calls = _watch([], [{"type": "error", "error": "Blueprint generation failed: bad"}])
    assert state == ReconcileState.FAILED
    assert reconciler.error == "Blueprint generation failed: bad"
    assert calls == []


def test_dropped_stream_recovers_by_polling():
    """The server finished after the disconnect; polling confirms it."""
    responses = [_status("generating", "generating"), _status("generated", "complete")]
    reconciler, state, calls = _watch(responses, [{"type": "stage-start"}], error=httpx.ReadError("connection reset"))

    assert state == ReconcileState.RECOVERED
    assert len(calls) == 2
    assert calls[0].url.params["projectId"] == "project-1"
    assert calls[0].url.path == "/v1/generate/status"
    assert reconciler.last_status["projectStatus"] == "generated"


def test_dropped_stream_reports_server_side_failure():
    responses = [_status("error", "error")]
    _, state, calls = _watch(responses, [], error=httpx.RemoteProtocolError("peer closed connection"))
    assert state == ReconcileState.FAILED
    assert len(calls) == 1


def test_polling_gives_up_after_max_attempts():
    """A generation that never settles is reported as failed."""
    responses = [_status("generating", "generating")]
    reconciler, state, calls = _watch(responses, [], error=ConnectionError("network down"), max_attempts=3)
    assert state == ReconcileState.FAILED
    assert len(calls) == 3
    assert "could not be confirmed" in reconciler.error


def test_stream_closed_without_terminal_event_is_reconciled():
    responses = [_status("generated", "complete")]
    _, state, calls = _watch(responses, [{"type": "stage-start"}])
    assert state == ReconcileState.RECOVERED
    assert len(calls) == 1


def test_non_connection_error_fails_immediately():
    """Errors that are not transport drops are not papered over by polling."""
    reconciler, state, calls = _watch([], [], error=ValueError("unexpected payload"))
    assert state == ReconcileState.FAILED
    assert reconciler.error == "unexpected payload"
    assert calls == []


def test_settled_ignores_versions_from_before_the_run():
    """An older completed version does not count as this run finishing."""
    old = _status("generating", "complete", created_at="2026-01-01T11:59:00")
    assert not is_settled(old, STARTED_AT)
    assert is_settled(_status("generating", "complete"), STARTED_AT)
    assert is_settled(_status("error"), STARTED_AT)


def test_connection_error_classification():
    assert is_connection_error(httpx.ConnectError("refused"))
    assert is_connection_error(Exception("Failed to fetch"))
    assert not is_connection_error(ValueError("invalid json"))
