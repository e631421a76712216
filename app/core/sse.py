"""Server-sent event framing for the generation event protocol."""
import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, Iterable, List, Optional, Tuple
from app.core.workflow import EventType, GenerationStage
from app.schemas.generation import GenerationEvent

log = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


def encode_sse(event: GenerationEvent) -> str:
    return f"data: {json.dumps(event.to_wire())}\n\n"


def encode_done() -> str:
    return f"data: {DONE_SENTINEL}\n\n"


async def sse_stream(events: AsyncIterable[GenerationEvent]) -> AsyncIterator[str]:
    """Frame every event, then the terminator.

    An exception escaping ``events`` is reported as a final error event so the
    client always sees a terminal event before the terminator.
    """
    try:
        async for event in events:
            yield encode_sse(event)
    except Exception as e:
        log.exception("Event stream failed")
        yield encode_sse(GenerationEvent(type=EventType.ERROR, stage=GenerationStage.ERROR, error=str(e)))
    yield encode_done()


def parse_sse_line(line: str) -> Optional[Dict[str, Any]]:
    """Decode one ``data:`` line. Returns None for comments, blanks, the terminator and malformed data."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    payload = line[len("data:"):].strip()
    if not payload or payload == DONE_SENTINEL:
        return None
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        log.warning("Skipping malformed SSE payload: %s", payload[:200])
        return None
    return data if isinstance(data, dict) else None


class SSEDecoder:
    """Incremental decoder for SSE text arriving in arbitrary chunks."""

    def __init__(self):
        self.buffer = ""
        self.done = False

    def feed(self, chunk: str) -> List[Dict[str, Any]]:
        self.buffer += chunk
        lines = self.buffer.split("\n")
        self.buffer = lines.pop()
        return self._decode(lines)

    def flush(self) -> List[Dict[str, Any]]:
        lines, self.buffer = [self.buffer], ""
        return self._decode(lines)

    def _decode(self, lines: Iterable[str]) -> List[Dict[str, Any]]:
        events = []
        for line in lines:
            if line.strip() == f"data: {DONE_SENTINEL}":
                self.done = True
                continue
            data = parse_sse_line(line)
            if data is not None:
                events.append(data)
        return events


async def read_sse_stream(chunks: AsyncIterable[str]) -> AsyncIterator[Dict[str, Any]]:
    """Yield decoded event payloads from an SSE body."""
    decoder = SSEDecoder()
    async for chunk in chunks:
        for data in decoder.feed(chunk):
            yield data
    for data in decoder.flush():
        yield data


def split_sse_body(body: str) -> Tuple[List[Dict[str, Any]], bool]:
    """Decode a complete SSE body. Returns (events, saw_terminator)."""
    decoder = SSEDecoder()
    events = decoder.feed(body) + decoder.flush()
    return events, decoder.done
