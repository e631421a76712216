"""Tests for SSE framing of generation events."""
import asyncio
from app.core.sse import encode_done, encode_sse, read_sse_stream, split_sse_body, sse_stream
from app.core.workflow import EventType, GenerationStage
from app.schemas.generation import FileRef, GenerationEvent


async def _frames(events):
    return [frame async for frame in sse_stream(events)]


async def _decode(chunks):
    async def source():
        for chunk in chunks:
            yield chunk
    return [data async for data in read_sse_stream(source())]


def test_event_wire_format_is_camel_case_without_unset_fields():
    """Only populated fields are sent, under their camelCase names."""
    event = GenerationEvent(
        type=EventType.COMPONENT_COMPLETE,
        stage=GenerationStage.COMPONENTS,
        component_name="Hero",
        file=FileRef(path="src/components/Hero.tsx", content="x"),
        total_files=5,
        completed_files=1,
    )
    assert event.to_wire() == {
        "type": "component-complete",
        "stage": "components",
        "componentName": "Hero",
        "file": {"path": "src/components/Hero.tsx", "content": "x"},
        "totalFiles": 5,
        "completedFiles": 1,
    }
    assert encode_sse(GenerationEvent(type=EventType.STAGE_START, stage=GenerationStage.BLUEPRINT)) == (
        'data: {"type": "stage-start", "stage": "blueprint"}\n\n'
    )
    assert encode_done() == "data: [DONE]\n\n"


def test_stream_ends_with_terminator():
    """Every stream is closed by [DONE]."""
    async def events():
        yield GenerationEvent(type=EventType.STAGE_START, stage=GenerationStage.CONFIG_ASSEMBLY)

    frames = asyncio.run(_frames(events()))
    assert len(frames) == 2
    assert frames[-1] == "data: [DONE]\n\n"


def test_escaping_exception_becomes_error_event():
    """A crash inside the generator is reported before the terminator."""
    async def events():
        yield GenerationEvent(type=EventType.STAGE_START, stage=GenerationStage.CONFIG_ASSEMBLY)
        raise RuntimeError("database unavailable")

    frames = asyncio.run(_frames(events()))
    decoded, saw_done = split_sse_body("".join(frames))
    assert saw_done
    assert decoded[-1] == {"type": "error", "stage": "error", "error": "database unavailable"}


def test_decoder_handles_arbitrary_chunk_splits():
    """Frames split mid-line decode the same; comments and bad JSON are skipped."""
    body = (
        ": keep-alive\n\n"
        'data: {"type": "stage-start", "stage": "components"}\n\n'
        "data: {not json}\n\n"
        'data: {"type": "component-chunk", "componentName": "Hero", "chunk": "<h1>"}\n\n'
        "data: [DONE]\n\n"
    )
    expected = [
        {"type": "stage-start", "stage": "components"},
        {"type": "component-chunk", "componentName": "Hero", "chunk": "<h1>"},
    ]
    for size in (1, 3, 17, len(body)):
        chunks = [body[i:i + size] for i in range(0, len(body), size)]
        assert asyncio.run(_decode(chunks)) == expected

    events, saw_done = split_sse_body(body)
    assert events == expected
    assert saw_done


def test_body_without_terminator():
    """A truncated body is detectable by the missing [DONE]."""
    events, saw_done = split_sse_body('data: {"type": "stage-start", "stage": "components"}')
    assert events == [{"type": "stage-start", "stage": "components"}]
    assert not saw_done
