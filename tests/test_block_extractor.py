"""Tests for incremental fenced-block extraction from streamed model output."""
from app.generators.site_gen.extractor import BlockStream, extract_blocks, finalize_blocks, pending_block_path, scan
from fakes import COMPONENT_OUTPUT, HERO, PAGE, fenced, split_every


def _stream_all(chunks):
    stream = BlockStream()
    blocks = []
    for chunk in chunks:
        blocks.extend(stream.feed(chunk))
    blocks.extend(stream.finish())
    return blocks


def test_extraction_is_independent_of_chunk_boundaries():
    """Splitting the output into 1, 2 or N character chunks yields the same blocks."""
    expected = _stream_all([COMPONENT_OUTPUT])
    assert [b.file_path for b in expected] == ["src/components/Hero.tsx", "src/app/page.tsx"]
    assert expected[0].content == HERO
    assert expected[1].content == PAGE
    assert expected[0].language == "tsx"

    for size in (1, 2, 3, 7, 64, len(COMPONENT_OUTPUT)):
        assert _stream_all(split_every(COMPONENT_OUTPUT, size)) == expected


def test_header_split_mid_keyword_yields_one_block():
    """A chunk ending in 'export def' is held until the closing fence arrives."""
    chunks = [
        "```tsx:src/components/Hero.tsx\nexport def",
        "ault function Hero() {\n  return null;\n}\n```\n",
    ]
    blocks, remainder = extract_blocks("", chunks[0])
    assert blocks == []
    assert pending_block_path(remainder) == "src/components/Hero.tsx"

    blocks, remainder = extract_blocks(remainder, chunks[1])
    assert len(blocks) == 1
    assert blocks[0].content == "export default function Hero() {\n  return null;\n}"
    assert remainder.strip() == ""


def test_duplicate_paths_are_emitted_once():
    """A path repeated by the model is only reported the first time."""
    text = fenced("src/components/Hero.tsx", "export default function Hero() {}") + fenced(
        "src/components/Hero.tsx", "export default function Hero() { return null; }"
    )
    blocks = _stream_all(split_every(text, 5))
    assert len(blocks) == 1
    assert blocks[0].content == "export default function Hero() {}"


def test_seen_paths_are_shared_between_streams():
    """Streams sharing one seen set never emit the same path twice."""
    seen = set()
    first = BlockStream(seen_paths=seen)
    second = BlockStream(seen_paths=seen)
    text = fenced("src/components/Hero.tsx", "export default function Hero() {}")
    assert len(first.feed(text)) == 1
    assert second.feed(text) == []
    assert seen == {"src/components/Hero.tsx"}


def test_unterminated_block_is_recovered_on_finish():
    """Output cut off by the token limit still yields its last file."""
    text = fenced("src/components/Hero.tsx", "export default function Hero() {}") + (
        "```tsx:src/components/Footer.tsx\nexport default function Footer() {\n  return <footer />;\n}"
    )
    stream = BlockStream()
    assert [b.file_path for b in stream.feed(text)] == ["src/components/Hero.tsx"]
    assert stream.open_path == "src/components/Footer.tsx"

    recovered = stream.finish()
    assert [b.file_path for b in recovered] == ["src/components/Footer.tsx"]
    assert recovered[0].content.endswith("return <footer />;\n}")
    assert stream.finish() == []


def test_non_file_fences_and_empty_blocks_are_ignored():
    """Fences without a language:path header and blank bodies produce nothing."""
    text = (
        "Example usage:\n```\nnpm run dev\n```\n"
        + "```tsx:src/components/Empty.tsx\n\n```\n"
        + fenced("./src/components/Stats.tsx", "export default function Stats() {}")
    )
    blocks = _stream_all(split_every(text, 4))
    assert [b.file_path for b in blocks] == ["src/components/Stats.tsx"]


def test_finalize_blocks_on_blank_remainder():
    """Nothing left over means nothing to recover."""
    assert finalize_blocks("") == []
    assert finalize_blocks("\n\n  ") == []


def test_scan_resumes_inside_an_open_block():
    """A resumed scan searches only the new text for the closing fence."""
    head = "Intro\n```tsx:src/components/Hero.tsx\nexport default function Hero() {\n"
    first = scan(head)
    assert first.blocks == []
    assert first.open_path == "src/components/Hero.tsx"
    assert first.resume.header is not None
    assert first.resume.cursor == len(first.remainder) - 2

    second = scan(first.remainder + "  return null;\n}\n``", first.resume)
    assert second.blocks == []
    assert second.open_path == "src/components/Hero.tsx"
    assert second.resume.cursor == len(second.remainder) - 2

    third = scan(second.remainder + "`\nDone.", second.resume)
    assert third.open_path is None
    assert third.resume.header is None
    assert third.blocks == scan(head + "  return null;\n}\n```\nDone.").blocks
    assert third.blocks[0].content == "export default function Hero() {\n  return null;\n}"


def test_open_path_tracks_the_streaming_block():
    """open_path names the block being written and clears once its fence closes."""
    text = "Here you go.\n" + fenced("src/components/Hero.tsx", HERO)
    stream = BlockStream()
    observed = []
    for chunk in split_every(text, 3):
        stream.feed(chunk)
        observed.append(stream.open_path)
    assert observed[0] is None
    assert "src/components/Hero.tsx" in observed
    assert observed[-1] is None
    first_open = observed.index("src/components/Hero.tsx")
    assert set(observed[first_open:-1]) <= {"src/components/Hero.tsx", None}
