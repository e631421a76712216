"""Incremental extraction of fenced file blocks from streamed model output.

The model emits files as::

    ```tsx:src/components/Hero.tsx
    export default function Hero() { ... }
    ```

Text arrives in arbitrarily split chunks, so extraction is a pure function of
``(prior_remainder, new_chunk)``: it returns every block whose closing fence
has arrived plus the unconsumed tail. A scan also reports where it stopped, so
a ``BlockStream`` resumes there instead of rescanning a long open block.
"""
from enum import Enum
from typing import List, NamedTuple, Optional, Set, Tuple
from app.generators.site_gen.types import Block
from app.generators.site_gen.utils import normalize_path

FENCE = "```"

_WORD_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")


class _State(Enum):
    OUTSIDE = "outside"
    INSIDE = "inside"


class _Header(NamedTuple):
    language: str
    path: str
    content_start: int


class _NoMatch:
    pass


class _Incomplete:
    pass


NO_MATCH = _NoMatch()
INCOMPLETE = _Incomplete()


class Resume(NamedTuple):
    """Scan position within a remainder: the next offset to search and the open block's header."""
    cursor: int
    header: Optional[_Header]


class ScanResult(NamedTuple):
    blocks: List[Block]
    remainder: str
    open_path: Optional[str]
    resume: Resume


def _read_header(buf: str, pos: int):
    """Parse ``language:path\\n`` starting right after an opening fence.

    Returns a _Header, NO_MATCH when the text can never become a header, or
    INCOMPLETE when the buffer ends before that can be decided.
    """
    n = len(buf)
    i = pos
    while i < n and buf[i] in _WORD_CHARS:
        i += 1
    if i == n:
        return INCOMPLETE
    if i == pos or buf[i] != ":":
        return NO_MATCH
    language = buf[pos:i]
    i += 1
    newline = buf.find("\n", i)
    if newline == -1:
        return INCOMPLETE
    if newline == i:
        return NO_MATCH
    return _Header(language=language, path=buf[i:newline], content_start=newline + 1)


def _partial_fence_start(buf: str, cursor: int) -> int:
    # a fence may still be completed by the next chunk
    return max(cursor, len(buf) - len(FENCE) + 1)


def scan(buf: str, resume: Optional[Resume] = None) -> ScanResult:
    """Two-state scan over ``buf``; see module docstring.

    ``resume`` must come from the previous scan of a prefix of ``buf``.
    """
    blocks: List[Block] = []
    state = _State.OUTSIDE
    cursor = 0
    last_end = 0
    header: Optional[_Header] = None
    open_path: Optional[str] = None
    if resume is not None:
        cursor, header = resume
        if header is not None:
            state = _State.INSIDE

    while True:
        if state is _State.OUTSIDE:
            fence_at = buf.find(FENCE, cursor)
            if fence_at == -1:
                cursor = _partial_fence_start(buf, cursor)
                break
            parsed = _read_header(buf, fence_at + len(FENCE))
            if parsed is INCOMPLETE:
                cursor = fence_at
                break
            if parsed is NO_MATCH:
                cursor = fence_at + 1
                continue
            header = parsed
            cursor = header.content_start
            state = _State.INSIDE
        else:
            close_at = buf.find(FENCE, cursor)
            if close_at == -1:
                open_path = normalize_path(header.path)
                cursor = _partial_fence_start(buf, cursor)
                break
            content = buf[header.content_start:close_at]
            if content.strip():
                blocks.append(Block(
                    file_path=normalize_path(header.path),
                    content=content.rstrip(),
                    language=header.language.strip(),
                ))
            cursor = last_end = close_at + len(FENCE)
            header = None
            state = _State.OUTSIDE

    if header is not None:
        header = header._replace(content_start=header.content_start - last_end)
    return ScanResult(
        blocks=blocks,
        remainder=buf[last_end:],
        open_path=open_path,
        resume=Resume(cursor=cursor - last_end, header=header),
    )


def extract_blocks(prior_remainder: str, new_chunk: str) -> Tuple[List[Block], str]:
    """Return the blocks completed by ``new_chunk`` and the new remainder."""
    result = scan(prior_remainder + new_chunk)
    return result.blocks, result.remainder


def finalize_blocks(remainder: str) -> List[Block]:
    """Recover a block left open because the output hit its token limit."""
    if not remainder.strip():
        return []
    blocks, _ = extract_blocks(remainder, "\n" + FENCE)
    return blocks


def pending_block_path(remainder: str) -> Optional[str]:
    """Path of a block whose header has arrived but whose content is still streaming."""
    return scan(remainder).open_path


class BlockStream:
    """Feeds one streaming phase through the extractor, emitting each path once.

    ``seen_paths`` belongs to the run context; passing the same set to several
    streams extends the exactly-once guarantee across them.
    """

    def __init__(self, seen_paths: Optional[Set[str]] = None):
        self.remainder = ""
        self.seen_paths: Set[str] = seen_paths if seen_paths is not None else set()
        self._resume: Optional[Resume] = None
        self._open_path: Optional[str] = None

    def feed(self, chunk: str) -> List[Block]:
        result = scan(self.remainder + chunk, self._resume)
        self.remainder, self._resume, self._open_path = result.remainder, result.resume, result.open_path
        return self._first_sightings(result.blocks)

    def finish(self) -> List[Block]:
        blocks = finalize_blocks(self.remainder)
        self.remainder = ""
        self._resume = None
        self._open_path = None
        return self._first_sightings(blocks)

    @property
    def open_path(self) -> Optional[str]:
        """Path of the block still streaming, as of the last ``feed``."""
        return self._open_path

    def _first_sightings(self, blocks: List[Block]) -> List[Block]:
        fresh = []
        for block in blocks:
            if block.file_path in self.seen_paths:
                continue
            self.seen_paths.add(block.file_path)
            fresh.append(block)
        return fresh
