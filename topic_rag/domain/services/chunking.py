from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import ValidationError

# ---------- Value Objects ----------


@dataclass(frozen=True)
class TextChunk:
    """One token window of a segment.

    token_start/token_end are half-open offsets into the segment's token list.
    """

    text: str
    chunk_index: int
    token_start: int
    token_end: int
    segment: int = 0

    @property
    def token_count(self) -> int:
        return self.token_end - self.token_start


@dataclass(frozen=True)
class ChunkingParams:
    window_tokens: int = 800
    overlap_tokens: int = 400

    @property
    def stride(self) -> int:
        return self.window_tokens - self.overlap_tokens

    def validate(self) -> None:
        if self.window_tokens <= 0:
            raise ValidationError("window_tokens must be > 0")
        if not 0 <= self.overlap_tokens < self.window_tokens:
            raise ValidationError("overlap_tokens must be >= 0 and < window_tokens")


# ---------- Tokenisierung ----------

# A token is a word with the whitespace around it, so "".join(tokens) == text
# for any text containing at least one non-space character.
_TOKEN = re.compile(r"\s*\S+\s*")

# Markdown section delimiter: a line holding only "---".
_SECTION_DELIM = re.compile(r"^---[ \t\r]*$", re.MULTILINE)


def tokenize(text: str) -> list[str]:
    return _TOKEN.findall(text)


def count_tokens(text: str) -> int:
    return len(tokenize(text))


def expected_chunk_count(n_tokens: int, params: ChunkingParams | None = None) -> int:
    """ceil((L - overlap) / stride) for L > window, 1 for 0 < L <= window, 0 for L = 0."""
    p = params or ChunkingParams()
    if n_tokens <= 0:
        return 0
    if n_tokens <= p.window_tokens:
        return 1
    return -(-(n_tokens - p.overlap_tokens) // p.stride)


# ---------- Fenster ----------


def split_into_windows(
    text: str, params: ChunkingParams | None = None, segment: int = 0, first_index: int = 0
) -> list[TextChunk]:
    """Slide a window of window_tokens over the text, advancing by the stride.

    Consecutive windows share overlap_tokens tokens. Every window is full-size
    except possibly the last one.
    """
    p = params or ChunkingParams()
    p.validate()
    tokens = tokenize(text)
    if not tokens:
        return []

    chunks: list[TextChunk] = []
    start = 0
    while True:
        end = min(start + p.window_tokens, len(tokens))
        chunks.append(
            TextChunk(
                text="".join(tokens[start:end]),
                chunk_index=first_index + len(chunks),
                token_start=start,
                token_end=end,
                segment=segment,
            )
        )
        if end >= len(tokens):
            break
        start += p.stride
    return chunks


def split_segments(segments: Sequence[str], params: ChunkingParams | None = None) -> list[TextChunk]:
    """Chunk each segment on its own; indices run 0..n-1 across all segments."""
    result: list[TextChunk] = []
    for seg_no, seg in enumerate(segments):
        result.extend(split_into_windows(seg, params, segment=seg_no, first_index=len(result)))
    return result


def split_markdown_sections(text: str, keep_empty: bool = False) -> list[str]:
    """Split Markdown on horizontal-rule lines.

    Empty sections are dropped unless keep_empty is set, in which case list
    positions match section numbers.
    """
    sections = [s.strip() for s in _SECTION_DELIM.split(text)]
    return sections if keep_empty else [s for s in sections if s]


class ChunkingEngine:
    """Deterministic token-window chunker bound to one parameter set."""

    def __init__(self, params: ChunkingParams | None = None) -> None:
        self.params = params or ChunkingParams()
        self.params.validate()

    def split(self, text: str) -> list[TextChunk]:
        return split_into_windows(text, self.params)

    def split_segments(self, segments: Sequence[str]) -> list[TextChunk]:
        return split_segments(segments, self.params)


# Eigenschaften:
#
# - Kein I/O, keine Globals, keine externen NLP-Libs.
# - Gleicher Text -> identische Chunk-Folge.
# - Nicht überlappende Spannen [start_i, start_{i+1}) ergeben wieder den Originaltext.
