"""Whitespace-boundary tokenization and measurement normalization.

A token is either a maximal run of non-whitespace ("word") or a maximal
run of whitespace ("space"). Normalization only rewrites space tokens, so
the original and the normalized token lists of one chunk always line up
one-for-one.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

_SPACE_RUN = re.compile(r"(\s+)")
_LEADING_SPACE = re.compile(r"^\s*")
_LINE_BREAK = re.compile(r"\r?\n|\r")
_WORD = re.compile(r"\S+")
_SPACE = re.compile(r"\s+")


def is_space(text: str) -> bool:
    return bool(text) and _SPACE.fullmatch(text) is not None


def split_tokens(text: str) -> list[str]:
    """Split text into alternating word/space tokens, keeping separators.

    Empty edge tokens produced by re.split are dropped, so "" yields [].
    """
    return [t for t in _SPACE_RUN.split(text) if t]


def normalize_text(text: str) -> str:
    one_line = _LINE_BREAK.sub(" ", text.strip())
    return _SPACE.sub(" ", one_line)


def word_end(text: str, pos: int) -> int:
    """Offset just past the word starting at pos (pos itself if none)."""
    m = _WORD.match(text, pos)
    return m.end() if m else pos


def space_end(text: str, pos: int) -> int:
    """Offset just past the whitespace run starting at pos (pos itself if none)."""
    m = _SPACE.match(text, pos)
    return m.end() if m else pos


@dataclass(frozen=True)
class NormalizedChunk:
    leading: str  # whitespace stripped from the front, kept for offset mapping
    text: str  # single-spaced, single-line rendering used for measurement
    original_tokens: list[str]
    tokens: list[str]

    def consumed_length(self, count: int) -> int:
        """Length in the original text covered by the first `count` tokens."""
        return len(self.leading) + sum(len(t) for t in self.original_tokens[:count])


def normalize_chunk(chunk: str) -> NormalizedChunk:
    leading = _LEADING_SPACE.match(chunk).group(0)
    trimmed = chunk.strip()
    one_line = _LINE_BREAK.sub(" ", trimmed)
    normalized = _SPACE.sub(" ", one_line)

    original_tokens = split_tokens(trimmed)
    tokens = split_tokens(normalized)
    if len(original_tokens) != len(tokens):
        raise RuntimeError(
            f"token alignment lost: original={len(original_tokens)} normalized={len(tokens)}"
        )
    return NormalizedChunk(leading=leading, text=normalized, original_tokens=original_tokens, tokens=tokens)


def drop_partial_word(chunk: str) -> str:
    """Remove the trailing word of chunk together with the space before it."""
    words = list(_WORD.finditer(chunk))
    if not words:
        return chunk
    return chunk[: words[-1].start()].rstrip()
