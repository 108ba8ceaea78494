from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Segment:
    text: str
    marked: bool = False


def _term_pattern(term: str) -> re.Pattern[str]:
    # Terms are matched literally, so "(" or "a.b" never act as regex syntax.
    return re.compile(f"({re.escape(term)})", re.IGNORECASE)


def highlight_text(text: str, term: str) -> list[Segment]:
    """Split ``text`` around every case-insensitive occurrence of ``term``.

    Matched pieces keep their original casing and are returned with
    ``marked=True``. A blank term leaves the text whole as one plain segment.
    """
    if not term.strip():
        return [Segment(text)] if text else []
    parts = _term_pattern(term).split(text)
    segments: list[Segment] = []
    # re.split with one capture group alternates plain, match, plain, ...
    for position, part in enumerate(parts):
        marked = position % 2 == 1
        if not part and not marked:
            continue
        segments.append(Segment(part, marked))
    return segments


def split_paragraphs(text: str) -> list[str]:
    return text.split("\n")


def highlight_paragraphs(text: str, term: str) -> list[list[Segment]]:
    return [highlight_text(line, term) for line in split_paragraphs(text)]


def count_matches(text: str, term: str) -> int:
    return sum(1 for segment in highlight_text(text, term) if segment.marked)


__all__ = [
    "Segment",
    "count_matches",
    "highlight_paragraphs",
    "highlight_text",
    "split_paragraphs",
]
