from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from .corpus import EvidenceItem

INQUIRY_BASE_URL = "https://www.postofficehorizoninquiry.org.uk"
NO_MATCHING_PAGES = "No matching pages found."


@dataclass(frozen=True, slots=True)
class SearchMatch:
    index: int
    item: EvidenceItem
    page_indices: tuple[int, ...]


def match_corpus(corpus: Sequence[EvidenceItem], query: str) -> list[SearchMatch]:
    """Return the evidence items whose title or page text contains ``query``.

    Matching is a case-insensitive substring test. Each match keeps only the
    pages whose text contains the query, so an item found through its title
    alone can come back with no pages. ``page_indices`` are positions in the
    unfiltered item. An empty query contains in everything and returns the
    whole corpus.
    """
    needle = query.lower()
    matches: list[SearchMatch] = []
    for index, item in enumerate(corpus):
        page_indices = tuple(
            position
            for position, page in enumerate(item.pages)
            if needle in page.page_text.lower()
        )
        if not page_indices and needle not in item.title.lower():
            continue
        pages = tuple(item.pages[position] for position in page_indices)
        matches.append(
            SearchMatch(
                index=index,
                item=EvidenceItem(title=item.title, link=item.link, pages=pages),
                page_indices=page_indices,
            )
        )
    return matches


def filter_corpus(corpus: Sequence[EvidenceItem], query: str) -> list[EvidenceItem]:
    return [match.item for match in match_corpus(corpus, query)]


def result_summary(count: int) -> str:
    return f"{count} result(s) found"


def evidence_url(link: str, base_url: str = INQUIRY_BASE_URL) -> str:
    return f"{base_url}{link}"


def find_evidence(corpus: Iterable[EvidenceItem], title: str) -> EvidenceItem | None:
    """Look up an item by title: exact (case-insensitive) first, then substring."""
    needle = title.strip().lower()
    candidates = list(corpus)
    for item in candidates:
        if item.title.lower() == needle:
            return item
    for item in candidates:
        if needle in item.title.lower():
            return item
    return None


__all__ = [
    "INQUIRY_BASE_URL",
    "NO_MATCHING_PAGES",
    "SearchMatch",
    "evidence_url",
    "filter_corpus",
    "find_evidence",
    "match_corpus",
    "result_summary",
]
