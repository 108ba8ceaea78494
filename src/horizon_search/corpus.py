from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

import requests

from .logging_utils import debug_log, log_error

CORPUS_FILENAME = "evidence_pages.json"
DEFAULT_TIMEOUT = 30.0


class CorpusFormatError(ValueError):
    """Raised when the corpus JSON does not have the expected shape."""


@dataclass(frozen=True, slots=True)
class Page:
    page_number: int
    page_text: str


@dataclass(frozen=True, slots=True)
class EvidenceItem:
    title: str
    link: str
    pages: tuple[Page, ...] = ()


Corpus = tuple[EvidenceItem, ...]


def _coerce_page_number(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _parse_pages(entries: object) -> tuple[Page, ...]:
    if not isinstance(entries, list):
        return ()
    pages: list[Page] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        number = _coerce_page_number(entry.get("page_number"))
        text = entry.get("page_text")
        if number is None or not isinstance(text, str):
            continue
        pages.append(Page(page_number=number, page_text=text))
    return tuple(pages)


def parse_corpus(payload: Any) -> Corpus:
    """Convert decoded ``evidence_pages.json`` data into evidence items.

    Malformed entries are skipped rather than failing the whole corpus; only a
    top-level value that is not a list is rejected.
    """
    if not isinstance(payload, list):
        raise CorpusFormatError(
            f"Expected a JSON array of evidence items, got {type(payload).__name__}"
        )
    items: list[EvidenceItem] = []
    skipped = 0
    for entry in payload:
        if not isinstance(entry, Mapping):
            skipped += 1
            continue
        title = entry.get("evidence_title")
        if not isinstance(title, str):
            skipped += 1
            continue
        link = entry.get("evidence_link")
        items.append(
            EvidenceItem(
                title=title,
                link=link if isinstance(link, str) else "",
                pages=_parse_pages(entry.get("pages")),
            )
        )
    if skipped:
        debug_log(f"Skipped {skipped} malformed evidence entr{'y' if skipped == 1 else 'ies'}")
    return tuple(items)


def corpus_to_payload(corpus: Iterable[EvidenceItem]) -> list[dict[str, object]]:
    return [
        {
            "evidence_title": item.title,
            "evidence_link": item.link,
            "pages": [
                {"page_number": page.page_number, "page_text": page.page_text}
                for page in item.pages
            ],
        }
        for item in corpus
    ]


def is_url(source: str | Path) -> bool:
    if isinstance(source, Path):
        return False
    return source.startswith(("http://", "https://"))


def _read_source(source: str | Path, timeout: float) -> Any:
    if is_url(source):
        response = requests.get(str(source), timeout=timeout)
        response.raise_for_status()
        return response.json()
    path = Path(source).expanduser()
    return json.loads(path.read_text(encoding="utf-8"))


class CorpusLoader:
    """Reads the evidence corpus once and remembers the outcome.

    ``loading`` stays True until the read settles. Failures are logged and
    leave an empty corpus behind; ``error`` keeps the exception for callers
    that want to inspect it.
    """

    def __init__(self, source: str | Path, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.source = source
        self.timeout = timeout
        self.loading = True
        self.corpus: Corpus = ()
        self.error: Exception | None = None
        self._started = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def load(self) -> Corpus:
        if self._started:
            return self.corpus
        self._started = True
        debug_log(f"Loading evidence pages from {self.source}")
        corpus: Corpus = ()
        error: Exception | None = None
        try:
            corpus = parse_corpus(_read_source(self.source, self.timeout))
        except (OSError, ValueError, requests.RequestException) as exc:
            error = exc
        if self._closed:
            debug_log(f"Discarding evidence pages from {self.source}; loader closed")
            return ()
        if error is not None:
            log_error(f"Failed to fetch evidence pages from {self.source}: {error}")
        else:
            debug_log(f"Loaded {len(corpus)} evidence item(s)")
        self.corpus = corpus
        self.error = error
        self.loading = False
        return self.corpus

    def close(self) -> None:
        self._closed = True


def load_corpus(source: str | Path, *, timeout: float = DEFAULT_TIMEOUT) -> Corpus:
    return CorpusLoader(source, timeout=timeout).load()


__all__ = [
    "CORPUS_FILENAME",
    "Corpus",
    "CorpusFormatError",
    "CorpusLoader",
    "EvidenceItem",
    "Page",
    "corpus_to_payload",
    "is_url",
    "load_corpus",
    "parse_corpus",
]
