from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Sequence

from .corpus import DEFAULT_TIMEOUT, Corpus, CorpusLoader, EvidenceItem, Page
from .highlight import Segment, highlight_paragraphs
from .logging_utils import debug_log
from .search import SearchMatch, match_corpus, result_summary

POINTER_DOWN = "pointerdown"
MODAL_CONTENT = "modal-content"

Listener = Callable[[Sequence[str]], None]


class DocumentEvents:
    """Document-level event target shared by everything in one view.

    Targets are passed as the chain of region names from the document root
    down to the element that received the event.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def add_listener(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def remove_listener(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if not listeners:
            return
        with contextlib.suppress(ValueError):
            listeners.remove(listener)
        if not listeners:
            self._listeners.pop(event, None)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    @contextlib.contextmanager
    def subscribe(self, event: str, listener: Listener) -> Iterator[None]:
        self.add_listener(event, listener)
        try:
            yield
        finally:
            self.remove_listener(event, listener)

    def dispatch(self, event: str, target: Sequence[str]) -> None:
        for listener in list(self._listeners.get(event, ())):
            listener(tuple(target))


@dataclass(frozen=True, slots=True)
class ModalState:
    visible_text: str
    active_query: str


class ModalViewer:
    """Full-page overlay; exists only while open.

    While open it listens for pointer-down events on the document and closes
    itself when the target lies outside the content region.
    """

    def __init__(self, events: DocumentEvents) -> None:
        self.events = events
        self.state: ModalState | None = None
        self._subscription: contextlib.ExitStack | None = None

    @property
    def is_open(self) -> bool:
        return self.state is not None

    def open(self, text: str, query: str) -> ModalState:
        if self._subscription is None:
            stack = contextlib.ExitStack()
            stack.enter_context(self.events.subscribe(POINTER_DOWN, self._on_pointer_down))
            self._subscription = stack
        self.state = ModalState(visible_text=text, active_query=query)
        return self.state

    def close(self) -> None:
        subscription, self._subscription = self._subscription, None
        self.state = None
        if subscription is not None:
            subscription.close()

    def paragraphs(self) -> list[list[Segment]]:
        if self.state is None:
            return []
        return highlight_paragraphs(self.state.visible_text, self.state.active_query)

    def _on_pointer_down(self, target: Sequence[str]) -> None:
        if MODAL_CONTENT not in target:
            self.close()


@dataclass(slots=True)
class SearchState:
    query: str = ""
    submitted: bool = False
    matches: tuple[SearchMatch, ...] = field(default_factory=tuple)

    @property
    def results(self) -> tuple[EvidenceItem, ...]:
        return tuple(match.item for match in self.matches)

    @property
    def summary(self) -> str:
        return result_summary(len(self.matches))


class SearchSession:
    """Query box and result list.

    Typing only refreshes the results once a search has been submitted;
    before the first submit it just updates the query.
    """

    def __init__(self, corpus: Corpus) -> None:
        self.corpus = corpus
        self.state = SearchState()

    def type_query(self, query: str) -> bool:
        self.state.query = query
        if not self.state.submitted:
            return False
        self.state.matches = tuple(match_corpus(self.corpus, query))
        return True

    def submit(self, query: str | None = None) -> tuple[SearchMatch, ...]:
        if query is not None:
            self.state.query = query
        self.state.submitted = True
        self.state.matches = tuple(match_corpus(self.corpus, self.state.query))
        debug_log(f"Query {self.state.query!r}: {self.state.summary}")
        return self.state.matches

    def page_at(self, row: int, position: int) -> Page:
        """Return the corpus page behind entry ``position`` of result ``row``."""
        match = self.state.matches[row]
        return self.corpus[match.index].pages[match.page_indices[position]]


class SearchView:
    """Top-level application state: corpus loader, search session and modal."""

    def __init__(self, source: str | Path, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.loader = CorpusLoader(source, timeout=timeout)
        self.events = DocumentEvents()
        self.session = SearchSession(())
        self.modal = ModalViewer(self.events)

    def __enter__(self) -> SearchView:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def loading(self) -> bool:
        return self.loader.loading

    def load(self) -> Corpus:
        corpus = self.loader.load()
        if not self.loader.closed:
            self.session = SearchSession(corpus)
        return corpus

    def open_page(self, row: int, position: int) -> ModalState:
        page = self.session.page_at(row, position)
        return self.modal.open(page.page_text, self.session.state.query)

    def pointer_down(self, *target: str) -> None:
        self.events.dispatch(POINTER_DOWN, target)

    def close(self) -> None:
        self.modal.close()
        self.loader.close()


__all__ = [
    "DocumentEvents",
    "MODAL_CONTENT",
    "ModalState",
    "ModalViewer",
    "POINTER_DOWN",
    "SearchSession",
    "SearchState",
    "SearchView",
]
