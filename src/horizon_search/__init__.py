from .corpus import (
    Corpus,
    CorpusFormatError,
    CorpusLoader,
    EvidenceItem,
    Page,
    load_corpus,
    parse_corpus,
)
from .highlight import Segment, highlight_paragraphs, highlight_text
from .search import SearchMatch, evidence_url, filter_corpus, match_corpus, result_summary
from .session import ModalViewer, SearchSession, SearchView

__all__ = [
    "Corpus",
    "CorpusFormatError",
    "CorpusLoader",
    "EvidenceItem",
    "Page",
    "load_corpus",
    "parse_corpus",
    "Segment",
    "highlight_text",
    "highlight_paragraphs",
    "SearchMatch",
    "filter_corpus",
    "match_corpus",
    "result_summary",
    "evidence_url",
    "ModalViewer",
    "SearchSession",
    "SearchView",
]
