from __future__ import annotations

import json

import pytest

from horizon_search.corpus import parse_corpus


SAMPLE_PAYLOAD = [
    {
        "evidence_title": "Witness A",
        "evidence_link": "/a",
        "pages": [{"page_number": 1, "page_text": "hello world"}],
    },
    {
        "evidence_title": "Other",
        "evidence_link": "/b",
        "pages": [{"page_number": 1, "page_text": "nothing here"}],
    },
    {
        "evidence_title": "Horizon audit report",
        "evidence_link": "/evidence/horizon-audit",
        "pages": [
            {"page_number": 1, "page_text": "Summary of findings\nBalancing errors were reported."},
            {"page_number": 2, "page_text": "Appendix A\nNo further comment."},
            {"page_number": 3, "page_text": "The HORIZON system logs\nshowed discrepancies."},
        ],
    },
]


@pytest.fixture
def sample_payload() -> list[dict[str, object]]:
    return json.loads(json.dumps(SAMPLE_PAYLOAD))


@pytest.fixture
def corpus(sample_payload):
    return parse_corpus(sample_payload)


@pytest.fixture
def corpus_file(tmp_path, sample_payload):
    path = tmp_path / "evidence_pages.json"
    path.write_text(json.dumps(sample_payload), encoding="utf-8")
    return path
