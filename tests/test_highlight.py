from __future__ import annotations

from horizon_search.highlight import (
    Segment,
    count_matches,
    highlight_paragraphs,
    highlight_text,
    split_paragraphs,
)


def test_single_match_splits_into_three_segments() -> None:
    assert highlight_text("The quick fox", "qu") == [
        Segment("The "),
        Segment("qu", marked=True),
        Segment("ick fox"),
    ]


def test_blank_term_leaves_text_whole() -> None:
    for term in ("", "   ", "\t"):
        segments = highlight_text("The quick fox", term)
        assert segments == [Segment("The quick fox")]
        assert not any(segment.marked for segment in segments)


def test_matches_keep_original_casing() -> None:
    segments = highlight_text("Horizon and HORIZON and horizon", "horizon")
    assert [s.text for s in segments if s.marked] == ["Horizon", "HORIZON", "horizon"]
    assert "".join(s.text for s in segments) == "Horizon and HORIZON and horizon"


def test_match_at_edges_has_no_empty_plain_segments() -> None:
    assert highlight_text("abcab", "ab") == [
        Segment("ab", marked=True),
        Segment("c"),
        Segment("ab", marked=True),
    ]


def test_regex_metacharacters_are_literal() -> None:
    assert highlight_text("cost (est.) 5", "(est.)") == [
        Segment("cost "),
        Segment("(est.)", marked=True),
        Segment(" 5"),
    ]
    assert highlight_text("a.b axb", "a.b") == [Segment("a.b", marked=True), Segment(" axb")]
    assert count_matches("[unclosed", "[") == 1


def test_paragraphs_are_highlighted_per_line() -> None:
    paragraphs = highlight_paragraphs("A fox\nno match\nfox B", "fox")
    assert len(paragraphs) == 3
    assert paragraphs[0] == [Segment("A "), Segment("fox", marked=True)]
    assert paragraphs[1] == [Segment("no match")]
    assert paragraphs[2] == [Segment("fox", marked=True), Segment(" B")]


def test_split_paragraphs_keeps_empty_lines() -> None:
    assert split_paragraphs("A\nB\nC") == ["A", "B", "C"]
    assert split_paragraphs("A\n\nB") == ["A", "", "B"]


def test_count_matches() -> None:
    assert count_matches("one two one", "one") == 2
    assert count_matches("one two one", " ") == 0
