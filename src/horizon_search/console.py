from __future__ import annotations

from typing import Iterable, Sequence

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .highlight import Segment
from .search import INQUIRY_BASE_URL, NO_MATCHING_PAGES, SearchMatch, evidence_url, result_summary

HIGHLIGHT_STYLE = "bold black on yellow"


def segments_to_text(segments: Iterable[Segment]) -> Text:
    text = Text()
    for segment in segments:
        text.append(segment.text, style=HIGHLIGHT_STYLE if segment.marked else None)
    return text


def _page_list(match: SearchMatch) -> Text:
    if not match.item.pages:
        return Text(NO_MATCHING_PAGES, style="dim")
    entries = [
        f"{position + 1}) Page {page.page_number}"
        for position, page in enumerate(match.item.pages)
    ]
    return Text("\n".join(entries))


def build_result_table(
    matches: Sequence[SearchMatch],
    *,
    base_url: str = INQUIRY_BASE_URL,
) -> Table:
    table = Table(show_lines=True, expand=True)
    table.add_column("#", justify="right", style="dim", no_wrap=True)
    table.add_column("Evidence Title", style="bold", ratio=3)
    table.add_column("Pages", ratio=2)
    table.add_column("Inquiry Page", ratio=2, overflow="fold")
    for row, match in enumerate(matches, start=1):
        url = evidence_url(match.item.link, base_url)
        table.add_row(
            str(row),
            Text(match.item.title),
            _page_list(match),
            Text("View", style=f"link {url}") + Text(f"\n{url}", style="dim"),
        )
    return table


def print_results(
    console: Console,
    matches: Sequence[SearchMatch],
    *,
    base_url: str = INQUIRY_BASE_URL,
) -> None:
    console.print(result_summary(len(matches)))
    if matches:
        console.print(build_result_table(matches, base_url=base_url))


def build_modal_panel(
    paragraphs: Sequence[Sequence[Segment]],
    *,
    title: str | None = None,
    subtitle: str | None = None,
) -> Panel:
    body = Group(*(segments_to_text(segments) for segments in paragraphs))
    return Panel(
        body,
        title=Text(title) if title else None,
        subtitle=Text(subtitle) if subtitle else None,
        border_style="cyan",
        padding=(1, 2),
    )


__all__ = [
    "HIGHLIGHT_STYLE",
    "build_modal_panel",
    "build_result_table",
    "print_results",
    "segments_to_text",
]
