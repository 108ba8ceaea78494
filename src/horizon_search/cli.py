from __future__ import annotations

import argparse
import shlex
import socket
import sys
from importlib import metadata
from pathlib import Path

import tomllib
import uvicorn
from rich.console import Console
from rich.markup import escape

from .console import build_modal_panel, print_results
from .corpus import CORPUS_FILENAME, DEFAULT_TIMEOUT, CorpusLoader
from .highlight import count_matches, highlight_paragraphs
from .logging_utils import build_uvicorn_log_config, set_debug_logging
from .search import INQUIRY_BASE_URL, find_evidence
from .session import SearchSession, SearchView
from .web import DEFAULT_TITLE, WebConfig, create_app


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover - defensive
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("horizon-search")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


BROWSE_HELP = """\
Commands:
  <text>            submit a search for <text>
  :type <text>      edit the query without submitting
  :open ROW ENTRY   read a page; ROW and ENTRY are the numbers in the table
  :close            close the page view
  :help             show this help
  :quit             leave
"""


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"horizon-search {__version__}",
    )


def _add_corpus_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--corpus",
        default=CORPUS_FILENAME,
        help=f"Path or http(s) URL of the evidence pages JSON (default: {CORPUS_FILENAME}).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Seconds to wait when the corpus is a URL (default: {DEFAULT_TIMEOUT:g}).",
    )
    parser.add_argument(
        "--base-url",
        default=INQUIRY_BASE_URL,
        help=f"Prefix for evidence links (default: {INQUIRY_BASE_URL}).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print diagnostic messages while loading and searching.",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="horizon-search",
        description=(
            "Search Post Office Horizon IT Inquiry evidence pages. "
            "Subcommands: web, search, show, browse."
        ),
    )
    _add_version_flag(ap)
    return ap


def build_web_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="horizon-search web",
        description="Serve the evidence search page in the browser.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "corpus",
        nargs="?",
        default=CORPUS_FILENAME,
        help=f"Evidence pages JSON file to serve (default: {CORPUS_FILENAME}).",
    )
    ap.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host interface for the web server (default: 127.0.0.1).",
    )
    ap.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port for the web server (default: 3000).",
    )
    ap.add_argument(
        "--title",
        default=DEFAULT_TITLE,
        help="Page heading.",
    )
    ap.add_argument(
        "--base-url",
        default=INQUIRY_BASE_URL,
        help=f"Prefix for evidence links (default: {INQUIRY_BASE_URL}).",
    )
    ap.add_argument(
        "--debug",
        action="store_true",
        help="Print diagnostic messages while checking the corpus.",
    )
    return ap


def build_search_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="horizon-search search",
        description="Print the evidence items whose title or page text contains QUERY.",
    )
    _add_version_flag(ap)
    ap.add_argument("query", nargs="?", default="", help="Search term (empty lists everything).")
    _add_corpus_args(ap)
    return ap


def build_show_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="horizon-search show",
        description="Print one evidence page with a search term highlighted.",
    )
    _add_version_flag(ap)
    ap.add_argument("title", help="Evidence title (exact match preferred, else first containing it).")
    ap.add_argument("page", type=int, help="Page number within the evidence item.")
    ap.add_argument("-t", "--term", default="", help="Term to highlight.")
    _add_corpus_args(ap)
    return ap


def build_browse_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="horizon-search browse",
        description="Interactive search session in the terminal.",
    )
    _add_version_flag(ap)
    _add_corpus_args(ap)
    return ap


def _resolve_local_ip(host: str) -> str:
    if host not in {"", "0.0.0.0"}:
        return host
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            return sock.getsockname()[0]
    except OSError:
        return "127.0.0.1"


def _run_web(args: argparse.Namespace) -> int:
    set_debug_logging(bool(args.debug))
    corpus_path = Path(args.corpus).expanduser().resolve()
    config = WebConfig(
        corpus_path=corpus_path,
        title=args.title,
        inquiry_base_url=args.base_url,
    )
    app = create_app(config)
    corpus = CorpusLoader(corpus_path).load()
    public_ip = _resolve_local_ip(args.host)
    url = f"http://{public_ip}:{args.port}/"
    print(f"Serving {len(corpus)} evidence item(s) from {corpus_path}")
    print(f"Web URL: {url}")
    print("Press Ctrl+C to stop.\n")
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level="info",
        log_config=build_uvicorn_log_config(),
    )
    return 0


def _load_session(console: Console, args: argparse.Namespace) -> SearchSession:
    loader = CorpusLoader(args.corpus, timeout=args.timeout)
    with console.status("Loading the evidence data..."):
        corpus = loader.load()
    return SearchSession(corpus)


def _run_search(args: argparse.Namespace) -> int:
    set_debug_logging(bool(args.debug))
    console = Console()
    session = _load_session(console, args)
    matches = session.submit(args.query)
    print_results(console, matches, base_url=args.base_url)
    return 0


def _run_show(args: argparse.Namespace) -> int:
    set_debug_logging(bool(args.debug))
    console = Console()
    session = _load_session(console, args)
    item = find_evidence(session.corpus, args.title)
    if item is None:
        console.print(f"[red]No evidence item matches {escape(repr(args.title))}.[/red]")
        return 1
    page = next((p for p in item.pages if p.page_number == args.page), None)
    if page is None:
        console.print(f"[red]{escape(item.title)} has no page {args.page}.[/red]")
        return 1
    matches = count_matches(page.page_text, args.term)
    console.print(
        build_modal_panel(
            highlight_paragraphs(page.page_text, args.term),
            title=f"{item.title} - Page {page.page_number}",
            subtitle=f"{matches} match(es)" if args.term.strip() else None,
        )
    )
    return 0


def _print_modal(console: Console, view: SearchView, row: int, position: int) -> None:
    match = view.session.state.matches[row]
    page = match.item.pages[position]
    state = view.modal.state
    subtitle = None
    if state is not None and state.active_query.strip():
        subtitle = f"{count_matches(state.visible_text, state.active_query)} match(es) - :close to return"
    console.print(
        build_modal_panel(
            view.modal.paragraphs(),
            title=f"{match.item.title} - Page {page.page_number}",
            subtitle=subtitle or ":close to return",
        )
    )


def _browse_open(console: Console, view: SearchView, argv: list[str]) -> None:
    try:
        row, page = (int(value) - 1 for value in argv)
    except ValueError:
        console.print("Usage: :open ROW ENTRY")
        return
    matches = view.session.state.matches
    if not 0 <= row < len(matches) or not 0 <= page < len(matches[row].item.pages):
        console.print("[yellow]No such row/page in the current results.[/yellow]")
        return
    view.open_page(row, page)
    _print_modal(console, view, row, page)


def _browse_step(console: Console, view: SearchView, line: str, base_url: str) -> bool:
    if view.modal.is_open and line.strip() != ":close":
        # Anything but the close control lands outside the page view.
        view.pointer_down("document", "results")
    if not line.startswith(":"):
        matches = view.session.submit(line)
        print_results(console, matches, base_url=base_url)
        return True
    command, _, rest_text = line[1:].partition(" ")
    command = command.strip()
    if command in {"q", "quit", "exit"}:
        return False
    if command == "help":
        console.print(BROWSE_HELP, markup=False)
    elif command == "type":
        # The query is taken verbatim; quotes are part of it.
        if view.session.type_query(rest_text):
            print_results(console, view.session.state.matches, base_url=base_url)
        else:
            console.print(f"Query set to {rest_text!r}; submit a search to see results.", markup=False)
    elif command == "open":
        try:
            argv = shlex.split(rest_text)
        except ValueError as exc:
            console.print(str(exc), style="yellow", markup=False)
            return True
        _browse_open(console, view, argv)
    elif command == "close":
        view.modal.close()
    else:
        console.print(f"Unknown command :{command} (try :help)", markup=False)
    return True


def _run_browse(args: argparse.Namespace) -> int:
    set_debug_logging(bool(args.debug))
    console = Console()
    with SearchView(args.corpus, timeout=args.timeout) as view:
        with console.status("Loading the evidence data..."):
            view.load()
        console.print(f"{len(view.session.corpus)} evidence item(s) loaded. Type :help for commands.")
        while True:
            prompt = "page> " if view.modal.is_open else "search> "
            try:
                line = console.input(prompt)
            except (EOFError, KeyboardInterrupt):
                console.print()
                break
            if not _browse_step(console, view, line, args.base_url):
                break
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "web":
        return _run_web(build_web_parser().parse_args(argv[1:]))
    if argv and argv[0] == "search":
        return _run_search(build_search_parser().parse_args(argv[1:]))
    if argv and argv[0] == "show":
        return _run_show(build_show_parser().parse_args(argv[1:]))
    if argv and argv[0] == "browse":
        return _run_browse(build_browse_parser().parse_args(argv[1:]))

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0
    parser.parse_args(argv)
    parser.error(f"unknown command: {argv[0]}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
