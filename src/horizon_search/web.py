from __future__ import annotations

import html
import json
from dataclasses import dataclass
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse

from .corpus import CORPUS_FILENAME, corpus_to_payload, load_corpus
from .search import INQUIRY_BASE_URL, NO_MATCHING_PAGES
from .web_assets import HS_FAVICON_URL

DEFAULT_TITLE = "Post Office Horizon IT Inquiry Evidence Search"


@dataclass(slots=True)
class WebConfig:
    corpus_path: Path
    title: str = DEFAULT_TITLE
    inquiry_base_url: str = INQUIRY_BASE_URL


# Pure search, highlight and modal logic shared by the page script. It touches
# no DOM globals, so it runs unchanged under node.
SEARCH_JS = r"""const HorizonSearch = (() => {
  function filterCorpus(corpus, query) {
    const needle = query.toLowerCase();
    return corpus
      .map((item) => ({
        ...item,
        pages: item.pages.filter((page) => page.page_text.toLowerCase().includes(needle)),
      }))
      .filter(
        (item) => item.evidence_title.toLowerCase().includes(needle) || item.pages.length > 0
      );
  }

  function escapePattern(term) {
    return term.replace(/[.*+?^${}()|[\]\\]/g, '\\$&');
  }

  function highlightSegments(text, term) {
    if (!term.trim()) {
      return text ? [{ text, marked: false }] : [];
    }
    return text
      .split(new RegExp(`(${escapePattern(term)})`, 'gi'))
      .map((part, index) => ({ text: part, marked: index % 2 === 1 }))
      .filter((segment) => segment.marked || segment.text);
  }

  function splitParagraphs(text) {
    return String(text).split('\n');
  }

  function createSearchState(corpus) {
    return { corpus, query: '', submitted: false, results: [] };
  }

  // Returns true when the results were refreshed.
  function typeQuery(state, query) {
    state.query = query;
    if (!state.submitted) {
      return false;
    }
    state.results = filterCorpus(state.corpus, query);
    return true;
  }

  function submitQuery(state) {
    state.submitted = true;
    state.results = filterCorpus(state.corpus, state.query);
    return state.results;
  }

  function createModalController(doc, build) {
    let modal = null;

    function handlePointerDown(event) {
      if (modal && !modal.content.contains(event.target)) {
        close();
      }
    }

    function close() {
      if (!modal) return;
      doc.removeEventListener('pointerdown', handlePointerDown);
      modal.root.remove();
      modal = null;
    }

    function open(pageText, searchTerm) {
      close();
      modal = build(pageText, searchTerm, close);
      doc.addEventListener('pointerdown', handlePointerDown);
      return modal;
    }

    return { open, close, isOpen: () => modal !== null };
  }

  return {
    createModalController,
    createSearchState,
    escapePattern,
    filterCorpus,
    highlightSegments,
    splitParagraphs,
    submitQuery,
    typeQuery,
  };
})();"""


INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>__HS_TITLE__</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <link rel="icon" type="image/svg+xml" href="__HS_FAVICON__">
  <style>
    :root {
      color-scheme: light;
      font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", "Helvetica Neue", sans-serif;
      --bg: #f8fafc;
      --panel: #ffffff;
      --outline: #e2e8f0;
      --text: #0f172a;
      --muted: #64748b;
      --accent: #2563eb;
      --accent-dark: #1d4ed8;
      --highlight: #fde047;
      --overlay: rgba(15,23,42,0.55);
    }
    * {
      box-sizing: border-box;
    }
    body {
      margin: 0;
      background: var(--bg);
      color: var(--text);
    }
    .App {
      max-width: 1100px;
      margin: 0 auto;
      padding: 2rem 1.25rem 4rem;
    }
    h1 {
      font-size: 1.6rem;
      margin: 0 0 1.25rem;
    }
    .searchForm form {
      display: flex;
      gap: 0.5rem;
    }
    .searchForm input {
      flex: 1;
      padding: 0.6rem 0.8rem;
      font-size: 1rem;
      border: 1px solid var(--outline);
      border-radius: 8px;
    }
    .searchForm button {
      padding: 0.6rem 1.2rem;
      font-size: 1rem;
      border: none;
      border-radius: 8px;
      background: var(--accent);
      color: #fff;
      cursor: pointer;
    }
    .searchForm button:hover {
      background: var(--accent-dark);
    }
    .results p.summary {
      color: var(--muted);
      margin: 1.25rem 0 0.5rem;
    }
    table {
      width: 100%;
      border-collapse: collapse;
      background: var(--panel);
      border: 1px solid var(--outline);
    }
    th, td {
      text-align: left;
      vertical-align: top;
      padding: 0.65rem 0.8rem;
      border-bottom: 1px solid var(--outline);
    }
    th {
      font-size: 0.85rem;
      text-transform: uppercase;
      letter-spacing: 0.04em;
      color: var(--muted);
    }
    .page-list {
      list-style: none;
      margin: 0;
      padding: 0;
      display: flex;
      flex-wrap: wrap;
      gap: 0.35rem;
    }
    .clickable-page {
      cursor: pointer;
      color: var(--accent);
      padding: 0.15rem 0.5rem;
      border: 1px solid var(--outline);
      border-radius: 999px;
      font-size: 0.85rem;
    }
    .clickable-page:hover {
      background: var(--outline);
    }
    .modal {
      position: fixed;
      inset: 0;
      background: var(--overlay);
      display: flex;
      align-items: center;
      justify-content: center;
      padding: 1.5rem;
    }
    .modal-content {
      position: relative;
      background: var(--panel);
      max-width: 820px;
      width: 100%;
      max-height: 85vh;
      overflow-y: auto;
      border-radius: 12px;
      padding: 2rem 2rem 1.5rem;
    }
    .modal-content p {
      margin: 0 0 0.5rem;
      line-height: 1.5;
      white-space: pre-wrap;
    }
    .close {
      position: absolute;
      top: 0.6rem;
      right: 1rem;
      font-size: 1.6rem;
      cursor: pointer;
      color: var(--muted);
    }
    .highlight {
      background: var(--highlight);
    }
  </style>
</head>
<body>
  <div class="App" id="loading">Loading the evidence data...</div>
  <div class="App" id="app" hidden>
    <h1>__HS_TITLE__</h1>
    <div class="searchForm">
      <form id="search-form">
        <input type="text" placeholder="Search..." id="search-input" autocomplete="off">
        <button type="submit">Search</button>
      </form>
    </div>
    <div class="results">
      <p class="summary" id="summary">0 result(s) found</p>
      <table>
        <thead>
          <tr>
            <th>Evidence Title</th>
            <th>Pages</th>
            <th>Inquiry Page</th>
          </tr>
        </thead>
        <tbody id="results-body"></tbody>
      </table>
    </div>
  </div>
  <script>
__HS_SEARCH_JS__
  </script>
  <script>
    (() => {
      const INQUIRY_BASE_URL = __HS_BASE_URL__;
      const NO_MATCHING_PAGES = __HS_NO_PAGES__;
      const state = HorizonSearch.createSearchState([]);
      let disposed = false;

      const loadingEl = document.getElementById('loading');
      const appEl = document.getElementById('app');
      const formEl = document.getElementById('search-form');
      const inputEl = document.getElementById('search-input');
      const summaryEl = document.getElementById('summary');
      const bodyEl = document.getElementById('results-body');

      function renderHighlighted(text, term) {
        const fragment = document.createDocumentFragment();
        HorizonSearch.highlightSegments(text, term).forEach((segment) => {
          if (segment.marked) {
            const span = document.createElement('span');
            span.className = 'highlight';
            span.textContent = segment.text;
            fragment.appendChild(span);
          } else {
            fragment.appendChild(document.createTextNode(segment.text));
          }
        });
        return fragment;
      }

      function buildModal(pageText, searchTerm, close) {
        const root = document.createElement('div');
        root.className = 'modal';
        const content = document.createElement('div');
        content.className = 'modal-content';
        const closeEl = document.createElement('span');
        closeEl.className = 'close';
        closeEl.textContent = '\\u00d7';
        closeEl.addEventListener('click', close);
        content.appendChild(closeEl);
        HorizonSearch.splitParagraphs(pageText).forEach((line) => {
          const paragraph = document.createElement('p');
          paragraph.appendChild(renderHighlighted(line, searchTerm));
          content.appendChild(paragraph);
        });
        root.appendChild(content);
        document.body.appendChild(root);
        return { root, content };
      }

      const modal = HorizonSearch.createModalController(document, buildModal);

      function renderResults() {
        summaryEl.textContent = `${state.results.length} result(s) found`;
        bodyEl.replaceChildren();
        state.results.forEach((result) => {
          const row = document.createElement('tr');

          const titleCell = document.createElement('td');
          const strong = document.createElement('strong');
          strong.textContent = result.evidence_title;
          titleCell.appendChild(strong);

          const pagesCell = document.createElement('td');
          if (result.pages.length > 0) {
            const list = document.createElement('ul');
            list.className = 'page-list';
            result.pages.forEach((page) => {
              const entry = document.createElement('li');
              entry.className = 'clickable-page';
              entry.textContent = `Page ${page.page_number}`;
              entry.addEventListener('click', () => modal.open(page.page_text, state.query));
              list.appendChild(entry);
            });
            pagesCell.appendChild(list);
          } else {
            pagesCell.textContent = NO_MATCHING_PAGES;
          }

          const linkCell = document.createElement('td');
          const link = document.createElement('a');
          link.href = `${INQUIRY_BASE_URL}${result.evidence_link || ''}`;
          link.target = '_blank';
          link.rel = 'noreferrer';
          link.textContent = 'View';
          linkCell.appendChild(link);

          row.append(titleCell, pagesCell, linkCell);
          bodyEl.appendChild(row);
        });
      }

      inputEl.addEventListener('input', (event) => {
        if (HorizonSearch.typeQuery(state, event.target.value)) {
          renderResults();
        }
      });

      formEl.addEventListener('submit', (event) => {
        event.preventDefault();
        HorizonSearch.submitQuery(state);
        renderResults();
      });

      window.addEventListener('pagehide', () => {
        disposed = true;
        modal.close();
      });

      async function loadCorpus() {
        let corpus = [];
        try {
          const response = await fetch('/__HS_CORPUS__');
          if (!response.ok) {
            throw new Error(`Request failed: ${response.status}`);
          }
          const data = await response.json();
          if (!Array.isArray(data)) {
            throw new Error('Evidence pages must be a JSON array');
          }
          corpus = data;
        } catch (error) {
          console.error('Failed to fetch evidence pages:', error);
        } finally {
          if (!disposed) {
            state.corpus = corpus;
            loadingEl.hidden = true;
            appEl.hidden = false;
            renderResults();
          }
        }
      }

      loadCorpus();
    })();
  </script>
</body>
</html>
"""


def render_index(config: WebConfig) -> str:
    return (
        INDEX_HTML.replace("__HS_SEARCH_JS__", SEARCH_JS)
        .replace("__HS_TITLE__", html.escape(config.title))
        .replace("__HS_FAVICON__", HS_FAVICON_URL)
        .replace("__HS_BASE_URL__", json.dumps(config.inquiry_base_url))
        .replace("__HS_NO_PAGES__", json.dumps(NO_MATCHING_PAGES))
        .replace("__HS_CORPUS__", CORPUS_FILENAME)
    )


def create_app(config: WebConfig) -> FastAPI:
    corpus_path = config.corpus_path.expanduser().resolve()
    if not corpus_path.is_file():
        raise FileNotFoundError(f"Evidence corpus not found: {corpus_path}")

    app = FastAPI(title=config.title)
    page = render_index(config)

    @app.get("/", response_class=HTMLResponse)
    def index() -> HTMLResponse:
        return HTMLResponse(page)

    @app.get(f"/{CORPUS_FILENAME}")
    def evidence_pages() -> JSONResponse:
        if not corpus_path.is_file():
            raise HTTPException(status_code=404, detail="Evidence corpus not found")
        # Entries the loader skips never reach the page.
        return JSONResponse(corpus_to_payload(load_corpus(corpus_path)))

    return app


__all__ = ["DEFAULT_TITLE", "INDEX_HTML", "SEARCH_JS", "WebConfig", "create_app", "render_index"]
