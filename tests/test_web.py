from __future__ import annotations

import json

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from horizon_search.search import INQUIRY_BASE_URL
from horizon_search.web import DEFAULT_TITLE, WebConfig, create_app, render_index


def _find_route(app, path: str, method: str):
    method = method.upper()
    for route in app.router.routes:
        if getattr(route, "path", None) == path and method in getattr(route, "methods", set()):
            return route.endpoint
    raise RuntimeError(f"Route {method} {path} not found")


def test_create_app_requires_corpus_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        create_app(WebConfig(corpus_path=tmp_path / "missing.json"))


def test_index_page_serves_search_ui(corpus_file) -> None:
    client = TestClient(create_app(WebConfig(corpus_path=corpus_file)))
    response = client.get("/")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    body = response.text
    assert f"<h1>{DEFAULT_TITLE}</h1>" in body
    assert "Loading the evidence data..." in body
    assert json.dumps(INQUIRY_BASE_URL) in body
    assert "fetch('/evidence_pages.json')" in body
    assert "const HorizonSearch" in body
    assert "__HS_" not in body


def test_corpus_asset_is_served_as_json(corpus_file, sample_payload) -> None:
    client = TestClient(create_app(WebConfig(corpus_path=corpus_file)))
    response = client.get("/evidence_pages.json")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == sample_payload


def test_corpus_asset_drops_malformed_entries(tmp_path) -> None:
    corpus_file = tmp_path / "evidence_pages.json"
    corpus_file.write_text(
        json.dumps(
            [
                {
                    "evidence_title": "Witness A",
                    "evidence_link": "/a",
                    "pages": [
                        {"page_number": 1, "page_text": "hello world"},
                        None,
                        {"page_number": "2", "page_text": "second"},
                        {"page_number": 3},
                    ],
                },
                None,
                {"evidence_link": "/untitled", "pages": []},
                {"evidence_title": "No link", "pages": "oops"},
            ]
        ),
        encoding="utf-8",
    )
    client = TestClient(create_app(WebConfig(corpus_path=corpus_file)))
    assert client.get("/evidence_pages.json").json() == [
        {
            "evidence_title": "Witness A",
            "evidence_link": "/a",
            "pages": [
                {"page_number": 1, "page_text": "hello world"},
                {"page_number": 2, "page_text": "second"},
            ],
        },
        {"evidence_title": "No link", "evidence_link": "", "pages": []},
    ]


def test_corpus_asset_is_empty_for_non_array_payload(tmp_path) -> None:
    corpus_file = tmp_path / "evidence_pages.json"
    corpus_file.write_text('{"evidence_title": "not a list"}', encoding="utf-8")
    client = TestClient(create_app(WebConfig(corpus_path=corpus_file)))
    response = client.get("/evidence_pages.json")
    assert response.status_code == 200
    assert response.json() == []


def test_corpus_route_returns_404_when_file_disappears(corpus_file) -> None:
    app = create_app(WebConfig(corpus_path=corpus_file))
    route = _find_route(app, "/evidence_pages.json", "GET")
    assert len(json.loads(route().body)) == 3
    corpus_file.unlink()

    with pytest.raises(HTTPException) as excinfo:
        route()
    assert excinfo.value.status_code == 404


def test_no_search_endpoint_is_exposed(corpus_file) -> None:
    app = create_app(WebConfig(corpus_path=corpus_file))
    paths = {getattr(route, "path", None) for route in app.router.routes}
    assert "/" in paths
    assert "/evidence_pages.json" in paths
    assert not any(path and path.startswith("/api/") for path in paths)


def test_render_index_escapes_title(corpus_file) -> None:
    page = render_index(
        WebConfig(
            corpus_path=corpus_file,
            title="Evidence <search>",
            inquiry_base_url="http://localhost:9000",
        )
    )
    assert "<title>Evidence &lt;search&gt;</title>" in page
    assert '"http://localhost:9000"' in page


def test_index_embeds_favicon(corpus_file) -> None:
    from horizon_search.web_assets import HS_FAVICON_URL, build_favicon_svg

    page = render_index(WebConfig(corpus_path=corpus_file))
    assert HS_FAVICON_URL in page
    assert HS_FAVICON_URL.startswith("data:image/svg+xml,")
    assert ">HS</text>" in build_favicon_svg()
    assert ">ab</text>" in build_favicon_svg("abc")
