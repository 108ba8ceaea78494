from __future__ import annotations

import logging

from horizon_search import logging_utils
from horizon_search.logging_utils import (
    Utf8AccessFormatter,
    build_uvicorn_log_config,
    debug_log,
    log_error,
    set_debug_logging,
)


def test_debug_log_respects_toggle(capsys) -> None:
    set_debug_logging(False)
    debug_log("hidden")
    assert capsys.readouterr().err == ""
    set_debug_logging(True)
    try:
        debug_log("shown")
    finally:
        set_debug_logging(False)
    assert capsys.readouterr().err == "[horizon-search] debug: shown\n"


def test_log_error_goes_to_stderr(capsys) -> None:
    log_error("Failed to fetch evidence pages")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith(logging_utils.LOG_PREFIX)


def test_uvicorn_config_uses_decoding_formatter() -> None:
    config = build_uvicorn_log_config()
    assert config["formatters"]["access"]["()"] == "horizon_search.logging_utils.Utf8AccessFormatter"


def test_access_formatter_decodes_paths() -> None:
    formatter = Utf8AccessFormatter(fmt="%(request_line)s", use_colors=False)
    record = logging.LogRecord(
        name="uvicorn.access",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='%s - "%s %s HTTP/%s" %d',
        args=("127.0.0.1:5000", "GET", "/evidence_pages.json?q=%E8%A8%BC%E6%8B%A0", "1.1", 200),
        exc_info=None,
    )
    assert formatter.format(record) == "GET /evidence_pages.json?q=証拠 HTTP/1.1"
