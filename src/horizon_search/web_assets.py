from __future__ import annotations

from urllib.parse import quote


def build_favicon_svg(
    label: str = "HS",
    *,
    background: str = "#0f172a",
    text_color: str = "#fde047",
    border_color: str | None = "#ffffff1a",
) -> str:
    """Return a square SVG badge with up to two characters of ``label``."""
    normalized = (label or "HS").strip() or "HS"
    normalized = normalized[:2]
    font_size = "26" if len(normalized) > 1 else "32"
    border_markup = (
        f'<rect x="1.5" y="1.5" width="61" height="61" rx="12" ry="12" fill="none" '
        f'stroke="{border_color}" stroke-width="1.5" />'
        if border_color
        else ""
    )
    return f"""<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 64 64" role="img" aria-label="{normalized} icon">
  <rect width="64" height="64" rx="14" ry="14" fill="{background}" />
  {border_markup}
  <text x="32" y="40" text-anchor="middle" font-family="Inter, 'Segoe UI', sans-serif"
        font-size="{font_size}" font-weight="700" fill="{text_color}">{normalized}</text>
</svg>"""


def favicon_data_url(label: str = "HS") -> str:
    return "data:image/svg+xml," + quote(build_favicon_svg(label=label))


HS_FAVICON_URL = favicon_data_url()


__all__ = ["build_favicon_svg", "favicon_data_url", "HS_FAVICON_URL"]
