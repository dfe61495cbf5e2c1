"""
Static asset loader for the calendar page

Loads the stylesheet from the package's assets/ directory once at import
time and exposes it as CALENDAR_CSS. Used by calendar_page.py to inline the
styles into the rendered HTML, so the capture tool needs a single request.
"""

from __future__ import annotations

from pathlib import Path


def _get_assets_dir() -> Path:
    return Path(__file__).resolve().parent / "assets"


def _load_css() -> str:
    css_path = _get_assets_dir() / "calendar.css"
    return css_path.read_text(encoding="utf-8").strip()


CALENDAR_CSS = _load_css()
