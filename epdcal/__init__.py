"""
epdcal - e-paper calendar view package

Renders a five-week calendar page that an external headless capture pipeline
screenshots and pushes to an e-paper display.

Core modules:
- calendar_grid: Five-week grid construction under a week-start policy
- occurrences: Occurrence parsing and per-day bucketing
- readiness: Aggregate "safe to capture" signal across data sources
- calendar_view: Page instance wiring the concurrent fetches together
- calendar_page: HTML rendering with the data-ready marker
- calendar_server: HTTP server hosting the calendar page
"""

__version__ = "0.4.0"
