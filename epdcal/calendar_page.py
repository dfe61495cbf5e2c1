"""HTML rendering for the e-paper calendar page."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape as html_escape

from .battery import BATTERY_FILL_CELLS, battery_level_from_percent, format_battery_percent
from .calendar_assets import CALENDAR_CSS
from .calendar_grid import CalendarDay, weekday_header_labels
from .calendar_view import CalendarSnapshot
from .locale_format import LocaleFormatter
from .occurrences import visible_occurrences

DEFAULT_FONT_STACK = '"Nanum Gothic", "Noto Sans KR", "Helvetica Neue", sans-serif'
ROOT_ELEMENT_ID = "epdcal-root"
# Seconds before a not-ready page asks the browser to load a fresh page instance.
NOT_READY_REFRESH_SECONDS = 2


@dataclass(frozen=True)
class PageTheme:
    """Styling knobs for the rendered page."""

    font_family: str = DEFAULT_FONT_STACK


def render_calendar_html(
    snapshot: CalendarSnapshot,
    formatter: LocaleFormatter,
    theme: PageTheme | None = None,
) -> str:
    """Render the calendar snapshot into an HTML document.

    The root element's ``data-ready`` attribute is the capture signal.
    """

    theme = theme or PageTheme()
    ready_attr = "true" if snapshot.ready else "false"
    root_attrs = (
        f'id="{ROOT_ELEMENT_ID}" '
        f'class="calendar-root" '
        f'data-ready="{ready_attr}" '
        f'data-locale="{html_escape(formatter.identifier, quote=True)}" '
        f'data-week-start="{snapshot.week_start.value}" '
        f'data-events="{snapshot.readiness.events.value}" '
        f'data-battery="{snapshot.readiness.battery.value}"'
    )
    refresh_meta = ""
    if not snapshot.ready:
        refresh_meta = f'<meta http-equiv="refresh" content="{NOT_READY_REFRESH_SECONDS}" />\n'
    error_html = ""
    if snapshot.error:
        error_html = f'<div class="calendar-error" role="alert">{html_escape(snapshot.error)}</div>'

    css_block = f"{_theme_css(theme)}\n{CALENDAR_CSS}"
    title = html_escape(formatter.t("calendar.title"))
    lang = html_escape(snapshot.locale, quote=True)
    return f"""<!DOCTYPE html>
<html lang="{lang}">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=984, initial-scale=1.0" />
{refresh_meta}<title>{title}</title>
<style>
{css_block}
</style>
</head>
<body>
<div {root_attrs}>
<main class="calendar-main">
{_build_battery_indicator(snapshot, formatter)}
{_build_header(snapshot, formatter)}
{error_html}
<section class="calendar-body">
{_build_weekday_header(snapshot, formatter)}
{_build_grid(snapshot, formatter)}
</section>
</main>
</div>
</body>
</html>
"""


def _theme_css(theme: PageTheme) -> str:
    return ":root {\n" f"  --calendar-font-family: {theme.font_family};\n" "}"


def _build_battery_indicator(snapshot: CalendarSnapshot, formatter: LocaleFormatter) -> str:
    level = battery_level_from_percent(snapshot.battery_percent)
    filled = BATTERY_FILL_CELLS[level]
    cells = "".join(
        f'<span class="calendar-battery__cell{" calendar-battery__cell--filled" if index < filled else ""}"></span>'
        for index in range(4)
    )
    label = format_battery_percent(snapshot.battery_percent)
    label_html = f'<span class="calendar-battery__percent">{html_escape(label)}</span>' if label else ""
    aria_label = html_escape(formatter.t("calendar.battery"), quote=True)
    return f"""
<div class="calendar-battery" data-battery-level="{level.value}" aria-label="{aria_label}">
  <span class="calendar-battery__glyph" aria-hidden="true">
    <span class="calendar-battery__body">{cells}</span><span class="calendar-battery__tip"></span>
  </span>
  {label_html}
</div>
""".strip()


def _build_header(snapshot: CalendarSnapshot, formatter: LocaleFormatter) -> str:
    today = snapshot.today
    date_text = html_escape(formatter.format_date(today))
    meta_text = " · ".join(
        (
            formatter.format_weekday(today),
            snapshot.display_timezone,
            formatter.format_clock(today),
        )
    )
    if snapshot.last_updated_at:
        updated_text = formatter.format_datetime(snapshot.last_updated_at)
    else:
        updated_text = formatter.t("calendar.loading")
    updated_prefix = formatter.t("calendar.last_updated_prefix")
    return f"""
<header class="calendar-header">
  <h1 class="calendar-header__date">{date_text}</h1>
  <p class="calendar-header__meta">{html_escape(meta_text)}</p>
  <p class="calendar-header__updated">{html_escape(updated_prefix)} {html_escape(updated_text)}</p>
</header>
""".strip()


def _build_weekday_header(snapshot: CalendarSnapshot, formatter: LocaleFormatter) -> str:
    labels = []
    for label, weekend in weekday_header_labels(snapshot.week_start, formatter):
        classes = "calendar-weekdays__label"
        if weekend:
            classes += " calendar-weekdays__label--weekend"
        labels.append(f'<div class="{classes}">{html_escape(label)}</div>')
    return f'<div class="calendar-weekdays">{"".join(labels)}</div>'


def _build_grid(snapshot: CalendarSnapshot, formatter: LocaleFormatter) -> str:
    cells = "".join(_build_day_cell(day, snapshot, formatter) for day in snapshot.days)
    return f'<div class="calendar-grid">{cells}</div>'


def _build_day_cell(day: CalendarDay, snapshot: CalendarSnapshot, formatter: LocaleFormatter) -> str:
    today = snapshot.today
    in_current_month = day.date.year == today.year and day.date.month == today.month
    cell_classes = ["calendar-cell"]
    if not in_current_month:
        cell_classes.append("calendar-cell--outside")
    if day.is_today:
        cell_classes.append("calendar-cell--today")
    if day.is_weekend:
        cell_classes.append("calendar-cell--weekend")
    date_classes = ["calendar-cell__date"]
    if day.is_weekend and in_current_month:
        date_classes.append("calendar-cell__date--weekend")
    if day.is_today:
        date_classes.append("calendar-cell__date--today")
    today_badge = ""
    if day.is_today:
        today_badge = f'<span class="calendar-cell__today">{html_escape(formatter.t("calendar.today"))}</span>'

    records = visible_occurrences(snapshot.events_by_date, day.date)
    if records:
        events_html = "".join(
            f'<p class="calendar-cell__event">{html_escape(formatter.format_event_line(record))}</p>'
            for record in records
        )
    else:
        events_html = f'<p class="calendar-cell__empty">{html_escape(formatter.t("calendar.no_events"))}</p>'

    return (
        f'<div class="{" ".join(cell_classes)}" data-date="{day.date.isoformat()}">'
        f'<div class="calendar-cell__header">'
        f'<span class="{" ".join(date_classes)}">{html_escape(day.label)}</span>{today_badge}'
        f"</div>"
        f'<div class="calendar-cell__events">{events_html}</div>'
        f"</div>"
    )
