"""HTTP server hosting the calendar page for the capture pipeline."""

from __future__ import annotations

import asyncio
import logging
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlsplit

import httpx

from .api_client import CalendarApiClient, create_http_client
from .calendar_page import PageTheme, render_calendar_html
from .calendar_view import CalendarView
from .config import CalendarViewConfig
from .i18n import resolve_locale

LOGGER = logging.getLogger("epdcal.calendar_server")

CALENDAR_PATHS = {"/", "/calendar", "/calendar/"}


class CalendarHttpServer:
    """Serve ``/calendar`` backed by a private asyncio loop.

    Each page request creates a fresh ``CalendarView`` on the loop, waits for
    it to become ready (up to ``render_wait_seconds``), renders it, and tears
    it down. The httpx client is shared by all page instances.
    """

    def __init__(
        self,
        config: CalendarViewConfig,
        *,
        theme: PageTheme | None = None,
        http_client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self.theme = theme or PageTheme()
        self._logger = logger or LOGGER
        self._http_client = http_client
        self._owns_client = http_client is None
        self._api: CalendarApiClient | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._loop_thread: threading.Thread | None = None
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None
        # Unmounted page instances whose fetches are still in flight; only touched on the loop thread.
        self._retired_views: set[CalendarView] = set()

    @property
    def server_address(self) -> tuple[str, int] | None:
        if not self._server:
            return None
        host, port = self._server.server_address[:2]
        return str(host), int(port)

    def start(self) -> None:
        if self._server:
            return
        self._start_loop()
        handler_cls = self._build_handler()
        try:
            server = ThreadingHTTPServer((self.config.bind_address, self.config.port), handler_cls)
        except OSError as exc:  # pragma: no cover - dependant on environment
            self._logger.error(
                "calendar http: failed to bind %s:%s (%s)", self.config.bind_address, self.config.port, exc
            )
            self._stop_loop()
            raise
        self._server = server
        thread = threading.Thread(target=server.serve_forever, name="epdcal-calendar-http", daemon=True)
        thread.start()
        self._thread = thread
        host, port = self.server_address or (self.config.bind_address, self.config.port)
        self._logger.info(
            "calendar http: serving on http://%s:%s/calendar (api %s)", host, port, self.config.api_base_url
        )

    def stop(self) -> None:
        server = self._server
        if not server:
            return
        self._logger.info("calendar http: shutting down")
        server.shutdown()
        server.server_close()
        if self._thread:
            self._thread.join(timeout=2)
        self._server = None
        self._thread = None
        self._stop_loop()

    def render_page(self, lang: str | None = None) -> str:
        """Render one page instance; blocks the calling (non-loop) thread."""
        if not self._loop:
            raise RuntimeError("calendar server is not running")
        future = asyncio.run_coroutine_threadsafe(self._render_page(lang), self._loop)
        return future.result()

    async def _render_page(self, lang: str | None) -> str:
        assert self._api is not None
        view = CalendarView(
            self._api,
            locale=resolve_locale(lang, self.config.locale),  # type: ignore[arg-type]
            week_start=self.config.week_start,
            display_timezone=self.config.display_timezone,
            logger=self._logger,
        )
        view.mount()
        try:
            try:
                await asyncio.wait_for(view.wait_ready(), timeout=self.config.render_wait_seconds)
            except TimeoutError:
                self._logger.warning(
                    "calendar page not ready after %.1fs (events=%s, battery=%s); rendering as not ready",
                    self.config.render_wait_seconds,
                    view.readiness.state.events,
                    view.readiness.state.battery,
                )
            return render_calendar_html(view.snapshot(), view.formatter, self.theme)
        finally:
            view.unmount()
            self._retire(view)

    def _retire(self, view: CalendarView) -> None:
        self._retired_views = {retired for retired in self._retired_views if retired.pending_tasks}
        if view.pending_tasks:
            self._retired_views.add(view)

    async def _cancel_retired(self) -> None:
        tasks = [task for view in self._retired_views for task in view.pending_tasks]
        self._retired_views.clear()
        if not tasks:
            return
        self._logger.debug("calendar http: cancelling %d in-flight fetch(es)", len(tasks))
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _start_loop(self) -> None:
        loop = asyncio.new_event_loop()
        ready = threading.Event()

        def _run() -> None:
            asyncio.set_event_loop(loop)
            loop.call_soon(ready.set)
            loop.run_forever()

        thread = threading.Thread(target=_run, name="epdcal-calendar-loop", daemon=True)
        thread.start()
        ready.wait(timeout=5)
        self._loop = loop
        self._loop_thread = thread
        if self._http_client is None:
            self._http_client = create_http_client(self.config.api_base_url, timeout=self.config.fetch_timeout)
        self._api = CalendarApiClient(self._http_client)

    def _stop_loop(self) -> None:
        loop = self._loop
        if not loop:
            return
        try:
            asyncio.run_coroutine_threadsafe(self._cancel_retired(), loop).result(timeout=5)
        except Exception:  # pylint: disable=broad-except
            self._logger.exception("calendar http: failed to cancel in-flight fetches")
        if self._http_client is not None and self._owns_client:
            try:
                asyncio.run_coroutine_threadsafe(self._http_client.aclose(), loop).result(timeout=5)
            except Exception:  # pylint: disable=broad-except
                self._logger.exception("calendar http: failed to close API client")
            self._http_client = None
        loop.call_soon_threadsafe(loop.stop)
        if self._loop_thread:
            self._loop_thread.join(timeout=2)
        loop.close()
        self._loop = None
        self._loop_thread = None
        self._api = None

    def _build_handler(self):
        outer = self

        class CalendarRequestHandler(BaseHTTPRequestHandler):
            def log_message(self, _format, *_args):  # noqa: D401
                return

            def _set_common_headers(self) -> None:
                origin = self.headers.get("Origin")
                allowed_origin = outer._allowed_origin(origin)
                if allowed_origin:
                    self.send_header("Access-Control-Allow-Origin", allowed_origin)
                    if allowed_origin != "*":
                        self.send_header("Vary", "Origin")
                self.send_header("Access-Control-Allow-Methods", "GET, HEAD, OPTIONS")
                self.send_header("Access-Control-Allow-Headers", "Accept, Content-Type")
                self.send_header("Cache-Control", "no-store, max-age=0")

            def do_OPTIONS(self) -> None:  # noqa: N802
                self.send_response(HTTPStatus.NO_CONTENT)
                self._set_common_headers()
                self.end_headers()

            def do_HEAD(self) -> None:  # noqa: N802
                self._route(include_body=False)

            def do_GET(self) -> None:  # noqa: N802
                self._route(include_body=True)

            def _route(self, *, include_body: bool) -> None:
                parts = urlsplit(self.path)
                if parts.path == "/health":
                    self._send_body(b"OK", "text/plain; charset=utf-8", include_body=include_body)
                elif parts.path == "/preview.png":
                    self._serve_preview(include_body=include_body)
                elif parts.path in CALENDAR_PATHS:
                    lang = (parse_qs(parts.query).get("lang") or [None])[0]
                    self._serve_calendar(lang, include_body=include_body)
                else:
                    self.send_error(HTTPStatus.NOT_FOUND, "Not Found")

            def _serve_calendar(self, lang: str | None, *, include_body: bool) -> None:
                try:
                    html = outer.render_page(lang)
                except Exception:  # pylint: disable=broad-except
                    outer._logger.exception("calendar http: page render failed")
                    self.send_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Render failed")
                    return
                self._send_body(html.encode("utf-8"), "text/html; charset=utf-8", include_body=include_body)

            def _serve_preview(self, *, include_body: bool) -> None:
                try:
                    data = outer.config.preview_path.read_bytes()
                except FileNotFoundError:
                    self.send_error(HTTPStatus.NOT_FOUND, "Preview not available")
                    return
                except OSError as exc:
                    outer._logger.warning("calendar http: cannot read preview %s: %s", outer.config.preview_path, exc)
                    self.send_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Preview unreadable")
                    return
                self._send_body(data, "image/png", include_body=include_body)

            def _send_body(self, body: bytes, content_type: str, *, include_body: bool) -> None:
                self.send_response(HTTPStatus.OK)
                self._set_common_headers()
                self.send_header("Content-Type", content_type)
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                if include_body:
                    self.wfile.write(body)

        return CalendarRequestHandler

    def _allowed_origin(self, origin: str | None) -> str | None:
        allowed = self.config.allowed_origins
        if not allowed or allowed == ("*",):
            return "*"
        if origin and origin in allowed:
            return origin
        return None
