"""
The HTTP surface: a FastAPI app over one REPL session and one namespace
browser.

Handlers are plain `def` functions, so FastAPI runs each request in its own
worker thread; evaluation and rendering are synchronous within a request.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse

from webrepl.webrepl_browser import NamespaceBrowser
from webrepl.webrepl_config import ReplConfig
from webrepl.webrepl_evaluator import Evaluator
from webrepl.webrepl_history import HistoryLog
from webrepl.webrepl_pages import Pages
from webrepl.webrepl_printer import HtmlPrinter
from webrepl.webrepl_reflection import ModuleReflection, NotFound
from webrepl.webrepl_session import ReplSession

logger = logging.getLogger(__name__)


def create_app(config: Optional[ReplConfig] = None) -> FastAPI:
    """Create the FastAPI app and the components it serves."""
    cfg = config or ReplConfig()
    reflection = ModuleReflection()
    printer = HtmlPrinter(reflection, consume_iterators=False)
    session = ReplSession(
        Evaluator(namespace=cfg.namespace, show_traceback=cfg.show_traceback, printer=printer),
        HistoryLog(),
    )
    browser = NamespaceBrowser(reflection, printer)
    pages = Pages(title=cfg.title)

    app = FastAPI(title=cfg.title)
    app.state.config = cfg
    app.state.session = session
    app.state.browser = browser
    app.state.pages = pages

    @app.exception_handler(NotFound)
    def not_found(request: Request, exc: NotFound) -> HTMLResponse:
        logger.info("%s %s: %s", request.method, request.url.path, exc.describe())
        return HTMLResponse(pages.not_found(exc.describe()), status_code=404)

    @app.get("/", response_class=HTMLResponse)
    def index() -> HTMLResponse:
        return HTMLResponse(pages.index())

    @app.get("/repl", response_class=HTMLResponse)
    def repl_get() -> HTMLResponse:
        return HTMLResponse(pages.repl(session.current()))

    @app.post("/repl", response_class=HTMLResponse)
    def repl_post(expr: str = Form("")) -> HTMLResponse:
        return HTMLResponse(pages.repl(session.submit(expr)))

    @app.get("/ns", response_class=HTMLResponse)
    def all_ns_get() -> HTMLResponse:
        return HTMLResponse(pages.document(browser.render_namespaces(), title="Namespaces"))

    @app.get("/ns/{namespace}", response_class=HTMLResponse)
    def ns_get(namespace: str) -> HTMLResponse:
        return HTMLResponse(pages.document(browser.render_namespace(namespace), title=namespace))

    @app.get("/ns/{namespace}/{symbol}", response_class=HTMLResponse)
    def symbol_get(namespace: str, symbol: str) -> HTMLResponse:
        body = browser.render_symbol(namespace, symbol)
        return HTMLResponse(pages.document(body, title=f"{namespace}/{symbol}"))

    @app.get("/reqmap", response_class=HTMLResponse)
    def reqmap(request: Request) -> HTMLResponse:
        info = {
            "method": request.method,
            "path": request.url.path,
            "query": dict(request.query_params),
            "headers": dict(request.headers),
            "client": tuple(request.client) if request.client else None,
        }
        return HTMLResponse(pages.document(printer.pformat(info), title="request"))

    return app


__all__ = [
    "create_app",
]
