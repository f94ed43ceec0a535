"""
Mustache templates for the pages served by webrepl.

`{{name}}` is HTML-escaped by pystache; `{{{name}}}` embeds a fragment that
the HtmlPrinter has already escaped.
"""
from typing import Iterable

import pystache

from webrepl.webrepl_history import HistoryRecord

DOCUMENT = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{{title}}</title></head>
<body>
{{{body}}}
</body>
</html>
"""

INDEX = """<h1>Python <a href="/repl">REPL</a></h1>
<p><a href="/ns">Loaded namespaces</a></p>
"""

REPL = """<form action="/repl" method="post">
<textarea name="expr" rows="4" cols="72"></textarea>
<input type="submit" value="Submit">
</form>
<table cellpadding="10">
{{#history}}
<tr><td rowspan="2" valign="top"><pre>{{expr}}</pre></td><td rowspan="2" valign="top">{{{result_html}}}</td><td><pre>{{out}}</pre></td></tr>
<tr><td><pre>{{err}}</pre></td></tr>
{{/history}}
</table>
"""

NOT_FOUND = """<h1>Not found</h1>
<p>{{message}}</p>
<p><a href="/ns">Loaded namespaces</a></p>
"""


class Pages:
    """Renders whole HTML documents from the templates above."""

    def __init__(self, title: str = "webrepl"):
        self.title = title
        self._renderer = pystache.Renderer()

    def document(self, body: str, title: str = None) -> str:
        return self._renderer.render(DOCUMENT, {"title": title or self.title, "body": body})

    def index(self) -> str:
        return self.document(self._renderer.render(INDEX, {}))

    def repl(self, history: Iterable[HistoryRecord]) -> str:
        rows = [
            {"expr": r.expr, "result_html": r.result_html, "out": r.out, "err": r.err}
            for r in history
        ]
        return self.document(self._renderer.render(REPL, {"history": rows}), title=f"{self.title} REPL")

    def not_found(self, message: str) -> str:
        return self.document(self._renderer.render(NOT_FOUND, {"message": message}), title="Not found")


__all__ = [
    "Pages",
]
