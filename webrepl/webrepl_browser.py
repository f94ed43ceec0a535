"""
The namespace browser: loaded modules, their interned names, and a page per
symbol with its source and metadata.
"""
import logging
from typing import Any, Callable, Dict, List, Mapping

from webrepl.webrepl_printer import HtmlPrinter, link, ns_uri, var_uri
from webrepl.webrepl_reflection import ReflectionProvider, SymbolDescriptor

logger = logging.getLogger(__name__)


class NamespaceBrowser:
    """Shapes reflection data into HTML fragments.

    Lookups of unknown namespaces or symbols raise `NotFound` from the
    reflection provider; the HTTP layer turns that into a 404 page.
    """

    def __init__(self, reflection: ReflectionProvider, printer: HtmlPrinter):
        self.reflection = reflection
        self.printer = printer
        self._meta_formatters: Dict[str, Callable[[Any], str]] = {
            "ns": self.printer.pformat,
            "doc": lambda v: f"<pre>{self.printer.text(v)}</pre>",
        }

    def list_namespaces(self) -> List[str]:
        return self.reflection.list_namespaces()

    def list_symbols(self, namespace: str) -> List[SymbolDescriptor]:
        return self.reflection.list_symbols(namespace)

    def describe_symbol(self, namespace: str, name: str) -> SymbolDescriptor:
        return self.reflection.describe_symbol(namespace, name)

    def render_namespaces(self) -> str:
        items = "".join(f"<li>{link(ns_uri(name), name)}</li>" for name in self.list_namespaces())
        return f"<h1>Namespaces</h1>\n<ol>{items}</ol>"

    def render_namespace(self, namespace: str) -> str:
        symbols = self.list_symbols(namespace)
        logger.debug("listing %d symbols in %s", len(symbols), namespace)
        items = "".join(
            f"<li>{link(var_uri(s.namespace, s.name), s.name)}</li>" for s in symbols
        )
        return f"<h1>{self.printer.text(namespace)}</h1>\n<ol>{items}</ol>"

    def format_metadata(self, metadata: Mapping[str, Any]) -> Dict[str, str]:
        """Render each metadata value; known keys get their own formatter."""
        out = {}
        for key, value in metadata.items():
            formatter = self._meta_formatters.get(key)
            out[key] = formatter(value) if formatter else self.printer.text(value)
        return out

    def html_map(self, formatted: Mapping[str, str]) -> str:
        """A definition list of already-rendered values."""
        rows = "".join(
            f"<dt>{self.printer.text(k)}</dt><dd>{v}</dd>" for k, v in formatted.items()
        )
        return f"<dl>{rows}</dl>"

    def render_symbol(self, namespace: str, name: str) -> str:
        desc = self.describe_symbol(namespace, name)
        parts = [f"<h1>{self.printer.text(desc.name)}</h1>"]
        if desc.source is not None:
            parts.append(f"<pre>{self.printer.text(desc.source)}</pre>")
        parts.append("<h3>Metadata</h3>")
        parts.append(self.html_map(self.format_metadata(desc.metadata)))
        return "\n".join(parts)


__all__ = [
    "NamespaceBrowser",
]
