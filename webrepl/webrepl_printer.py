"""
Renders live Python values as HTML fragments.
"""
import collections.abc
import html
import io
import types
from typing import Any, Callable, Dict, Iterable, Optional
from urllib.parse import quote

from webrepl.webrepl_reflection import ReflectionProvider

Handler = Callable[[Any, "HtmlPrinter"], str]


def ns_uri(namespace: str) -> str:
    """The browser URI of a namespace."""
    return f"/ns/{namespace}"


def var_uri(namespace: str, name: str) -> str:
    """The browser URI of a symbol interned in `namespace`."""
    return f"/ns/{namespace}/{quote(name, safe='')}"


def link(href: str, text: str) -> str:
    return f'<a href="{html.escape(href)}">{html.escape(text, quote=False)}</a>'


class HtmlPrinter:
    """Formats Python objects into escaped HTML, linking named definitions.

    Handlers are looked up by the object's exact type, then along its MRO,
    then by a few structural fallbacks; anything else is printed as its
    escaped `repr`. `register` adds a rule for a new type without touching
    the existing ones. Subclasses of the built-in containers keep their own
    `repr` unless a rule is registered for them.

    With `consume_iterators=False`, one-shot iterators print as their `repr`
    and are left unconsumed.
    """

    def __init__(self, reflection: Optional[ReflectionProvider] = None, sep: str = ", ",
                 consume_iterators: bool = True):
        self.reflection = reflection
        self.sep = sep
        self.consume_iterators = consume_iterators
        self._handlers: Dict[type, Handler] = self._create_handlers()

    def register(self, cls: type, handler: Handler) -> None:
        self._handlers[cls] = handler

    def pformat(self, obj: Any) -> str:
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj, self)

    def text(self, value: Any) -> str:
        """Escape free text (captured output, metadata values)."""
        return html.escape(value if isinstance(value, str) else str(value), quote=False)

    def seq(self, begin: str, items: Iterable[Any], end: str) -> str:
        """Join the rendering of each item between two brackets.

        `items` is consumed lazily and never sized; an unbounded iterator
        does not terminate.
        """
        body = self.sep.join(self.pformat(item) for item in items)
        return f"{begin}{body}{end}"

    def _get_handler(self, obj) -> Handler:
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        for base in obj_type.__mro__[1:]:
            if base in self._handlers:
                return self._handlers[base]
        if isinstance(obj, collections.abc.Mapping):
            return _pformat_mapping
        if isinstance(obj, collections.abc.Iterator) and not isinstance(obj, io.IOBase):
            return _pformat_iterator
        return _pformat_default

    def _create_handlers(self) -> Dict[type, Handler]:
        return {
            list: _pformat_list,
            tuple: _pformat_tuple,
            set: _pformat_set,
            frozenset: _pformat_set,
            dict: _pformat_mapping,
            types.GeneratorType: _pformat_iterator,
            types.FunctionType: _pformat_reference,
            types.BuiltinFunctionType: _pformat_reference,
            types.MethodType: _pformat_reference,
            types.ModuleType: _pformat_reference,
            type: _pformat_reference,
        }


def _pformat_default(obj, printer: HtmlPrinter) -> str:
    try:
        text = repr(obj)
    except Exception as e:
        text = f"<unrepresentable {type(obj).__name__}: {e}>"
    return html.escape(text, quote=False)


def _pformat_list(obj, printer: HtmlPrinter) -> str:
    if type(obj) is not list:
        return _pformat_default(obj, printer)
    return printer.seq("[", obj, "]")


def _pformat_tuple(obj, printer: HtmlPrinter) -> str:
    if type(obj) is not tuple:
        # namedtuple and friends: the repr carries the type
        return _pformat_default(obj, printer)
    if len(obj) == 1:
        return f"({printer.pformat(obj[0])},)"
    return printer.seq("(", obj, ")")


def _pformat_set(obj, printer: HtmlPrinter) -> str:
    if type(obj) not in (set, frozenset):
        return _pformat_default(obj, printer)
    if not obj:
        return f"{type(obj).__name__}()"
    body = printer.seq("{", obj, "}")
    if isinstance(obj, frozenset):
        return f"frozenset({body})"
    return body


def _pformat_mapping(obj, printer: HtmlPrinter) -> str:
    if isinstance(obj, dict) and type(obj) is not dict:
        return _pformat_default(obj, printer)
    pairs = (f"{printer.pformat(k)}: {printer.pformat(v)}" for k, v in obj.items())
    return "{" + printer.sep.join(pairs) + "}"


def _pformat_iterator(obj, printer: HtmlPrinter) -> str:
    if not printer.consume_iterators:
        return _pformat_default(obj, printer)
    return printer.seq("[", obj, "]")


def _pformat_reference(obj, printer: HtmlPrinter) -> str:
    """Link a function, class or module to its page in the namespace browser."""
    if printer.reflection is None:
        return _pformat_default(obj, printer)
    desc = printer.reflection.resolve(obj)
    if desc is None:
        return _pformat_default(obj, printer)
    if isinstance(obj, types.ModuleType):
        return link(ns_uri(desc.namespace), desc.namespace)
    return link(var_uri(desc.namespace, desc.name), desc.name)


__all__ = [
    "HtmlPrinter",
    "link",
    "ns_uri",
    "var_uri",
]
