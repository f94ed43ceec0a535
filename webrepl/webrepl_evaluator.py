"""
Reads and evaluates one Python form submitted to the REPL.

Evaluation happens inside a persistent module object registered in
`sys.modules`, so names defined at the REPL can be browsed like any other
namespace.
"""
import ast
import builtins
import html
import logging
import sys
import traceback
import types
from dataclasses import dataclass
from typing import Any, Literal, Optional

from webrepl.webrepl_capture import capturing
from webrepl.webrepl_printer import HtmlPrinter

logger = logging.getLogger(__name__)


@dataclass
class EvalResult:
    """The outcome of one evaluation.

    `result` is the readable (`repr`) text of `value`, or "" when the
    evaluation failed. `html` is the rendered fragment of `value`.
    Unpacking yields the `(result, out, err)` triple.
    """
    status: Literal['success', 'error']
    value: Any = None
    result: str = ""
    out: str = ""
    err: str = ""
    html: str = ""

    def __iter__(self):
        yield self.result
        yield self.out
        yield self.err


class Evaluator:
    """Parses, compiles and runs source text in a shared REPL namespace."""

    def __init__(self, namespace: str = "user", show_traceback: bool = False,
                 printer: Optional[HtmlPrinter] = None):
        self.show_traceback = show_traceback
        self.printer = printer
        module = sys.modules.get(namespace)
        if not isinstance(module, types.ModuleType):
            module = types.ModuleType(namespace, "Names defined at the web REPL.")
            module.__dict__["__builtins__"] = builtins
            sys.modules[namespace] = module
        self.module = module

    @property
    def namespace(self) -> str:
        return self.module.__name__

    def _read(self, source: str):
        """Compile exactly one statement; expressions keep their value."""
        tree = ast.parse(source, filename="<repl>", mode="exec")
        match tree.body:
            case []:
                raise SyntaxError("empty expression")
            case [ast.Expr(value=expr)]:
                return compile(ast.Expression(body=expr), "<repl>", "eval"), True
            case [_]:
                return compile(tree, "<repl>", "exec"), False
            case _:
                raise SyntaxError(f"expected a single statement, got {len(tree.body)}")

    def _describe(self, e: BaseException) -> str:
        if self.show_traceback:
            return "".join(traceback.format_exception(type(e), e, e.__traceback__))
        return "".join(traceback.format_exception_only(type(e), e))

    def evaluate(self, source: str) -> EvalResult:
        """Evaluate `source`, returning its readable result and captured output.

        Parse and runtime failures are written to the captured error text;
        only KeyboardInterrupt propagates. When the evaluator has a printer,
        the value is rendered to `html` while output is still captured.
        """
        status = 'success'
        value = None
        result = ""
        rendered = ""
        with capturing() as (out, err):
            try:
                code, is_expr = self._read(source)
                value = eval(code, self.module.__dict__)
                if not is_expr:
                    value = None
                result = repr(value)
            except KeyboardInterrupt:
                raise
            except BaseException as e:
                status = 'error'
                value = None
                result = ""
                err.write(self._describe(e))
            rendered = self._render(value, result, err) if status == 'success' else ""
        logger.debug("evaluated %d chars in %s: %s", len(source), self.namespace, status)
        return EvalResult(status=status, value=value, result=result,
                          out=out.getvalue(), err=err.getvalue(), html=rendered)

    def _render(self, value, result: str, err) -> str:
        if self.printer is None:
            return html.escape(result, quote=False)
        try:
            return self.printer.pformat(value)
        except KeyboardInterrupt:
            raise
        except BaseException as e:
            err.write(self._describe(e))
            return html.escape(result, quote=False)


__all__ = [
    "EvalResult",
    "Evaluator",
]
