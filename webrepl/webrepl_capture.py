"""
Per-evaluation capture of standard output and standard error.

`sys.stdout` and `sys.stderr` are process globals, so redirecting them with
a plain swap would mix the text of concurrent evaluations. Instead, while
any capture is active the two streams are replaced by routing proxies that
forward each write to the sink pair bound in the current context (thread or
task), or to the original stream when the context has none.
"""
import io
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

_sinks: ContextVar[Optional[Tuple[io.StringIO, io.StringIO]]] = ContextVar("webrepl_sinks", default=None)

_install_lock = threading.Lock()
_install_count = 0
_saved_streams: Optional[Tuple[Any, Any]] = None


class _RoutingStream:
    """A file-like object that writes to the active sink for this context."""

    def __init__(self, index: int, fallback):
        self._index = index
        self._fallback = fallback

    def _target(self):
        pair = _sinks.get()
        if pair is None:
            return self._fallback
        return pair[self._index]

    def write(self, text):
        return self._target().write(text)

    def writelines(self, lines):
        target = self._target()
        for line in lines:
            target.write(line)

    def flush(self):
        flush = getattr(self._target(), "flush", None)
        if flush is not None:
            flush()

    def isatty(self):
        return False

    def __getattr__(self, name):
        return getattr(self._target(), name)


def _install():
    global _install_count, _saved_streams
    with _install_lock:
        if _install_count == 0:
            _saved_streams = (sys.stdout, sys.stderr)
            sys.stdout = _RoutingStream(0, _saved_streams[0])
            sys.stderr = _RoutingStream(1, _saved_streams[1])
        _install_count += 1


def _uninstall():
    global _install_count, _saved_streams
    with _install_lock:
        _install_count -= 1
        if _install_count == 0:
            sys.stdout, sys.stderr = _saved_streams
            _saved_streams = None


@contextmanager
def capturing():
    """Bind a fresh (out, err) pair of StringIO sinks for the current context.

    The previous streams are restored on every exit path. Nested use on one
    thread is fine: the inner block gets its own pair and the outer pair is
    back in effect when it ends.
    """
    pair = (io.StringIO(), io.StringIO())
    _install()
    token = _sinks.set(pair)
    try:
        yield pair
    finally:
        _sinks.reset(token)
        _uninstall()


@dataclass
class CaptureResult:
    """What one captured action produced."""
    value: Any = None
    error: Optional[BaseException] = None
    out: str = ""
    err: str = ""


def capture_output(action: Callable[[], Any]) -> CaptureResult:
    """Run `action` with its output captured.

    An `Exception` raised by the action is returned in `error` rather than
    propagated; the text written before the failure is kept.
    """
    value = None
    error = None
    with capturing() as (out, err):
        try:
            value = action()
        except Exception as e:
            error = e
    return CaptureResult(value=value, error=error, out=out.getvalue(), err=err.getvalue())


__all__ = [
    "CaptureResult",
    "capture_output",
    "capturing",
]
