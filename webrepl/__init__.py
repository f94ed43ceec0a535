from webrepl.webrepl_capture import CaptureResult, capture_output, capturing
from webrepl.webrepl_evaluator import EvalResult, Evaluator
from webrepl.webrepl_history import HistoryLog, HistoryRecord
from webrepl.webrepl_reflection import (
    ModuleReflection, NamespaceNotFound, NotFound, ReflectionProvider,
    SymbolDescriptor, SymbolNotFound,
)
from webrepl.webrepl_printer import HtmlPrinter, ns_uri, var_uri
from webrepl.webrepl_browser import NamespaceBrowser
from webrepl.webrepl_session import ReplSession
from webrepl.webrepl_config import ConfigError, ReplConfig, load_config
from webrepl.webrepl_server import create_app

__all__ = [
    "CaptureResult",
    "ConfigError",
    "EvalResult",
    "Evaluator",
    "HistoryLog",
    "HistoryRecord",
    "HtmlPrinter",
    "ModuleReflection",
    "NamespaceBrowser",
    "NamespaceNotFound",
    "NotFound",
    "ReflectionProvider",
    "ReplConfig",
    "ReplSession",
    "SymbolDescriptor",
    "SymbolNotFound",
    "capture_output",
    "capturing",
    "create_app",
    "load_config",
    "ns_uri",
    "var_uri",
]
