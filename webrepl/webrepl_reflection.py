"""
Reflection over the modules loaded in this process.

`ReflectionProvider` is the narrow interface the browser and the printer
depend on; `ModuleReflection` answers it from `sys.modules` and `inspect`.
"""
import inspect
import sys
import types
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

_MISSING = object()


class NotFound(LookupError):
    """A namespace or symbol that the browser was asked for does not exist."""

    def __init__(self, namespace: str, name: Optional[str] = None):
        self.namespace = namespace
        self.name = name
        super().__init__(self.describe())

    def describe(self) -> str:
        if self.name is None:
            return f"namespace not found: {self.namespace}"
        return f"symbol not found: {self.namespace}/{self.name}"


class NamespaceNotFound(NotFound):
    def __init__(self, namespace: str):
        super().__init__(namespace)


class SymbolNotFound(NotFound):
    pass


@dataclass(frozen=True)
class SymbolDescriptor:
    """One interned name: where it lives, what is known about it, its source."""
    namespace: str
    name: str
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)
    source: Optional[str] = field(default=None, compare=False)


class ReflectionProvider(ABC):
    """The reflection facilities the browser and printer rely on."""

    @abstractmethod
    def list_namespaces(self) -> List[str]: raise NotImplementedError

    @abstractmethod
    def list_symbols(self, namespace: str) -> List[SymbolDescriptor]: raise NotImplementedError

    @abstractmethod
    def describe_symbol(self, namespace: str, name: str) -> SymbolDescriptor: raise NotImplementedError

    @abstractmethod
    def resolve(self, obj: Any) -> Optional[SymbolDescriptor]:
        """Map a live object to the (namespace, name) it is interned under, if any."""
        raise NotImplementedError


def _has_docs(value) -> bool:
    return inspect.isroutine(value) or inspect.isclass(value) or inspect.ismodule(value)


class ModuleReflection(ReflectionProvider):
    """Namespaces are entries of `sys.modules`; symbols are module attributes.

    Dotted symbol names (`Class.method`) walk attributes from the interned
    name, which is how nested definitions are reached.
    """

    def __init__(self, modules: Optional[Dict[str, Any]] = None):
        self._modules = sys.modules if modules is None else modules

    def _module(self, namespace: str) -> types.ModuleType:
        module = self._modules.get(namespace)
        if not isinstance(module, types.ModuleType):
            raise NamespaceNotFound(namespace)
        return module

    def list_namespaces(self) -> List[str]:
        # Snapshot first: imports on other threads may resize sys.modules.
        items = list(self._modules.items())
        return sorted(str(name) for name, mod in items if isinstance(mod, types.ModuleType))

    def list_symbols(self, namespace: str) -> List[SymbolDescriptor]:
        module = self._module(namespace)
        interned = dict(vars(module))
        return [
            self._descriptor(namespace, module, name, interned[name], with_source=False)
            for name in sorted(interned)
        ]

    def describe_symbol(self, namespace: str, name: str) -> SymbolDescriptor:
        module = self._module(namespace)
        value = self._lookup(module, name)
        if value is _MISSING:
            raise SymbolNotFound(namespace, name)
        return self._descriptor(namespace, module, name, value, with_source=True)

    def resolve(self, obj: Any) -> Optional[SymbolDescriptor]:
        if inspect.ismodule(obj):
            name = obj.__name__
            if self._modules.get(name) is not obj:
                return None
            return SymbolDescriptor(namespace=name, name=name, metadata={"ns": obj})

        target = getattr(obj, "__func__", obj)
        module_name = getattr(target, "__module__", None)
        qualname = getattr(target, "__qualname__", None) or getattr(target, "__name__", None)
        if not isinstance(module_name, str) or not isinstance(qualname, str):
            return None
        if "<" in qualname:
            # <locals>, <lambda>: not reachable by attribute path
            return None
        module = self._modules.get(module_name)
        if not isinstance(module, types.ModuleType):
            return None
        found = self._lookup(module, qualname)
        if getattr(found, "__func__", found) is not target:
            return None
        return SymbolDescriptor(namespace=module_name, name=qualname, metadata={"ns": module})

    def _lookup(self, module: types.ModuleType, name: str):
        head, *rest = name.split(".")
        value = vars(module).get(head, _MISSING)
        for part in rest:
            if value is _MISSING:
                break
            try:
                value = getattr(value, part)
            except Exception:
                value = _MISSING
        return value

    def _descriptor(self, namespace: str, module, name: str, value, *, with_source: bool) -> SymbolDescriptor:
        meta: Dict[str, Any] = {"ns": module, "name": name}
        qualname = getattr(value, "__qualname__", None)
        if _has_docs(value) and isinstance(qualname, str):
            meta["qualname"] = qualname
        meta["type"] = type(value).__name__
        if _has_docs(value):
            doc = inspect.getdoc(value)
            if doc:
                meta["doc"] = doc
        else:
            meta["value"] = _safe_repr(value)
        if callable(value):
            try:
                meta["signature"] = str(inspect.signature(value))
            except (TypeError, ValueError):
                pass

        source = None
        if with_source and _has_docs(value):
            try:
                meta["file"] = inspect.getsourcefile(value) or inspect.getfile(value)
            except TypeError:
                pass
            try:
                lines, lineno = inspect.getsourcelines(value)
            except (OSError, TypeError):
                pass
            else:
                source = "".join(lines)
                if lineno:
                    meta["line"] = lineno
        return SymbolDescriptor(namespace=namespace, name=name, metadata=meta, source=source)


def _safe_repr(value, limit: int = 500) -> str:
    try:
        text = repr(value)
    except Exception as e:
        text = f"<unrepresentable {type(value).__name__}: {e}>"
    if len(text) > limit:
        text = text[:limit] + "..."
    return text


__all__ = [
    "ModuleReflection",
    "NamespaceNotFound",
    "NotFound",
    "ReflectionProvider",
    "SymbolDescriptor",
    "SymbolNotFound",
]
