"""
Date: 2026-10-18
Description:
Container flavors and the registry that picks one for a declared kind.

A kind is either a registered tag ("default", "ordered", "sorted", "weak",
"concurrent" or anything added with register_container) or a mapping type,
resolved by compatibility in a fixed order.
"""

import logging
import threading
import weakref
from bisect import bisect_left, insort
from collections import OrderedDict
from collections.abc import Mapping, MutableMapping
from typing import Callable, Dict, Iterator, Optional, get_origin

from dotbinder.exceptions import UnsupportedContainerKind
from dotbinder.parameters import ContainerKind

logger = logging.getLogger(__name__)

ContainerFactory = Callable[[], MutableMapping]


class SortedNode(MutableMapping):
    """Mapping that iterates its keys in natural order."""

    def __init__(self, *args, **kwargs):
        self._data = {}
        self._keys = []
        self.update(*args, **kwargs)

    def __getitem__(self, key):
        return self._data[key]

    def __setitem__(self, key, value):
        if key not in self._data:
            insort(self._keys, key)
        self._data[key] = value

    def __delitem__(self, key):
        del self._data[key]
        self._keys.pop(bisect_left(self._keys, key))

    def __iter__(self) -> Iterator:
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


class WeakValueNode(MutableMapping):
    """
    Mapping that holds its values weakly where Python allows it.

    Weakly referenceable values disappear once nothing else refers to them.
    Nested mappings are held strongly so a bound subtree survives the merge.
    Strings, numbers and the other builtin scalars cannot be weakly referenced
    and are held strongly too.
    """

    def __init__(self):
        self._data = {}

    def __setitem__(self, key, value):
        if isinstance(value, Mapping):
            self._data[key] = (False, value)
            return
        try:
            self._data[key] = (True, weakref.ref(value))
        except TypeError:
            self._data[key] = (False, value)

    def _alive(self, key) -> bool:
        weak, held = self._data[key]
        return not weak or held() is not None

    def __getitem__(self, key):
        weak, held = self._data[key]
        if not weak:
            return held
        value = held()
        if value is None:
            del self._data[key]
            raise KeyError(key)
        return value

    def __delitem__(self, key):
        del self._data[key]

    def __iter__(self) -> Iterator:
        return (key for key in list(self._data) if self._alive(key))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


class ConcurrentNode(MutableMapping):
    """Mapping whose operations are guarded by a re-entrant lock, shared through `lock`."""

    def __init__(self):
        self._data = {}
        self.lock = threading.RLock()

    def __getitem__(self, key):
        with self.lock:
            return self._data[key]

    def __setitem__(self, key, value):
        with self.lock:
            self._data[key] = value

    def __delitem__(self, key):
        with self.lock:
            del self._data[key]

    def __iter__(self) -> Iterator:
        with self.lock:
            return iter(list(self._data))

    def __len__(self) -> int:
        with self.lock:
            return len(self._data)

    def setdefault(self, key, default=None):
        with self.lock:
            return self._data.setdefault(key, default)

    def __repr__(self) -> str:
        with self.lock:
            return f"{type(self).__name__}({self._data!r})"


_container_factories: Dict[ContainerKind, ContainerFactory] = {
    "default": dict,
    "ordered": OrderedDict,
    "weak": WeakValueNode,
    "sorted": SortedNode,
    "concurrent": ConcurrentNode,
}

_BUILTIN_KINDS = frozenset(_container_factories)

# checked in order after the ordered/default rules
_FLAVOR_TYPES = (
    ("weak", WeakValueNode),
    ("sorted", SortedNode),
    ("concurrent", ConcurrentNode),
)


def unparameterized(kind):
    """Strip type parameters from *kind*: dict[str, object] → dict."""
    origin = get_origin(kind)
    return kind if origin is None else origin


def is_mapping_kind(kind) -> bool:
    """Is *kind* something a container could be selected for (a tag or a Mapping type)?"""
    kind = unparameterized(kind)
    if isinstance(kind, str):
        return True
    return isinstance(kind, type) and issubclass(kind, Mapping)


def register_container(kind: ContainerKind, factory: ContainerFactory) -> None:
    """
    Register *factory* for *kind* (a tag or a mapping type).
    Args:
        kind (ContainerKind): Tag or Mapping subtype.
        factory (ContainerFactory): Zero-argument callable returning an empty MutableMapping.
    Raises:
        UnsupportedContainerKind: If *kind* is not a mapping kind or is a builtin tag.
    """
    kind = unparameterized(kind)
    if not is_mapping_kind(kind):
        logger.error("Refusing to register non-mapping kind %s", kind)
        raise UnsupportedContainerKind(f"{kind!r} is not a mapping kind")
    if kind in _BUILTIN_KINDS:
        raise UnsupportedContainerKind(f"Builtin container kind '{kind}' cannot be replaced")
    _container_factories[kind] = factory
    logger.info("Container kind %r registered", kind)


def unregister_container(kind: ContainerKind) -> None:
    kind = unparameterized(kind)
    if kind in _BUILTIN_KINDS:
        raise UnsupportedContainerKind(f"Builtin container kind '{kind}' cannot be removed")
    _container_factories.pop(kind, None)


def resolve_kind(kind: ContainerKind) -> Optional[ContainerKind]:
    """
    Resolve a declared kind to its registry key.
    Returns:
        Optional[ContainerKind]: The registry key, or None when *kind* is not a mapping kind.
    Raises:
        UnsupportedContainerKind: If *kind* is a mapping kind with nothing registered for it.
    """
    kind = unparameterized(kind)
    if not is_mapping_kind(kind):
        logger.debug("Kind %r is not a mapping kind", kind)
        return None
    if isinstance(kind, str):
        if kind not in _container_factories:
            raise UnsupportedContainerKind(f"Unknown container kind '{kind}'")
        return kind

    if issubclass(OrderedDict, kind) and not issubclass(dict, kind):
        return "ordered"
    if issubclass(dict, kind):
        return "default"
    for tag, flavor in _FLAVOR_TYPES:
        if issubclass(flavor, kind):
            return tag
    if kind in _container_factories:
        return kind
    raise UnsupportedContainerKind(f"No container registered for {kind.__name__}")


def container_for(kind: ContainerKind) -> Optional[MutableMapping]:
    """
    Return a fresh, empty container of the flavor *kind* declares.
    Returns:
        Optional[MutableMapping]: The container, or None when *kind* is not a mapping kind.
    Raises:
        UnsupportedContainerKind: If nothing is registered for *kind* or the
        registered factory does not build a mutable mapping.
    """
    key = resolve_kind(kind)
    if key is None:
        return None
    container = _container_factories[key]()
    if not isinstance(container, MutableMapping):
        logger.error("Factory for %r built %s", kind, type(container).__name__)
        raise UnsupportedContainerKind(
            f"Factory for {kind!r} built {type(container).__name__}, not a mutable mapping"
        )
    return container
