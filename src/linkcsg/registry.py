"""Session directories for component names, surface ids and objects.

:class:`SurfaceRegistry` hands every component a contiguous block of
surface (and cell) numbers in order of registration, so the same build
sequence always produces the same ids.  :class:`ObjectRegistry` maps the
same names to weak handles on the built components so one component
can look up another's link points without owning it.
"""

from __future__ import annotations

import logging
import os
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Type, TypeVar

from .errors import (
    CapabilityError,
    DuplicateNameError,
    NotFoundError,
    RegistrationError,
)

logger = logging.getLogger(__name__)

__all__ = [
    "LINKCSG_BLOCK_SIZE",
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_FIRST_BASE",
    "RegistryEntry",
    "SurfaceRegistry",
    "ObjectRegistry",
]

# Environment variable overriding the default block size
LINKCSG_BLOCK_SIZE = "LINKCSG_BLOCK_SIZE"

DEFAULT_BLOCK_SIZE = 10000
DEFAULT_FIRST_BASE = 10000

T = TypeVar("T")


def default_block_size() -> int:
    """Block size from ``$LINKCSG_BLOCK_SIZE`` or :data:`DEFAULT_BLOCK_SIZE`."""
    raw = os.environ.get(LINKCSG_BLOCK_SIZE)
    if not raw:
        return DEFAULT_BLOCK_SIZE
    try:
        size = int(raw)
    except ValueError:
        raise ValueError(f"{LINKCSG_BLOCK_SIZE} must be an integer, got '{raw}'") from None
    if size <= 0:
        raise ValueError(f"{LINKCSG_BLOCK_SIZE} must be positive, got {size}")
    return size


@dataclass(frozen=True)
class RegistryEntry:
    """One reserved block: ids ``base .. base + count - 1``.

    Cells share the surface number space; the first cell of a component
    is ``cell_base``.
    """
    name: str
    base: int
    count: int

    @property
    def cell_base(self) -> int:
        return self.base

    @property
    def last(self) -> int:
        return self.base + self.count - 1

    def contains(self, number: int) -> bool:
        return self.base <= number <= self.last


class SurfaceRegistry:
    """Reserves numeric blocks and records the surfaces built inside them."""

    def __init__(self, block_size: Optional[int] = None,
                 first_base: int = DEFAULT_FIRST_BASE):
        if block_size is None:
            block_size = default_block_size()
        if block_size <= 0:
            raise ValueError(f'block size must be positive: {block_size}')
        if first_base <= 0:
            raise ValueError(f'first base must be positive: {first_base}')
        self.block_size = block_size
        self.first_base = first_base
        self._entries: Dict[str, RegistryEntry] = {}
        self._surfaces: Dict[int, Tuple[str, Any]] = {}
        self._next_base = first_base

    def reserve(self, name: str, count: Optional[int] = None) -> int:
        """Reserve a block for ``name`` and return its base.

        ``count`` defaults to the registry's block size; larger requests
        are rounded up to a whole number of blocks so later bases stay
        aligned.
        """
        if not name:
            raise ValueError('component name must be non-empty')
        if name in self._entries:
            raise DuplicateNameError(f"'{name}' already has a reserved block")
        if count is None:
            count = self.block_size
        if count <= 0:
            raise ValueError(f'reserved count must be positive: {count}')
        blocks = -(-count // self.block_size)
        entry = RegistryEntry(name, self._next_base, blocks * self.block_size)
        self._entries[name] = entry
        self._next_base += entry.count
        logger.debug("reserved %s: %d..%d", name, entry.base, entry.last)
        return entry.base

    def is_reserved(self, name: str) -> bool:
        return name in self._entries

    def entry(self, name: str) -> RegistryEntry:
        try:
            return self._entries[name]
        except KeyError:
            raise NotFoundError(f"no block reserved for '{name}'") from None

    def base_of(self, name: str) -> int:
        return self.entry(name).base

    def owner_of(self, number: int) -> Optional[str]:
        """Name whose block contains ``|number|``, or None."""
        n = abs(number)
        for entry in self._entries.values():
            if entry.contains(n):
                return entry.name
        return None

    def entries(self) -> List[RegistryEntry]:
        """Reserved blocks in registration order."""
        return list(self._entries.values())

    def add_surface(self, name: str, number: int, surface: Any) -> None:
        """Record ``surface`` as id ``number`` inside ``name``'s block."""
        if name not in self._entries:
            raise RegistrationError(
                f"'{name}' emitted surface {number} before reserving a block")
        entry = self._entries[name]
        if not entry.contains(number):
            raise RegistrationError(
                f"surface {number} is outside the block {entry.base}..{entry.last} of '{name}'")
        if number in self._surfaces:
            raise DuplicateNameError(
                f"surface {number} already defined by '{self._surfaces[number][0]}'")
        self._surfaces[number] = (name, surface)

    def has_surface(self, number: int) -> bool:
        return abs(number) in self._surfaces

    def surface(self, number: int) -> Any:
        try:
            return self._surfaces[abs(number)][1]
        except KeyError:
            raise NotFoundError(f"surface {abs(number)} is not defined") from None

    def definitions(self) -> List[Tuple[int, Any]]:
        """All (id, surface) pairs sorted by id."""
        return [(n, s) for n, (_, s) in sorted(self._surfaces.items())]

    def sense(self, point) -> Callable[[int], bool]:
        """Point-sense callback for :func:`linkcsg.rules.evaluate`."""
        def _sense(number: int) -> bool:
            return self.surface(number).side(point)
        return _sense

    def reset(self) -> None:
        self._entries.clear()
        self._surfaces.clear()
        self._next_base = self.first_base

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries


class ObjectRegistry:
    """Weak name -> component directory.

    The registry never keeps a component alive; once the last strong
    reference goes, lookups report it as missing.
    """

    def __init__(self, surfaces: SurfaceRegistry):
        self.surfaces = surfaces
        self._objects: Dict[str, weakref.ref] = {}

    def cell(self, name: str, count: Optional[int] = None) -> int:
        """Reserve a block for ``name`` and return its cell base."""
        self.surfaces.reserve(name, count)
        return self.surfaces.entry(name).cell_base

    def add_object(self, name: str, component: Any) -> None:
        if not self.surfaces.is_reserved(name):
            raise RegistrationError(f"'{name}' must reserve a block before it is registered")
        if name in self._objects and self._objects[name]() is not None:
            raise DuplicateNameError(f"component '{name}' is already registered")
        self._objects[name] = weakref.ref(component)

    def get(self, name: str) -> Any:
        ref = self._objects.get(name)
        obj = ref() if ref is not None else None
        if obj is None:
            raise NotFoundError(f"no component registered as '{name}'")
        return obj

    def get_as(self, name: str, capability: Type[T]) -> T:
        """Look up ``name`` and require it to provide ``capability``."""
        obj = self.get(name)
        if not isinstance(obj, capability):
            raise CapabilityError(
                f"component '{name}' ({type(obj).__name__}) "
                f"does not provide {capability.__name__}")
        return obj

    def find_as(self, name: str, capability: Type[T]) -> Optional[T]:
        """Like :meth:`get_as` but returns None on a miss or wrong type."""
        ref = self._objects.get(name)
        obj = ref() if ref is not None else None
        if obj is None or not isinstance(obj, capability):
            return None
        return obj

    def has_object(self, name: str) -> bool:
        ref = self._objects.get(name)
        return ref is not None and ref() is not None

    def names(self) -> List[str]:
        """Names of live components in registration order."""
        return [n for n, ref in self._objects.items() if ref() is not None]

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def reset(self) -> None:
        self._objects.clear()
