"""Named variable store consumed by component builders.

Builders read every dimension they need by name, usually as the
component's key name followed by a parameter suffix::

    radius = store.eval_variable("FlangeRadius")
    nbolts = store.eval_default("FlangeNBolts", 8)
    mat = store.eval_pair("FlangeA", "Flange", "BoltMat")

Variables may be loaded from YAML.  Nested mappings are flattened by
concatenating keys, so these two files are equivalent::

    FlangeRadius: 12.0          Flange:
    FlangeNBolts: 8               Radius: 12.0
                                  NBolts: 8
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Union

import yaml

from .errors import MissingVariableError

logger = logging.getLogger(__name__)

__all__ = ["VariableStore", "load_variables"]

_MISSING = object()


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Iterator[tuple]:
    for key, value in data.items():
        if not isinstance(key, str):
            raise ValueError(f"variable names must be strings, got {key!r}")
        name = prefix + key
        if isinstance(value, Mapping):
            yield from _flatten(value, name)
        else:
            yield name, value


class VariableStore:
    """Flat name -> value mapping with the lookup helpers builders use."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: Dict[str, Any] = {}
        if values:
            self.update(values)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "VariableStore":
        if not isinstance(data, Mapping):
            raise ValueError(f"expected a mapping of variables, got {type(data).__name__}")
        return cls(data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "VariableStore":
        """Load variables from a YAML file whose root is a mapping."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid variable file {path}: expected dict at root")

        store = cls(data)
        logger.info("loaded %d variable(s) from %s", len(store), path)
        return store

    def update(self, values: Mapping[str, Any]) -> None:
        """Merge ``values`` (nested mappings are flattened)."""
        for name, value in _flatten(values):
            self._values[name] = value

    def set_variable(self, name: str, value: Any) -> None:
        self._values[name] = value

    def has_variable(self, name: str) -> bool:
        return name in self._values

    def remove_variable(self, name: str) -> None:
        self._values.pop(name, None)

    def eval_variable(self, name: str, cast: Optional[Callable[[Any], Any]] = None) -> Any:
        """Value of ``name``; MissingVariableError if undefined.

        ``cast`` (e.g. ``float`` or ``int``) converts the stored value.
        """
        try:
            value = self._values[name]
        except KeyError:
            raise MissingVariableError(name) from None
        return cast(value) if cast is not None else value

    def eval_default(self, name: str, default: Any,
                     cast: Optional[Callable[[Any], Any]] = None) -> Any:
        """Value of ``name`` or ``default`` if undefined."""
        value = self._values.get(name, _MISSING)
        if value is _MISSING:
            return default
        return cast(value) if cast is not None else value

    def eval_pair(self, key_a: str, key_b: str, suffix: str = "",
                  cast: Optional[Callable[[Any], Any]] = None) -> Any:
        """First defined of ``key_a + suffix`` and ``key_b + suffix``.

        Lets a specialised component fall back on the values of the
        generic one it was copied from.
        """
        for name in (key_a + suffix, key_b + suffix):
            if name in self._values:
                return self.eval_variable(name, cast)
        raise MissingVariableError(key_a + suffix)

    def eval_vector(self, name: str) -> List[float]:
        """Three-component vector variable."""
        value = self.eval_variable(name)
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise ValueError(f"variable '{name}' is not a vector: {value!r}")
        out = [float(v) for v in value]
        if len(out) != 3:
            raise ValueError(f"variable '{name}' must have 3 components, got {len(out)}")
        return out

    def populate_divide(self, n: int, name: str) -> List[float]:
        """Cumulative boundary fractions for an ``n``-way subdivision.

        Returns ``n - 1`` values read from ``name1`` .. ``name{n-1}``.  A
        missing value defaults to splitting what is left after the previous
        boundary evenly, so with nothing defined the result is
        ``[1/n, 2/n, ...]``.
        """
        out: List[float] = []
        if n <= 0:
            return out
        frac = 1.0 / n
        for i in range(1, n):
            value = float(self.eval_default(f"{name}{i}", frac))
            out.append(value)
            frac = ((n - i - 1.0) * value + 1.0) / (n - i)
        return out

    def populate_values(self, n: int, name: str, default: Any) -> List[Any]:
        """Values ``name0`` .. ``name{n-1}``; each missing one repeats the previous."""
        out = []
        value = default
        for i in range(n):
            value = self.eval_default(f"{name}{i}", value)
            out.append(value)
        return out

    def copy_prefix(self, old: str, new: str) -> int:
        """Duplicate every ``old*`` variable as ``new*``; returns the count."""
        copied = {new + k[len(old):]: v for k, v in self._values.items() if k.startswith(old)}
        self._values.update(copied)
        return len(copied)

    def names(self) -> List[str]:
        return sorted(self._values)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, name: str) -> bool:
        return name in self._values


def load_variables(path: Union[str, Path]) -> VariableStore:
    """Shorthand for :meth:`VariableStore.from_yaml`."""
    return VariableStore.from_yaml(path)
