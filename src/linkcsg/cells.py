"""Cells produced by component builders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from .errors import DuplicateNameError, NotFoundError
from .rules import Rule, serialize, surface_ids, to_rule


@dataclass(frozen=True)
class Cell:
    """A numbered region of one material.

    ``material`` 0 is void.  ``temperature`` is in kelvin; 0 means "use
    the transport code's default".
    """
    number: int
    material: int
    rule: Rule
    temperature: float = 0.0

    def __post_init__(self):
        if self.number <= 0:
            raise ValueError(f'cell number must be positive: {self.number}')
        if self.material < 0:
            raise ValueError(f'material must be non-negative: {self.material}')
        object.__setattr__(self, 'rule', to_rule(self.rule))
        if self.rule is None:
            raise ValueError(f'cell {self.number} has an empty rule')

    @property
    def rule_text(self) -> str:
        return serialize(self.rule)

    @property
    def is_void(self) -> bool:
        return self.material == 0

    def surfaces(self) -> List[int]:
        return sorted(surface_ids(self.rule))

    def to_dict(self) -> Dict[str, Any]:
        return {"number": self.number,
                "material": self.material,
                "temperature": self.temperature,
                "rule": self.rule_text}

    def __str__(self) -> str:
        return f"{self.number} {self.material} {self.rule_text}"


class CellMap:
    """Named groups of cell numbers, e.g. ``"Bolts" -> [10001, 10002]``."""

    def __init__(self):
        self._groups: Dict[str, List[int]] = {}

    def add(self, name: str, number: int) -> None:
        self._groups.setdefault(name, []).append(number)

    def set(self, name: str, numbers) -> None:
        if name in self._groups:
            raise DuplicateNameError(f"cell group '{name}' already exists")
        self._groups[name] = list(numbers)

    def get(self, name: str) -> List[int]:
        try:
            return list(self._groups[name])
        except KeyError:
            raise NotFoundError(f"no cell group '{name}'") from None

    def first(self, name: str) -> int:
        cells = self.get(name)
        if not cells:
            raise NotFoundError(f"cell group '{name}' is empty")
        return cells[0]

    def find(self, name: str) -> Optional[List[int]]:
        cells = self._groups.get(name)
        return None if cells is None else list(cells)

    def names(self) -> List[str]:
        return list(self._groups)

    def __contains__(self, name: str) -> bool:
        return name in self._groups

    def __iter__(self) -> Iterator[str]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def to_dict(self) -> Dict[str, List[int]]:
        return {k: list(v) for k, v in self._groups.items()}
