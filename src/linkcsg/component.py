"""
Component base class and the link-point capability.

A component is built in one fixed sequence by :meth:`Component.create_all`:

1. register with the session (reserve a numeric block, publish the name)
2. ``populate``: read variables
3. ``create_unit_vector``: derive the frame from the parent port, apply
   the frame offset
4. ``create_surfaces``
5. ``create_objects``: combine surfaces into cells
6. ``create_links``: publish the link points

Subclasses override steps 2 and 4-6.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Union

from .cells import Cell, CellMap
from .errors import NotFoundError, RegistrationError
from .frame import CoordinateFrame, FrameOffset, LinkView, create_frame, derive_frame
from .surfaces import SurfaceMap

logger = logging.getLogger(__name__)

__all__ = ["LinkPointProvider", "Component"]


class LinkPointProvider(ABC):
    """Capability: anything with a frame whose ports others may attach to."""

    @property
    @abstractmethod
    def frame(self) -> CoordinateFrame:
        pass

    def query_link_point(self, signed_index: int) -> LinkView:
        return self.frame.query_link_point(signed_index)


ParentLike = Union[None, str, CoordinateFrame, LinkPointProvider]


class Component(LinkPointProvider):
    """Base class for everything placed in a model."""

    #: number of link points the frame is created with
    n_links: int = 0

    def __init__(self, key_name: str):
        if not key_name:
            raise ValueError('component key name must be non-empty')
        self.key_name = key_name
        self.offset = FrameOffset()
        self.cells: List[Cell] = []
        self.cell_map = CellMap()
        self.session = None
        self.smap: Optional[SurfaceMap] = None
        self.cell_index: Optional[int] = None
        self._frame: Optional[CoordinateFrame] = None
        self._cell_limit: Optional[int] = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}('{self.key_name}')"

    @property
    def frame(self) -> CoordinateFrame:
        if self._frame is None:
            raise RegistrationError(f"'{self.key_name}' has no frame; call create_all first")
        return self._frame

    @frame.setter
    def frame(self, value: CoordinateFrame) -> None:
        self._frame = value

    @property
    def is_built(self) -> bool:
        return self._frame is not None

    # ------------------------------------------------------------------
    # build sequence
    # ------------------------------------------------------------------

    def create_all(self, session, parent: ParentLike = None, side_index: int = 0) -> "Component":
        """Run the whole build sequence inside ``session.build_scope``."""
        with session.build_scope(self.key_name):
            self.attach_session(session)
            self.populate(session.variables)
            self.create_unit_vector(self.resolve_parent(parent), side_index)
            self.create_surfaces()
            self.create_objects()
            self.create_links()
            logger.info("built %s: %d cell(s), %d surface(s)",
                        self.key_name, len(self.cells), len(list(self.smap.items())))
        return self

    def attach_session(self, session) -> None:
        base = session.register(self)
        self.session = session
        self.smap = SurfaceMap(session.surfaces, self.key_name)
        self.cell_index = base + 1
        self._cell_limit = session.surfaces.entry(self.key_name).last

    def resolve_parent(self, parent: ParentLike) -> Optional[CoordinateFrame]:
        if parent is None or isinstance(parent, CoordinateFrame):
            return parent
        if isinstance(parent, str):
            return self.session.objects.get_as(parent, LinkPointProvider).frame
        if isinstance(parent, LinkPointProvider):
            return parent.frame
        raise TypeError(f'cannot attach {self.key_name} to {parent!r}')

    def populate(self, variables) -> None:
        """Read the frame offset; subclasses read their dimensions too."""
        self.offset = FrameOffset.from_variables(variables, self.key_name)

    def create_unit_vector(self, parent: Optional[CoordinateFrame], side_index: int = 0) -> None:
        if parent is None:
            frame = create_frame((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0), self.n_links)
        else:
            frame = derive_frame(parent, side_index, self.n_links)
        self.frame = frame.apply_offset(self.offset)

    def create_surfaces(self) -> None:
        pass

    def create_objects(self) -> None:
        pass

    def create_links(self) -> None:
        pass

    # ------------------------------------------------------------------
    # cells
    # ------------------------------------------------------------------

    def next_cell(self) -> int:
        if self.cell_index is None:
            raise RegistrationError(f"'{self.key_name}' adds cells before reserving a block")
        if self.cell_index > self._cell_limit:
            raise RegistrationError(f"'{self.key_name}' has run out of cell numbers")
        number = self.cell_index
        self.cell_index += 1
        return number

    def add_cell(self, group: str, material: int, rule, temperature: float = 0.0) -> Cell:
        """Create the next numbered cell and file it under ``group``."""
        cell = Cell(self.next_cell(), material, rule, temperature)
        self.add_cells(group, [cell])
        return cell

    def add_cells(self, group: str, cells: Iterable[Cell]) -> None:
        for cell in cells:
            self.cells.append(cell)
            self.cell_map.add(group, cell.number)
            logger.debug("%s: cell %s", self.key_name, cell)

    def cell(self, number: int) -> Cell:
        for c in self.cells:
            if c.number == number:
                return c
        raise NotFoundError(f"'{self.key_name}' has no cell {number}")

    def group_cells(self, group: str) -> List[Cell]:
        return [self.cell(n) for n in self.cell_map.get(group)]
