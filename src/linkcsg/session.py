"""
Build session: the registries and variables shared by one model build.

A session replaces process-wide registries.  Independent builds use
independent sessions; :meth:`Session.reset` clears one in place::

    session = Session(VariableStore.from_yaml("model.yaml"))
    block = ShieldBlock("Block").create_all(session)
    flange = BoltedFlange("Flange").create_all(session, "Block", 2)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from .cells import Cell
from .component import Component, LinkPointProvider
from .frame import LinkView
from .registry import DEFAULT_FIRST_BASE, ObjectRegistry, SurfaceRegistry
from .variables import VariableStore

logger = logging.getLogger(__name__)

__all__ = ["Session"]


class Session:
    """Registries, variables and built components of one model."""

    def __init__(self, variables: Optional[VariableStore] = None,
                 block_size: Optional[int] = None,
                 first_base: int = DEFAULT_FIRST_BASE):
        self.variables = variables if variables is not None else VariableStore()
        self.surfaces = SurfaceRegistry(block_size, first_base)
        self.objects = ObjectRegistry(self.surfaces)
        self._components: List[Component] = []
        self._active: List[str] = []
        self._failed: Optional[str] = None

    # ------------------------------------------------------------------
    # registration
    # ------------------------------------------------------------------

    def register(self, component: Component) -> int:
        """Reserve a block for ``component`` and publish it; returns the base."""
        name = component.key_name
        base = self.objects.cell(name)
        self.objects.add_object(name, component)
        self._components.append(component)
        return base

    def component(self, name: str) -> Component:
        return self.objects.get_as(name, Component)

    def components(self) -> List[Component]:
        """Built components in registration order."""
        return list(self._components)

    def __iter__(self) -> Iterator[Component]:
        return iter(self.components())

    def __len__(self) -> int:
        return len(self._components)

    def cells(self) -> List[Cell]:
        """Every cell of every component, sorted by number."""
        return sorted((c for comp in self._components for c in comp.cells),
                      key=lambda c: c.number)

    def get_link_point(self, name: str, signed_index: int) -> LinkView:
        """Port ``signed_index`` of the component registered as ``name``."""
        return self.objects.get_as(name, LinkPointProvider).query_link_point(signed_index)

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    @property
    def active_component(self) -> Optional[str]:
        """Name of the innermost component being built, if any."""
        return self._active[-1] if self._active else None

    @contextmanager
    def build_scope(self, name: str):
        """Run one component build.

        On any exception the outermost scope logs the component that
        failed, resets the session and re-raises, so no partial model
        survives.  Nested scopes (sub-component builds) only pass the
        exception on.
        """
        self._active.append(name)
        try:
            yield self
        except Exception:
            if self._failed is None:
                self._failed = name
            if len(self._active) == 1:
                logger.error("build failed in component '%s'; resetting session", self._failed)
                self.reset()
            raise
        finally:
            self._active.pop()

    def reset(self) -> None:
        """Forget every reservation, surface and component."""
        self.surfaces.reset()
        self.objects.reset()
        self._components.clear()
        self._failed = None
        logger.debug("session reset")
