"""linkCSG: attachment and composition kernel for CSG transport models."""

from importlib.metadata import PackageNotFoundError, version


try:
    __version__ = version("linkCSG")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from .errors import (
    LinkCSGError,
    LinkIndexError,
    DuplicateNameError,
    NotFoundError,
    CapabilityError,
    DegenerateGeometryError,
    IncompleteLinkError,
    MissingVariableError,
    RegistrationError,
    RuleSyntaxError,
)
from .rules import (
    Rule,
    literal,
    intersect,
    unite,
    complement,
    complement_of,
    canonical,
    serialize,
    parse,
    evaluate,
)
from .frame import (
    LinkPoint,
    LinkView,
    FrameOffset,
    CoordinateFrame,
    create_frame,
    derive_frame,
)
from .surfaces import Plane, Cylinder, Sphere, SurfaceMap
from .registry import SurfaceRegistry, ObjectRegistry
from .variables import VariableStore
from .cells import Cell, CellMap
from .component import Component, LinkPointProvider
from .session import Session
from .patterns import RingMaterials, RingResult, bolt_ring
