"""Exception taxonomy for the linkCSG kernel.

Every error is raised where the violation is detected and propagates
unrecovered; a partial CSG model cannot be patched safely.  Each class
also derives from the closest builtin so callers may catch either the
kernel type or the familiar Python one.
"""

from typing import Any, Optional


class LinkCSGError(Exception):
    """Base exception for all kernel errors."""
    pass


class LinkIndexError(LinkCSGError, IndexError):
    """A link point or port index is outside the owner's range."""

    def __init__(self, index: int, size: int, context: str = ""):
        self.index = index
        self.size = size
        self.context = context
        message = f"index {index} out of range for {size} link point(s)"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)


class DuplicateNameError(LinkCSGError, ValueError):
    """A component name (or surface id) was registered twice."""
    pass


class NotFoundError(LinkCSGError, LookupError):
    """No component is registered under the requested name."""
    pass


class CapabilityError(LinkCSGError, TypeError):
    """A registered component does not provide the requested capability."""
    pass


class DegenerateGeometryError(LinkCSGError, ValueError):
    """Axes are parallel or zero length, so no basis can be built."""
    pass


class IncompleteLinkError(LinkCSGError, ValueError):
    """A link point is missing the field an operation needs."""
    pass


class MissingVariableError(LinkCSGError, LookupError):
    """A required variable is absent from the variable store."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"variable '{name}' is not defined")

    def __str__(self) -> str:
        return self.args[0]


class RegistrationError(LinkCSGError, RuntimeError):
    """A component emitted a surface before reserving its numeric block."""
    pass


class RuleSyntaxError(LinkCSGError, SyntaxError):
    """Rule text could not be parsed.

    ``diagnostic`` holds the code, location and hints; ``str()`` gives the
    formatted report with a caret under the offending column.
    """

    def __init__(self, diagnostic: Any):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    @property
    def column(self) -> Optional[int]:
        return self.diagnostic.location.column

    def __str__(self) -> str:
        return self.diagnostic.format()
