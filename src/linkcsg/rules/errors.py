"""
Diagnostics for rule text.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import RuleSyntaxError
from .tokens import SourceLocation


@dataclass
class Diagnostic:
    """A single parse diagnostic."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    location: SourceLocation
    source_line: Optional[str] = None   # The rule text being parsed
    width: int = 1                  # Number of columns to underline
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = [f"{self.location}: error[{self.code}]: {self.message}"]

        if show_source and self.source_line is not None:
            parts.append(f"  | {self.source_line}")
            col = self.location.column
            parts.append(f"  | {' ' * (col - 1)}{'^' * max(1, self.width)}")

        for hint in self.hints:
            parts.append(f"  = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        return {
            "code": self.code,
            "message": self.message,
            "column": self.location.column,
            "offset": self.location.offset,
            "hints": self.hints,
        }


def _error(code: str, message: str, location: SourceLocation,
           source_line: Optional[str], width: int = 1,
           hints: Optional[List[str]] = None) -> RuleSyntaxError:
    diag = Diagnostic(
        code=code,
        message=message,
        location=location,
        source_line=source_line,
        width=width,
        hints=hints or [],
    )
    return RuleSyntaxError(diag)


# --- Lexer error codes ---

def error_unexpected_character(char: str, location: SourceLocation,
                               source_line: Optional[str] = None) -> RuleSyntaxError:
    """E001: Unexpected character."""
    return _error("E001", f"unexpected character '{char}'", location, source_line)


def error_non_numeric_literal(text: str, location: SourceLocation,
                              source_line: Optional[str] = None) -> RuleSyntaxError:
    """E002: Surface literal is not an integer."""
    return _error(
        "E002", f"surface literal '{text}' is not an integer",
        location, source_line, width=len(text),
        hints=["surfaces are referenced by signed integer id, e.g. 10003 or -10004"],
    )


def error_dangling_sign(location: SourceLocation,
                        source_line: Optional[str] = None) -> RuleSyntaxError:
    """E003: Sign without digits."""
    return _error("E003", "sign must be followed by a surface number",
                  location, source_line)


# --- Parser error codes ---

def error_unexpected_token(expected: str, found: str, location: SourceLocation,
                           source_line: Optional[str] = None) -> RuleSyntaxError:
    """E101: Unexpected token."""
    return _error("E101", f"expected {expected}, found {found}", location, source_line)


def error_unclosed_paren(location: SourceLocation,
                         source_line: Optional[str] = None) -> RuleSyntaxError:
    """E102: Opening parenthesis never closed."""
    return _error("E102", "unclosed '('", location, source_line,
                  hints=["every '(' needs a matching ')'"])


def error_trailing_tokens(found: str, location: SourceLocation,
                          source_line: Optional[str] = None) -> RuleSyntaxError:
    """E103: Extra input after a complete rule."""
    return _error("E103", f"unexpected {found} after end of rule", location, source_line)


def error_zero_surface(location: SourceLocation,
                       source_line: Optional[str] = None) -> RuleSyntaxError:
    """E104: Surface number zero."""
    return _error("E104", "surface number must be non-zero", location, source_line)


def error_empty_rule(location: SourceLocation,
                     source_line: Optional[str] = None) -> RuleSyntaxError:
    """E105: Nothing to parse."""
    return _error("E105", "empty rule", location, source_line)
