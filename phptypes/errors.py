"""
phptypes/errors.py
==================

Error taxonomy for type reconstruction.

Hierarchy::

    PhpTypesError (base)
    ├── InvalidDeclaration    - malformed textual type declaration
    ├── UnsupportedLiteral    - literal value with no primitive type
    ├── StructuralTypeError   - invalid compound Type construction
    ├── UnhandledOperation    - op kind with no transfer rule
    └── ReconstructionError   - unexpected failure inside a transfer rule

Only ``InvalidDeclaration`` is ever recovered locally (``Type.from_decl``
falls back to ``mixed``).  Everything else indicates a contract violation
by a caller or by the program-graph provider and propagates.

Error codes follow the pattern ``PHPT-NNNN``:
  - 1000-1999: declaration syntax
  - 2000-2999: type construction
  - 3000-3999: reconstruction
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Any, Optional


@unique
class ErrorCategory(Enum):
    """Coarse categories for filtering and statistics."""

    SYNTAX = "syntax"
    TYPE = "type"
    RECONSTRUCTION = "reconstruction"


class ErrorCode:
    """Structured error code (``PHPT-NNNN``)."""

    __slots__ = ("prefix", "number", "category")

    def __init__(self, prefix: str, number: int, category: ErrorCategory) -> None:
        self.prefix = prefix
        self.number = number
        self.category = category

    @property
    def code(self) -> str:
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.category.name})"

    def __hash__(self) -> int:
        return hash((self.prefix, self.number))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.prefix == other.prefix and self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class ErrorCodes:
    """Predefined error codes."""

    INVALID_DECLARATION = ErrorCode("PHPT", 1001, ErrorCategory.SYNTAX)
    UNSUPPORTED_LITERAL = ErrorCode("PHPT", 2001, ErrorCategory.TYPE)
    STRUCTURAL_TYPE = ErrorCode("PHPT", 2002, ErrorCategory.TYPE)
    UNHANDLED_OPERATION = ErrorCode("PHPT", 3001, ErrorCategory.RECONSTRUCTION)
    RECONSTRUCTION = ErrorCode("PHPT", 3002, ErrorCategory.RECONSTRUCTION)


class PhpTypesError(Exception):
    """Base exception for all phptypes errors."""

    default_code: ErrorCode = ErrorCodes.RECONSTRUCTION

    def __init__(self, message: str, code: Optional[ErrorCode] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InvalidDeclaration(PhpTypesError):
    """Malformed textual type declaration."""

    default_code = ErrorCodes.INVALID_DECLARATION

    def __init__(self, decl: Any, reason: str = "") -> None:
        message = f"Invalid type declaration {decl!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.decl = decl


class UnsupportedLiteral(PhpTypesError):
    """A literal value whose kind has no primitive type."""

    default_code = ErrorCodes.UNSUPPORTED_LITERAL

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Unknown value type found: {type(value).__name__} ({value!r})"
        )
        self.value = value


class StructuralTypeError(PhpTypesError):
    """Attempt to construct a structurally invalid Type."""

    default_code = ErrorCodes.STRUCTURAL_TYPE


class UnhandledOperation(PhpTypesError):
    """An operation kind for which no transfer rule exists."""

    default_code = ErrorCodes.UNHANDLED_OPERATION

    def __init__(self, kind: Any, location: str = "") -> None:
        message = f"Unknown variable op found: {kind}"
        if location:
            message += f" at {location}"
        super().__init__(message)
        self.kind = kind
        self.location = location


class ReconstructionError(PhpTypesError):
    """Unexpected failure while evaluating a transfer rule."""

    default_code = ErrorCodes.RECONSTRUCTION

    def __init__(self, kind: Any, location: str, cause: BaseException) -> None:
        super().__init__(
            f"Exception raised while handling op {kind}@{location}: {cause}"
        )
        self.kind = kind
        self.location = location
        self.cause = cause
