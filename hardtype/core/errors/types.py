"""Monadic Error Handling Types

Result/Either types for generation-time failures. Every engine stage returns
``Result[T, DiagnosticSet]`` so that all problems with a specification surface
together instead of one exception at a time.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generic, Iterable, Iterator, NoReturn, TypeVar, Union, final

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class DiagnosticCode(Enum):
    """Hierarchical diagnostic code taxonomy.

    E1xxx: Malformed specification
    E2xxx: Capability conflicts
    E3xxx: Sanitizer/validator rule errors
    E9xxx: Internal errors
    """
    # Malformed specification (E1xxx)
    E1000_SPEC_MALFORMED = 1000
    E1001_MISSING_FIELD = 1001
    E1002_INVALID_TYPE_NAME = 1002
    E1003_UNKNOWN_INNER_KIND = 1003
    E1004_MISSING_INNER_TYPE = 1004
    E1005_UNKNOWN_CAPABILITY = 1005
    E1006_INVALID_FIELD_VALUE = 1006

    # Capability conflicts (E2xxx)
    E2000_CAPABILITY_GENERIC = 2000
    E2001_MISSING_PREREQUISITE = 2001
    E2002_FORBIDDEN_FOR_INNER_KIND = 2002
    E2003_FORBIDDEN_WITH_VALIDATORS = 2003
    E2004_REQUIRES_VALIDATORS = 2004
    E2005_REQUIRES_DEFAULT_VALUE = 2005
    E2006_FORBIDDEN_WITHOUT_VALIDATOR = 2006

    # Rules (E3xxx)
    E3000_RULE_GENERIC = 3000
    E3001_UNKNOWN_SANITIZER = 3001
    E3002_UNKNOWN_VALIDATOR = 3002
    E3003_RULE_NOT_ADMISSIBLE = 3003
    E3004_INVALID_RULE_PARAMS = 3004
    E3005_CONTRADICTORY_BOUNDS = 3005
    E3006_DUPLICATE_VALIDATOR = 3006
    E3007_INVALID_CUSTOM_FUNCTION = 3007
    E3008_INVALID_REGEX = 3008

    # Internal (E9xxx)
    E9000_INTERNAL_GENERIC = 9000
    E9001_UNEXPECTED_ERROR = 9001

    @property
    def category(self) -> str:
        """Human-readable diagnostic category."""
        code = self.value
        if 1000 <= code < 2000:
            return "spec"
        if 2000 <= code < 3000:
            return "capability"
        if 3000 <= code < 4000:
            return "rule"
        return "internal"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single generation-time finding.

    - code: machine-stable taxonomy member
    - subject: the offending capability, validator, sanitizer or field
    - message: human-readable explanation
    - suggestions: close matches from the known identifier table, if any
    """
    code: DiagnosticCode
    subject: str
    message: str
    suggestions: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        result = {
            "code": self.code.name,
            "code_num": self.code.value,
            "category": self.code.category,
            "subject": self.subject,
            "message": self.message,
        }
        if self.suggestions:
            result["suggestions"] = list(self.suggestions)
        return result

    def __str__(self) -> str:
        text = f"[{self.code.name}] {self.subject}: {self.message}"
        if self.suggestions:
            text += f" (did you mean: {', '.join(self.suggestions)}?)"
        return text


@dataclass(frozen=True, slots=True)
class DiagnosticSet:
    """Non-empty, ordered, duplicate-free collection of diagnostics."""
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, *diagnostics: Diagnostic) -> DiagnosticSet:
        return cls.from_iterable(diagnostics)

    @classmethod
    def from_iterable(cls, diagnostics: Iterable[Diagnostic]) -> DiagnosticSet:
        seen: dict[Diagnostic, None] = {}
        for d in diagnostics:
            seen.setdefault(d, None)
        return cls(tuple(seen))

    def merge(self, other: DiagnosticSet) -> DiagnosticSet:
        return DiagnosticSet.from_iterable((*self.diagnostics, *other.diagnostics))

    @property
    def codes(self) -> frozenset[DiagnosticCode]:
        return frozenset(d.code for d in self.diagnostics)

    def by_code(self, code: DiagnosticCode) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.code is code]

    def to_dict(self) -> dict:
        return {"error_count": len(self), "diagnostics": [d.to_dict() for d in self.diagnostics]}

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)

    def __bool__(self) -> bool:
        return bool(self.diagnostics)

    def __str__(self) -> str:
        return "\n".join(str(d) for d in self.diagnostics)


class GenerationError(Exception):
    """Raised at the ``generate_or_raise`` boundary when a specification is rejected."""

    def __init__(self, diagnostics: DiagnosticSet, type_name: str = ""):
        self.diagnostics = diagnostics
        self.type_name = type_name
        head = f"Cannot generate {type_name}" if type_name else "Cannot generate smart type"
        super().__init__(f"{head}: {len(diagnostics)} problem(s)\n{diagnostics}")


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result monad."""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise ValueError(f"Called unwrap_err on Ok: {self.value!r}")

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Transform the success value."""
        return Ok(f(self.value))

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        """No-op for Ok variant."""
        return self  # type: ignore

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain operations that may fail."""
        return f(self.value)

    def match(self, ok: Callable[[T], U], err: Callable[[E], U]) -> U:
        return ok(self.value)

    def __iter__(self) -> Iterator[T]:
        yield self.value


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result monad."""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        if isinstance(self.error, DiagnosticSet):
            raise GenerationError(self.error)
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """No-op for Err variant."""
        return self  # type: ignore

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        """Transform the error."""
        return Err(f(self.error))

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """No-op for Err variant."""
        return self  # type: ignore

    def match(self, ok: Callable[[T], U], err: Callable[[E], U]) -> U:
        return err(self.error)

    def __iter__(self) -> Iterator:
        return iter([])


Result = Union[Ok[T], Err[E]]


def ok(value: T) -> Ok[T]:
    return Ok(value)


def err(error: E) -> Err[E]:
    return Err(error)


def collect_results(results: Iterable[Result[T, DiagnosticSet]]) -> Result[list[T], DiagnosticSet]:
    """Collect Results into a Result of list, merging every diagnostic set.

    Unlike a fail-fast sequence, every Err contributes, so the caller sees all
    problems at once.
    """
    values: list[T] = []
    merged: DiagnosticSet | None = None

    for r in results:
        match r:
            case Ok(v):
                values.append(v)
            case Err(e):
                merged = e if merged is None else merged.merge(e)

    if merged is not None:
        return Err(merged)
    return Ok(values)


def from_diagnostics(diagnostics: Iterable[Diagnostic], value: T) -> Result[T, DiagnosticSet]:
    """Ok(value) when ``diagnostics`` is empty, Err(DiagnosticSet) otherwise."""
    found = DiagnosticSet.from_iterable(diagnostics)
    return Err(found) if found else Ok(value)
