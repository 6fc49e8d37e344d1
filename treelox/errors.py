"""Error and diagnostic types shared by the Lox pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List

from .tokens import Token, TokenType


@dataclass(frozen=True)
class Diagnostic:
    """A scan or parse error tied to a source line."""
    line: int
    where: str
    message: str

    def __str__(self) -> str:
        return f"[line {self.line}] Error{self.where}: {self.message}"


@dataclass
class Diagnostics:
    """Collects diagnostics for one scan or parse.

    The collector is created by the caller of each stage and returned with
    its result. `fatal` is set when the stage gave up before reaching the
    end of its input.
    """
    entries: List[Diagnostic] = field(default_factory=list)
    fatal: bool = False

    def report(self, line: int, where: str, message: str) -> Diagnostic:
        diagnostic = Diagnostic(line, where, message)
        self.entries.append(diagnostic)
        return diagnostic

    def error(self, line: int, message: str) -> Diagnostic:
        return self.report(line, '', message)

    def error_at(self, token: Token, message: str) -> Diagnostic:
        if token.type == TokenType.EOF:
            return self.report(token.line, ' at end', message)
        return self.report(token.line, f" at '{token.lexeme}'", message)

    def extend(self, other: 'Diagnostics') -> None:
        self.entries.extend(other.entries)
        self.fatal = self.fatal or other.fatal

    @property
    def has_errors(self) -> bool:
        return bool(self.entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __str__(self) -> str:
        return '\n'.join(str(d) for d in self.entries)


class LoxRuntimeError(Exception):
    """Raised when evaluation of a Lox program fails.

    The message is stored without its trailing period; `str()` produces the
    two-line form expected on stderr.
    """
    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message

    @property
    def line(self) -> int:
        return self.token.line

    def __str__(self) -> str:
        return f"{self.message}.\n[line {self.token.line}]"


class UndefinedVariable(KeyError):
    """Raised by the environment when a name has no binding in any scope."""
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Undefined variable '{self.name}'"


class LoxError(Exception):
    """Base class for the failures reported by `run_program`."""
    exit_code = 1


class ScanFailed(LoxError):
    exit_code = 65

    def __init__(self, diagnostics: Diagnostics):
        super().__init__(str(diagnostics))
        self.diagnostics = diagnostics


class ParseFailed(LoxError):
    exit_code = 65

    def __init__(self, diagnostics: Diagnostics):
        super().__init__(str(diagnostics))
        self.diagnostics = diagnostics


class RuntimeFailed(LoxError):
    exit_code = 70

    def __init__(self, error: LoxRuntimeError):
        super().__init__(str(error))
        self.error = error


class ReturnSignal:
    """Control signal produced by a `return` statement.

    Statement execution yields either None (normal completion) or one of
    these; enclosing blocks, conditionals and loops hand it straight back
    to their caller.
    """
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"
