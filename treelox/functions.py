"""Callable values: user-defined functions and native builtins.

Both kinds expose the same two operations, `arity()` and
`call(interpreter, arguments)`. The interpreter checks the argument count
before dispatching, so `call` can assume it received exactly `arity()`
arguments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List

from .ast import Function
from .environment import Environment
from .errors import ReturnSignal
from .types import NIL

if TYPE_CHECKING:
    from .interpreter import Interpreter


@dataclass(eq=False)
class UserFunction:
    """A function declared in Lox code, closed over its defining environment."""
    declaration: Function
    closure: Environment

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        # parameters live in a fresh scope on top of the closure, not the caller
        environment = self.closure.enclose()
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)
        signal = interpreter.execute_body(self.declaration.body.statements, environment)
        if isinstance(signal, ReturnSignal):
            return signal.value
        return NIL

    def __str__(self) -> str:
        return f"<fn {self.name}>"

    def __repr__(self) -> str:
        return f"<function {self.name}>"


@dataclass(eq=False)
class NativeFunction:
    """A builtin implemented in Python. Arguments are passed as a list."""
    name: str
    fixed_arity: int
    fn: Callable[[List[Any]], Any]

    def arity(self) -> int:
        return self.fixed_arity

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        return self.fn(arguments)

    def __str__(self) -> str:
        return '<native fn>'

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"
