from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from treelox.errors import UndefinedVariable


class Environment:
    """A stack of lexical scopes mapping names to values.

    Scope 0 is the global scope and is never removed. Blocks and calls push
    a scope on entry and pop it on exit. Functions keep a captured copy of
    the environment that shares the scope dicts with the original, so the
    captured scopes stay alive after the block that created them has been
    popped from the original stack.
    """
    def __init__(self, scopes: Optional[List[Dict[str, Any]]] = None):
        self.scopes: List[Dict[str, Any]] = scopes if scopes else [{}]

    @property
    def depth(self) -> int:
        return len(self.scopes)

    @property
    def globals(self) -> Dict[str, Any]:
        return self.scopes[0]

    def push_scope(self):
        self.scopes.append({})

    def pop_scope(self):
        if len(self.scopes) == 1:
            raise IndexError('cannot pop the global scope')
        self.scopes.pop()

    @contextmanager
    def scope(self) -> Iterator['Environment']:
        self.push_scope()
        try:
            yield self
        finally:
            self.pop_scope()

    def capture(self) -> 'Environment':
        # new list, same dicts
        return Environment(list(self.scopes))

    def enclose(self) -> 'Environment':
        env = self.capture()
        env.push_scope()
        return env

    def define(self, name: str, value: Any):
        # Redefinition in the same scope overwrites the old binding.
        self.scopes[-1][name] = value

    def assign(self, name: str, value: Any):
        for scope in reversed(self.scopes):
            if name in scope:
                scope[name] = value
                return
        raise UndefinedVariable(name)

    def get(self, name: str) -> Any:
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        raise UndefinedVariable(name)
