from typing import Any, List

from treelox.environment import Environment
from treelox.functions import NativeFunction
from .clock import Clock


def populate_globals(env: Environment) -> Environment:
    """Install the native builtins into the global scope of `env`."""
    clock = Clock()

    def std_clock(args: List[Any]) -> Any:
        return clock.now()

    env.globals['clock'] = NativeFunction('clock', 0, std_clock)
    return env
