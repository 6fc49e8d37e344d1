"""Runtime value helpers for Lox.

Lox values map onto Python objects directly: booleans are `bool`, numbers
are always `float`, strings are `str`, and `nil` is the `NIL` singleton.
Callables are the function objects defined in `treelox.functions`. This
module holds the rules that span all of them: truthiness, equality, the
printed form used by `print`, and type names for traces.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any


class NilVal:
    """Marker object for the Lox `nil` value."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'nil'

    def __bool__(self) -> bool:
        return False


NIL = NilVal()


def is_callable(value: Any) -> bool:
    # local import: functions imports this module
    from .functions import NativeFunction, UserFunction
    return isinstance(value, (UserFunction, NativeFunction))


def is_number(value: Any) -> bool:
    # bool is a subclass of int, never of float
    return isinstance(value, float)


def is_truthy(value: Any) -> bool:
    """nil and false are falsy; every other value, 0 and "" included, is truthy."""
    if value is NIL:
        return False
    if isinstance(value, bool):
        return value
    return True


def values_equal(a: Any, b: Any) -> bool:
    """Structural equality over Lox values.

    Values of different types are never equal, so `1 == true` is false even
    though Python would say otherwise. Callables are not equal to anything,
    themselves included.
    """
    if is_callable(a) or is_callable(b):
        return False
    if type(a) is not type(b):
        return False
    return a == b


def format_number(value: float) -> str:
    """Render a number the way Lox prints it.

    Integral values lose their fractional part (`3`, not `3.0`), and
    exponent notation is expanded into plain digits.
    """
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'inf' if value > 0 else '-inf'
    if value.is_integer():
        if value == 0 and math.copysign(1.0, value) < 0:
            return '-0'
        return str(int(value))
    text = repr(value)
    if 'e' in text or 'E' in text:
        text = format(Decimal(text), 'f')
    return text


def to_string(value: Any) -> str:
    """Convert a Lox value to the text written by `print`."""
    if value is NIL:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return value
    return str(value)


def type_name(value: Any) -> str:
    """Return the Lox type name of a runtime value."""
    if value is NIL:
        return 'nil'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, float):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if is_callable(value):
        return 'function'
    return type(value).__name__
