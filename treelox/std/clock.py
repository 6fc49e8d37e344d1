import time


class Clock:
    """Monotonic time source backing the `clock()` builtin.

    Readings are seconds as a float. Only differences between readings are
    meaningful; the reference point is unspecified.
    """
    def __init__(self, source=time.monotonic):
        self.source = source

    def now(self) -> float:
        return float(self.source())
