"""Run work on a thread sized for deep Lox recursion.

Each Lox call takes several Python frames, so the default recursion limit
only allows about a hundred nested calls. `call_with_deep_stack` raises the
limit for the duration of one call and runs it on a worker thread whose
stack is large enough to hold that many frames.
"""

import sys
import threading
from typing import Any, Callable, Dict

RECURSION_LIMIT = 25_000
STACK_SIZE = 256 * 1024 * 1024


def call_with_deep_stack(fn: Callable[..., Any], *args: Any) -> Any:
    """Call `fn(*args)` on a deep-stack worker and return its result.

    Whatever `fn` raises, `SystemExit` included, is re-raised in the caller.
    """
    outcome: Dict[str, Any] = {}

    def target():
        try:
            outcome['value'] = fn(*args)
        except BaseException as e:
            outcome['error'] = e

    previous_limit = sys.getrecursionlimit()
    previous_size = threading.stack_size(STACK_SIZE)
    sys.setrecursionlimit(max(previous_limit, RECURSION_LIMIT))
    try:
        worker = threading.Thread(target=target, name='treelox-eval', daemon=True)
        worker.start()
        worker.join()
    finally:
        threading.stack_size(previous_size)
        sys.setrecursionlimit(previous_limit)
    if 'error' in outcome:
        raise outcome['error']
    return outcome.get('value')
