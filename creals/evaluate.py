"""Drive approximate() over an expression graph without recursing.

A combinator's compute(p) is a generator: it yields (operand, precision)
requests, is sent each approximation back, and returns its own result. The
evaluator keeps the pending computations on an explicit stack, so the depth
of a graph is limited by memory rather than by the interpreter's recursion
limit.

Each combinator's cache lock is held from the lookup until the computed
value is stored. Graphs are acyclic, so locks are always taken from ancestor
to descendant and two evaluations cannot wait on each other in a cycle.
"""

import logging
from typing import List, NamedTuple

logger = logging.getLogger(__name__)


class _Frame(NamedTuple):
    node: object
    precision: int
    steps: object


def _begin(node, p: int, frames: List[_Frame]):
    """Answer a request directly, or push a frame and return None."""
    cache = node.cache
    if cache is None:
        return node.scaled(p)
    cache.lock.acquire()
    try:
        value = cache.lookup(p)
        if value is None:
            frames.append(_Frame(node, p, node.compute(p)))
            return None
    except BaseException:
        # Once the frame is pushed its lock is released with the stack. A
        # node is never on the stack twice: it would block on its own lock.
        if not frames or frames[-1].node is not node:
            cache.lock.release()
        raise
    cache.lock.release()
    return value


def evaluate(root, precision: int) -> int:
    frames: List[_Frame] = []
    try:
        value = _begin(root, precision, frames)
        while frames:
            frame = frames[-1]
            try:
                operand, p = frame.steps.send(value)
            except StopIteration as done:
                frames.pop()
                cache = frame.node.cache
                cache.store(frame.precision, done.value)
                cache.lock.release()
                value = done.value
                continue
            value = _begin(operand, p, frames)
        return value
    except BaseException:
        while frames:
            frame = frames.pop()
            frame.steps.close()
            frame.node.cache.lock.release()
        raise
