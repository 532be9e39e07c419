"""Evaluator and trampoline for Strand.

`evaluate` performs exactly one step: it looks up the evaluator registered for
the node's kind and returns the next pending step. `run` keeps replacing the
pending step with its successor until one of them yields, which is the whole
mechanism that keeps deep programs off the host call stack.
"""

from __future__ import annotations

import logging
from collections import deque

from strand.config import get_step_limit
from strand.debug_utils.pprint import format_node
from strand.evaluation.node_forms import NODE_FORMS
from strand.types.environment import Env
from strand.types.errors import StrandStepLimitExceeded, StrandStructureError
from strand.types.next import Next
from strand.types.node import Node

logger = logging.getLogger(__name__)


def evaluate(node: Node, env: Env, k) -> Next:
    try:
        form = NODE_FORMS[node.kind]
    except (AttributeError, KeyError):
        raise StrandStructureError(f"Cannot evaluate {node!r}: not a known node") from None
    return form(node, env, k)


def run(n: Next) -> Next:
    """Drive `n` until a step yields and return that step."""
    while not n.is_yield:
        n = evaluate(n.node, n.env, n.k)
    return n


def run_bounded(n: Next, max_steps: int | None = None) -> Next:
    """Like `run`, but give up after `max_steps` evaluations.

    Meant for tests: a runaway program fails fast with the kinds of the last
    nodes it evaluated instead of spinning forever.
    """
    if max_steps is None:
        max_steps = get_step_limit()
    recent: deque[str] = deque(maxlen=20)
    for _ in range(max_steps):
        if n.is_yield:
            return n
        recent.append(n.node.kind.value)
        n = evaluate(n.node, n.env, n.k)
    if n.is_yield:
        return n
    logger.warning(
        "program did not yield within %d steps, stopped at:\n%s",
        max_steps,
        format_node(n.node, options={"max_depth": 2}),
    )
    raise StrandStepLimitExceeded(
        f"Did not terminate; ran {max_steps} steps ending with: {list(recent)}"
    )
