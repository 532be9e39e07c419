"""Next: the trampoline unit that replaces the native call stack.

A Next is in exactly one of two shapes:

* evaluate ``node`` in ``env`` and hand the result to ``k``; or
* the program has yielded ``outcome`` and may later resume through ``(env, k)``.

A value computed inside a step is passed on with `deliver` rather than by
calling the continuation directly wherever the chain of continuations can
grow with the program (operator results, returns from calls), so unwinding a
deep call stack costs trampoline turns and not host frames.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from strand import Value

if TYPE_CHECKING:
    from strand.types.environment import Env
    from strand.types.node import Node
    from strand.types.outcome import Outcome


class Next:
    __slots__ = ("node", "env", "k", "outcome")

    def __init__(self, node: Node | None, env: Env | None, k: Any, outcome: Outcome | None = None):
        if (node is None) == (outcome is None):
            raise ValueError("Next needs either a node to evaluate or an outcome to yield")
        self.node = node
        self.env = env
        self.k = k
        self.outcome = outcome

    @property
    def is_yield(self) -> bool:
        return self.outcome is not None

    @classmethod
    def deliver(cls, value: Value, env: Env | None, k: Any) -> Next:
        """Hand `value` to `k` on the next trampoline turn instead of calling it now."""
        from strand.types.node import Node, NodeKind
        return cls(Node(NodeKind.CONSTANT, (value,)), env, k)

    @classmethod
    def yield_(cls, value: Value, env: Env | None, k: Any) -> Next:
        from strand.types.outcome import Outcome
        return cls(None, env, k, Outcome(value))

    @classmethod
    def yield0(cls, outcome: Outcome, env: Env | None, k: Any) -> Next:
        return cls(None, env, k, outcome)

    @classmethod
    def terminate(cls, value: Value) -> Next:
        from strand.types.outcome import Outcome
        return cls.terminate0(Outcome(value))

    @classmethod
    def unhandled(cls, exc: BaseException) -> Next:
        from strand.types.outcome import Outcome
        return cls.terminate0(Outcome(abnormal=exc))

    @classmethod
    def terminate0(cls, outcome: Outcome) -> Next:
        from strand.types.continuation import HALT
        return cls(None, None, HALT, outcome)

    def __call__(self, _unused: Value) -> Next:
        # A pending step doubles as a continuation that ignores its input.
        return self

    def __repr__(self) -> str:
        if self.outcome is not None:
            return f"<Next yield {self.outcome}>"
        return f"<Next eval {self.node!r}>"
