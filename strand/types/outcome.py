"""Outcome: the terminal currency of the engine.

Either a normal value or an abnormal exception. A normal ``None`` is a real
result; an Outcome only counts as a failure when ``abnormal`` is set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TYPE_CHECKING

from strand import Value
from strand.types.next import Next
from strand.types.node import Node, NodeKind

if TYPE_CHECKING:
    from strand.types.environment import Env


@dataclass(frozen=True)
class Outcome:
    normal: Value = None
    abnormal: BaseException | None = None

    @property
    def is_success(self) -> bool:
        return self.abnormal is None

    def replay(self) -> Value:
        """Return the normal value or raise the abnormal one."""
        if self.abnormal is not None:
            raise self.abnormal
        return self.normal

    @classmethod
    def wrap(cls, fn: Callable[[], Value]) -> Outcome:
        try:
            return cls(fn())
        except Exception as t:
            return cls(abnormal=t)

    def resume_from(self, env: Env, k) -> Next:
        # An exception is re-thrown from the current environment so the normal
        # handler search applies to it.
        if self.abnormal is not None:
            throw = Node(NodeKind.THROW, (Node(NodeKind.CONSTANT, (self.abnormal,)),))
            return Next(throw, env, k)
        return k(self.normal)

    def __str__(self) -> str:
        if self.abnormal is not None:
            return f"Outcome(abnormal={self.abnormal!r})"
        return f"Outcome(normal={self.normal!r})"
