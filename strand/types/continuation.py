"""Well-known continuations.

Any one-argument callable returning a Next is a continuation. The two terminal
ones are process-wide singletons; they pickle by name so a reloaded cursor sees
the very same objects. Returning wraps the return address of every call.
"""

from __future__ import annotations

from strand import Value
from strand.types.next import Next


class Halt:
    """Ends the program with a normal outcome."""

    def __call__(self, value: Value) -> Next:
        return Next.terminate(value)

    def __reduce__(self):
        return "HALT"

    def __repr__(self) -> str:
        return "HALT"


class Unhandled:
    """Root exception handler: ends the program with an abnormal outcome."""

    def __call__(self, exc: BaseException) -> Next:
        return Next.unhandled(exc)

    def __reduce__(self):
        return "UNHANDLED"

    def __repr__(self) -> str:
        return "UNHANDLED"


HALT = Halt()
UNHANDLED = Unhandled()


class Returning:
    """Return address of a call: passes the result to the caller on a fresh step."""

    __slots__ = ("env", "k")

    def __init__(self, env, k):
        self.env = env
        self.k = k

    def __call__(self, value: Value) -> Next:
        return Next.deliver(value, self.env, self.k)

    def __repr__(self) -> str:
        return f"<Returning to {self.k!r}>"


class ValueBound:
    """Ignores its input and passes a fixed value on to `k`."""

    __slots__ = ("k", "value")

    def __init__(self, k, value: Value):
        self.k = k
        self.value = value

    def __call__(self, _unused: Value) -> Next:
        return self.k(self.value)
