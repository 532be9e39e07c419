from __future__ import annotations

import logging
from typing import Optional, Sequence

from strand import Value
from strand.config import get_max_depth
from strand.types.continuation import Returning
from strand.types.environment import ClosureCallEnv, Env, FunctionCallEnv, CallEnv, throw
from strand.types.errors import StrandDepthError
from strand.types.location import MethodLocation, SourceLocation
from strand.types.next import Next
from strand.types.node import Node

logger = logging.getLogger(__name__)


class Function:
    """A function whose body is a node tree.

    Functions run only inside a program: the resolver hands back an Invocation
    for them and the engine enters the body in a new FunctionCallEnv.
    """

    __slots__ = ("parameters", "body", "name", "location")

    def __init__(
        self,
        parameters: Sequence[str],
        body: Node,
        name: str = "<function>",
        location: Optional[MethodLocation] = None,
    ):
        self.parameters = tuple(parameters)
        self.body = body
        self.name = name
        self.location = location

    def invoke(self, caller: Env, call_site: Optional[SourceLocation], receiver: Value, args, k) -> Next:
        env = FunctionCallEnv(caller, Returning(caller, k), call_site, receiver)
        return enter(self, env, args, call_site)

    def __call__(self, *args, **kwargs):
        raise TypeError(f"{self.name} is interpreted and can only be called from a running program")

    def __repr__(self) -> str:
        return f"<Function {self.name}({', '.join(self.parameters)})>"


class Closure:
    """A function literal together with the environment it was created in."""

    __slots__ = ("owner", "parameters", "body", "captured", "location")

    def __init__(self, owner: Value, parameters: Sequence[str], body: Node, captured: Env, location=None):
        self.owner = owner
        self.parameters = tuple(parameters)
        self.body = body
        self.captured = captured
        self.location = location

    @property
    def name(self) -> str:
        return "<closure>"

    def invoke(self, caller: Env, call_site: Optional[SourceLocation], receiver: Value, args, k) -> Next:
        env = ClosureCallEnv(caller, Returning(caller, k), call_site, self.captured, self)
        return enter(self, env, args, call_site)

    def __call__(self, *args, **kwargs):
        raise TypeError("closures are interpreted and can only be called from a running program")

    def __repr__(self) -> str:
        return f"<Closure ({', '.join(self.parameters)}) at {self.location}>"


class Invocation:
    """A request, returned by the resolver, to run an interpreted callable."""

    __slots__ = ("target", "receiver", "args")

    def __init__(self, target, receiver: Value, args: Sequence[Value]):
        self.target = target
        self.receiver = receiver
        self.args = tuple(args)

    def invoke(self, env: Env, call_site: Optional[SourceLocation], k) -> Next:
        return self.target.invoke(env, call_site, self.receiver, self.args, k)

    def __repr__(self) -> str:
        return f"<Invocation {self.target!r}>"


def enter(fn, env: CallEnv, args: Sequence[Value], call_site: Optional[SourceLocation]) -> Next:
    """Bind arguments and start evaluating the body of `fn` in `env`."""
    params = fn.parameters
    if len(args) != len(params):
        exc = TypeError(f"{fn.name}() takes {len(params)} arguments but {len(args)} were given")
        return throw(env.caller, exc, call_site)

    limit = get_max_depth()
    if env.depth > limit:
        logger.warning("call depth %d exceeds the limit of %d at %s", env.depth, limit, call_site)
        raise StrandDepthError(
            f"Excessively nested closures/functions at {call_site} - "
            f"look for unbounded recursion - call depth: {env.depth}"
        )

    for name, value in zip(params, args):
        env.declare(name)
        env.set(name, value)
    return Next(fn.body, env, k=env.return_address())
