"""ContinuationGroup: shared plumbing for evaluations that span several steps.

A node whose evaluation needs more than one trampoline step (evaluate the lhs,
then the arguments, then dispatch...) creates a group object that carries the
intermediate values as attributes. The group's bound methods are its
continuations, so the whole in-flight evaluation pickles with the cursor.
"""

from __future__ import annotations

from typing import Callable, Optional

from strand import Value
from strand.types.callable import Invocation
from strand.types.environment import Env, throw
from strand.types.errors import StrandError
from strand.types.location import SourceLocation
from strand.types.next import Next
from strand.types.node import Node


class ContinuationGroup:

    def then(self, node: Node, env: Env, k) -> Next:
        return Next(node, env, k)

    def dispatch(self, env: Env, loc: Optional[SourceLocation], k, op: Callable, *args) -> Next:
        """Run one resolver operation and continue with its result.

        Exceptions the operation raises become program exceptions; an
        Invocation it returns is entered as an interpreted call.
        """
        try:
            v = op(*args)
        except StrandError:
            raise
        except Exception as t:
            return throw(env, t, loc)
        if isinstance(v, Invocation):
            return v.invoke(env, loc, k)
        return Next.deliver(v, env, k)

    def method_call(self, env: Env, node: Node, k, receiver: Value, name: str, args) -> Next:
        resolver = env.resolver.contextualize(node)
        return self.dispatch(env, node.loc, k, resolver.method_call, receiver, name, tuple(args))

    def throw_exception(self, env: Env, exc: BaseException, loc: Optional[SourceLocation]) -> Next:
        return throw(env, exc, loc)

    def cast_to_boolean(self, value: Value, env: Env, loc: Optional[SourceLocation], fn: Callable[[bool], Next]) -> Next:
        try:
            b = env.resolver.truthy(value)
        except StrandError:
            raise
        except Exception as t:
            return throw(env, t, loc)
        return fn(bool(b))
