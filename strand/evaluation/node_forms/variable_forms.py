"""Local variables, declarations and assignment.

Assignable nodes resolve to a handle with ``get(k)`` and ``set(value, k)``.
Assignment and the increment operators evaluate an LVALUE node to obtain the
handle, so a single node kind serves both as a read and as a write target.
"""

from strand import Value
from strand.evaluation.group import ContinuationGroup
from strand.types.continuation import ValueBound
from strand.types.environment import Env
from strand.types.location import SourceLocation
from strand.types.next import Next
from strand.types.node import Node


class LocalVariable(ContinuationGroup):
    """Handle on a named slot; writes are cast to the slot's declared type."""

    def __init__(self, env: Env, name: str, loc: SourceLocation):
        self.env = env
        self.name = name
        self.loc = loc

    def get(self, k) -> Next:
        return k(self.env.get(self.name))

    def set(self, value: Value, k) -> Next:
        type_ = self.env.get_type(self.name)
        if type_ is None:
            return self._store(value, k)
        self.k = k
        return self.dispatch(self.env, self.loc, self._store_cast, self.env.resolver.cast, value, type_, False)

    def _store_cast(self, value: Value) -> Next:
        return self._store(value, self.k)

    def _store(self, value: Value, k) -> Next:
        self.env.set(self.name, value)
        return k(None)


def resolve_local_variable(node: Node, env: Env, k) -> Next:
    (name,) = node.operands
    return k(LocalVariable(env, name, node.loc))


def declare_form(node: Node, env: Env, k) -> Next:
    type_, name = node.operands
    env.declare(name, type_)
    return k(None)


class AssignmentEval(ContinuationGroup):
    """``lhs = rhs`` or, with an operator, ``lhs op= rhs``. The result is the value stored."""

    def __init__(self, node: Node, env: Env, k):
        _, self.op, self.rhs = node.operands
        self.loc = node.loc
        self.env = env
        self.k = k

    def fix_lhs(self, lhs) -> Next:
        self.lhs = lhs
        if self.op is None:
            return self.then(self.rhs, self.env, self.assign_and_done)
        return lhs.get(self.fix_current)

    def fix_current(self, current: Value) -> Next:
        self.current = current
        return self.then(self.rhs, self.env, self.fix_rhs)

    def fix_rhs(self, rhs: Value) -> Next:
        resolver = self.env.resolver
        return self.dispatch(self.env, self.loc, self.assign_and_done, resolver.binary_op, self.op, self.current, rhs)

    def assign_and_done(self, value: Value) -> Next:
        return self.lhs.set(value, ValueBound(self.k, value))


def assign_form(node: Node, env: Env, k) -> Next:
    lhs = node.operands[0]
    g = AssignmentEval(node, env, k)
    return g.then(lhs, env, g.fix_lhs)


class IncrementEval(ContinuationGroup):
    """Prefix and postfix ``++``/``--``."""

    def __init__(self, node: Node, env: Env, k):
        _, self.op, self.prefix = node.operands
        self.loc = node.loc
        self.env = env
        self.k = k

    def fix_lhs(self, lhs) -> Next:
        self.lhs = lhs
        return lhs.get(self.calc)

    def calc(self, before: Value) -> Next:
        self.before = before
        resolver = self.env.resolver
        return self.dispatch(self.env, self.loc, self.store, resolver.binary_op, self.op, before, 1)

    def store(self, after: Value) -> Next:
        result = after if self.prefix else self.before
        return self.lhs.set(after, ValueBound(self.k, result))


def increment_form(node: Node, env: Env, k) -> Next:
    lhs = node.operands[0]
    g = IncrementEval(node, env, k)
    return g.then(lhs, env, g.fix_lhs)
