from strand import Value
from strand.evaluation.group import ContinuationGroup
from strand.types.environment import Env
from strand.types.next import Next
from strand.types.node import Node, NodeKind


class IfEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        self.cond, self.then_node, self.else_node = node.operands
        self.loc = node.loc
        self.env = env
        self.k = k

    def jump(self, cond: Value) -> Next:
        return self.cast_to_boolean(cond, self.env, self.loc, self.branch)

    def branch(self, b: bool) -> Next:
        return self.then(self.then_node if b else self.else_node, self.env, self.k)


def if_form(node: Node, env: Env, k) -> Next:
    g = IfEval(node, env, k)
    return g.then(g.cond, env, g.jump)


class LogicalOpEval(ContinuationGroup):
    """Short-circuit ``and``/``or``; the result is always a bool."""

    def __init__(self, node: Node, env: Env, k):
        self.lhs, self.rhs = node.operands
        self.is_and = node.kind is NodeKind.LOGICAL_AND
        self.loc = node.loc
        self.env = env
        self.k = k

    def fix_lhs(self, lhs: Value) -> Next:
        return self.cast_to_boolean(lhs, self.env, self.loc, self.decide_lhs)

    def decide_lhs(self, b: bool) -> Next:
        if b != self.is_and:
            return self.k(b)
        return self.then(self.rhs, self.env, self.fix_rhs)

    def fix_rhs(self, rhs: Value) -> Next:
        return self.cast_to_boolean(rhs, self.env, self.loc, self.k)


def logical_op_form(node: Node, env: Env, k) -> Next:
    g = LogicalOpEval(node, env, k)
    return g.then(g.lhs, env, g.fix_lhs)


class NotEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        self.loc = node.loc
        self.env = env
        self.k = k

    def fix(self, v: Value) -> Next:
        return self.cast_to_boolean(v, self.env, self.loc, self.negate)

    def negate(self, b: bool) -> Next:
        return self.k(not b)


def not_form(node: Node, env: Env, k) -> Next:
    g = NotEval(node, env, k)
    return g.then(node.operands[0], env, g.fix)


class ElvisEval(ContinuationGroup):
    """``cond ?: fallback``: the condition's own value when truthy."""

    def __init__(self, node: Node, env: Env, k):
        self.cond, self.fallback = node.operands
        self.loc = node.loc
        self.env = env
        self.k = k

    def fix(self, v: Value) -> Next:
        self.value = v
        return self.cast_to_boolean(v, self.env, self.loc, self.choose)

    def choose(self, b: bool) -> Next:
        if b:
            return self.k(self.value)
        return self.then(self.fallback, self.env, self.k)


def elvis_form(node: Node, env: Env, k) -> Next:
    g = ElvisEval(node, env, k)
    return g.then(g.cond, env, g.fix)
