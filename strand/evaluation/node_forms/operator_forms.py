from strand import Value
from strand.evaluation.group import ContinuationGroup
from strand.types.environment import Env
from strand.types.next import Next
from strand.types.node import Node


class BinaryOpEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        self.op, self.lhs_node, self.rhs_node = node.operands
        self.node = node
        self.env = env
        self.k = k

    def fix_lhs(self, lhs: Value) -> Next:
        self.lhs = lhs
        return self.then(self.rhs_node, self.env, self.fix_rhs)

    def fix_rhs(self, rhs: Value) -> Next:
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, self.k, resolver.binary_op, self.op, self.lhs, rhs)


def binary_op_form(node: Node, env: Env, k) -> Next:
    g = BinaryOpEval(node, env, k)
    return g.then(g.lhs_node, env, g.fix_lhs)


class UnaryOpEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        self.op, self.operand = node.operands
        self.node = node
        self.env = env
        self.k = k

    def fix(self, v: Value) -> Next:
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, self.k, resolver.unary_op, self.op, v)


def unary_op_form(node: Node, env: Env, k) -> Next:
    g = UnaryOpEval(node, env, k)
    return g.then(g.operand, env, g.fix)


class CastEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        self.value, self.type, self.coerce = node.operands
        self.node = node
        self.env = env
        self.k = k

    def fix(self, v: Value) -> Next:
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, self.k, resolver.cast, v, self.type, self.coerce)


def cast_form(node: Node, env: Env, k) -> Next:
    g = CastEval(node, env, k)
    return g.then(g.value, env, g.fix)


class InstanceOfEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        self.value, self.type = node.operands
        self.node = node
        self.env = env
        self.k = k

    def fix(self, v: Value) -> Next:
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, self.k, resolver.is_instance, v, self.type)


def instance_of_form(node: Node, env: Env, k) -> Next:
    g = InstanceOfEval(node, env, k)
    return g.then(g.value, env, g.fix)
