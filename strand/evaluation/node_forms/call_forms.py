from strand import Value
from strand.evaluation.group import ContinuationGroup
from strand.evaluation.node_forms.collection_forms import despread
from strand.types.callable import Closure
from strand.types.environment import Env, attach_trace
from strand.config import get_trace_depth
from strand.types.next import Next
from strand.types.node import Node


class ArgumentsEval(ContinuationGroup):
    """Evaluates argument nodes left to right, then calls `done`."""

    def eval_args(self, done) -> Next:
        self.values = []
        self.done = done
        return self.next_arg()

    def next_arg(self) -> Next:
        if len(self.values) == len(self.args):
            self.values = despread(self.values)
            return self.done()
        return self.then(self.args[len(self.values)], self.env, self.fix_arg)

    def fix_arg(self, v: Value) -> Next:
        self.values.append(v)
        return self.next_arg()


class FunctionCallEval(ArgumentsEval):
    """``lhs.name(args)``, optionally ``lhs?.name(args)``."""

    def __init__(self, node: Node, env: Env, k):
        self.lhs_node, self.name_node, self.args, self.safe = node.operands
        self.node = node
        self.env = env
        self.k = k

    def fix_lhs(self, lhs: Value) -> Next:
        self.lhs = lhs
        return self.then(self.name_node, self.env, self.fix_name)

    def fix_name(self, name: Value) -> Next:
        self.name = str(name)
        return self.eval_args(self.call)

    def call(self) -> Next:
        if self.safe and self.lhs is None:
            return self.k(None)
        return self.method_call(self.env, self.node, self.k, self.lhs, self.name, self.values)


def function_call_form(node: Node, env: Env, k) -> Next:
    g = FunctionCallEval(node, env, k)
    return g.then(g.lhs_node, env, g.fix_lhs)


class NewEval(ArgumentsEval):
    def __init__(self, node: Node, env: Env, k):
        self.type, self.args = node.operands
        self.node = node
        self.env = env
        self.k = k

    def construct(self) -> Next:
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, self.constructed, resolver.constructor_call, self.type, tuple(self.values))

    def constructed(self, v: Value) -> Next:
        # exceptions remember where they were created
        if isinstance(v, BaseException):
            attach_trace(v, self.node.loc, self.env, get_trace_depth())
        return self.k(v)


def new_form(node: Node, env: Env, k) -> Next:
    g = NewEval(node, env, k)
    return g.eval_args(g.construct)


class MethodPointerEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        self.lhs_node, self.name = node.operands
        self.node = node
        self.env = env
        self.k = k

    def fix_lhs(self, lhs: Value) -> Next:
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, self.k, resolver.method_pointer, lhs, self.name)


def method_pointer_form(node: Node, env: Env, k) -> Next:
    g = MethodPointerEval(node, env, k)
    return g.then(g.lhs_node, env, g.fix_lhs)


def closure_form(node: Node, env: Env, k) -> Next:
    params, body = node.operands
    return k(Closure(env.closure_owner(), params, body, env, node.loc))
