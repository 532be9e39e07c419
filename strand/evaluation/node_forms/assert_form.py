from strand import Value
from strand.evaluation.group import ContinuationGroup
from strand.types.environment import Env
from strand.types.next import Next
from strand.types.node import Node


class AssertEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        self.cond, self.message, self.source_text = node.operands
        self.loc = node.loc
        self.env = env
        self.k = k

    def check(self, cond: Value) -> Next:
        return self.cast_to_boolean(cond, self.env, self.loc, self.decide)

    def decide(self, ok: bool) -> Next:
        if ok:
            return self.k(None)
        if self.message is None:
            return self.fail(None)
        return self.then(self.message, self.env, self.fail)

    def fail(self, message: Value) -> Next:
        if message is None:
            text = f"assert {self.source_text}"
        else:
            text = f"{message}. Expression: {self.source_text}"
        return self.throw_exception(self.env, AssertionError(text), self.loc)


def assert_form(node: Node, env: Env, k) -> Next:
    g = AssertEval(node, env, k)
    return g.then(g.cond, env, g.check)
