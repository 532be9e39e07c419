from strand.evaluation.group import ContinuationGroup
from strand.types.environment import Env
from strand.types.next import Next
from strand.types.node import Node


class SafepointEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        (self.hook,) = node.operands
        self.loc = node.loc
        self.env = env
        self.k = k

    def call_hook(self) -> Next:
        # the hook may return suspend(...) to hand control back to the host
        return self.dispatch(self.env, self.loc, self.resumed, self.hook)

    def resumed(self, _value) -> Next:
        return self.k(None)


def safepoint_form(node: Node, env: Env, k) -> Next:
    return SafepointEval(node, env, k).call_hook()
