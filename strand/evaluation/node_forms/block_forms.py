from strand.evaluation.group import ContinuationGroup
from strand.types.environment import BlockScopeEnv, Env
from strand.types.next import Next
from strand.types.node import Node


class SequenceEval(ContinuationGroup):
    """Evaluates nodes[index:] in order; the last value is the result."""

    def __init__(self, nodes: tuple, index: int, env: Env, k):
        self.nodes = nodes
        self.index = index
        self.env = env
        self.k = k

    def step(self, _value=None) -> Next:
        node = self.nodes[self.index]
        if self.index == len(self.nodes) - 1:
            return self.then(node, self.env, self.k)
        rest = SequenceEval(self.nodes, self.index + 1, self.env, self.k)
        return self.then(node, self.env, rest.step)


def sequence_form(node: Node, env: Env, k) -> Next:
    (nodes,) = node.operands
    if not nodes:
        return k(None)
    return SequenceEval(nodes, 0, env, k).step()


def block_form(node: Node, env: Env, k) -> Next:
    (body,) = node.operands
    return Next(body, BlockScopeEnv(env), k)
