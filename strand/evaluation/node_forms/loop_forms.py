"""Loops.

Each loop evaluation owns a LoopBlockScopeEnv whose break address is the loop's
own continuation and whose continue address re-enters the loop head. Every
iteration goes back through the trampoline, so a loop never grows the host stack.
"""

from strand import Value
from strand.evaluation.group import ContinuationGroup
from strand.types.environment import Env, LoopBlockScopeEnv
from strand.types.next import Next
from strand.types.node import Node

_EXHAUSTED = object()


class WhileEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        label, self.cond, self.body = node.operands
        self.loc = node.loc
        self.k = k
        self.env = LoopBlockScopeEnv(env, label, k, self.loop_head)

    def loop_head(self, _value=None) -> Next:
        return self.then(self.cond, self.env, self.loop_cond)

    def loop_cond(self, cond: Value) -> Next:
        return self.cast_to_boolean(cond, self.env, self.loc, self.decide)

    def decide(self, b: bool) -> Next:
        if b:
            return self.then(self.body, self.env, self.loop_head)
        return self.k(None)


def while_form(node: Node, env: Env, k) -> Next:
    return WhileEval(node, env, k).loop_head()


class DoWhileEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        label, self.body, self.cond = node.operands
        self.loc = node.loc
        self.k = k
        self.env = LoopBlockScopeEnv(env, label, k, self.loop_head)

    def top(self, _value=None) -> Next:
        return self.then(self.body, self.env, self.loop_head)

    def loop_head(self, _value=None) -> Next:
        return self.then(self.cond, self.env, self.loop_cond)

    def loop_cond(self, cond: Value) -> Next:
        return self.cast_to_boolean(cond, self.env, self.loc, self.decide)

    def decide(self, b: bool) -> Next:
        if b:
            return self.top()
        return self.k(None)


def do_while_form(node: Node, env: Env, k) -> Next:
    return DoWhileEval(node, env, k).top()


class ForLoopEval(ContinuationGroup):
    """``for (init; cond; update) body``; continue runs the update first."""

    def __init__(self, node: Node, env: Env, k):
        label, self.init, self.cond, self.update, self.body = node.operands
        self.loc = node.loc
        self.k = k
        self.env = LoopBlockScopeEnv(env, label, k, self.increment)

    def start(self) -> Next:
        return self.then(self.init, self.env, self.loop_head)

    def loop_head(self, _value=None) -> Next:
        return self.then(self.cond, self.env, self.loop_cond)

    def loop_cond(self, cond: Value) -> Next:
        return self.cast_to_boolean(cond, self.env, self.loc, self.decide)

    def decide(self, b: bool) -> Next:
        if b:
            return self.then(self.body, self.env, self.increment)
        return self.k(None)

    def increment(self, _value=None) -> Next:
        return self.then(self.update, self.env, self.loop_head)


def for_loop_form(node: Node, env: Env, k) -> Next:
    return ForLoopEval(node, env, k).start()


class ForInLoopEval(ContinuationGroup):
    """``for (type name in collection) body``.

    The iterator is kept on the group, so a loop suspended mid-way can only be
    saved when its iterator pickles (list, tuple, range and dict iterators do).
    """

    def __init__(self, node: Node, env: Env, k):
        label, type_, self.name, self.collection, self.body = node.operands
        self.node = node
        self.k = k
        self.env = LoopBlockScopeEnv(env, label, k, self.increment)
        self.env.declare(self.name, type_)

    def start(self) -> Next:
        return self.then(self.collection, self.env, self.loop_head)

    def loop_head(self, collection: Value) -> Next:
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, self.begin, resolver.iterate, collection)

    def begin(self, itr) -> Next:
        self.itr = itr
        return self.increment()

    def increment(self, _value=None) -> Next:
        return self.dispatch(self.env, self.node.loc, self.fix_item, next, self.itr, _EXHAUSTED)

    def fix_item(self, item: Value) -> Next:
        if item is _EXHAUSTED:
            return self.k(None)
        self.env.set(self.name, item)
        return self.then(self.body, self.env, self.increment)


def for_in_loop_form(node: Node, env: Env, k) -> Next:
    return ForInLoopEval(node, env, k).start()
