from strand import Value
from strand.evaluation.group import ContinuationGroup
from strand.types.environment import CaseEnv, Env
from strand.types.next import Next
from strand.types.node import Node


class SwitchEval(ContinuationGroup):
    """Matches cases in order, then falls through the bodies until a break.

    The default body only runs when no case matched.
    """

    def __init__(self, node: Node, env: Env, k):
        label, self.subject, self.cases, self.default = node.operands
        self.node = node
        self.env = env
        self.k = k
        self.case_env = CaseEnv(env, label, k)
        self.index = 0

    def fix_subject(self, value: Value) -> Next:
        self.value = value
        return self.match_next()

    def match_next(self) -> Next:
        if self.index == len(self.cases):
            if self.default is None:
                return self.k(None)
            return self.then(self.default, self.case_env, self.k)
        return self.then(self.cases[self.index].matcher, self.env, self.matcher)

    def matcher(self, case_value: Value) -> Next:
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, self.decide, resolver.is_case, case_value, self.value)

    def decide(self, matched: Value) -> Next:
        if matched:
            return self.body()
        self.index += 1
        return self.match_next()

    def body(self) -> Next:
        return self.then(self.cases[self.index].body, self.case_env, self.fall_through)

    def fall_through(self, _value) -> Next:
        self.index += 1
        if self.index == len(self.cases):
            return self.k(None)
        return self.body()


def switch_form(node: Node, env: Env, k) -> Next:
    g = SwitchEval(node, env, k)
    return g.then(g.subject, env, g.fix_subject)
