from strand import Value
from strand.evaluation.group import ContinuationGroup
from strand.types.environment import BlockScopeEnv, Env, TryBlockEnv
from strand.types.next import Next
from strand.types.node import CatchClause, Node, NodeKind


class CatchHandler:
    """Continuation that receives a caught exception and runs one catch arm.

    The arm runs in a new block scope where the exception is bound to the
    clause's name, still guarded by the try's finally block.
    """

    __slots__ = ("env", "k", "clause", "finally_")

    def __init__(self, env: Env, k, clause: CatchClause, finally_):
        self.env = env
        self.k = k
        self.clause = clause
        self.finally_ = finally_

    def __call__(self, exc: BaseException) -> Next:
        scope = BlockScopeEnv(self.env)
        scope.declare(self.clause.name)
        scope.set(self.clause.name, exc)
        handler = self.clause.handler
        if self.finally_ is None:
            return Next(handler, scope, self.k)
        guarded = Node(NodeKind.TRY, (handler, (), self.finally_), handler.loc)
        return Next(guarded, scope, self.k)


def try_form(node: Node, env: Env, k) -> Next:
    body, catches, finally_ = node.operands
    f = TryBlockEnv(env, finally_)
    for clause in catches:
        f.add_handler(clause.type, CatchHandler(env, k, clause, finally_))
    return Next(body, f, f.with_finally(k))


class ThrowEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env):
        self.loc = node.loc
        self.env = env

    def raise_value(self, value: Value) -> Next:
        if isinstance(value, type) and issubclass(value, BaseException):
            try:
                value = value()
            except Exception as t:
                value = t
        if not isinstance(value, BaseException):
            value = TypeError(f"exceptions must derive from BaseException, not {type(value).__name__}")
        return self.throw_exception(self.env, value, self.loc)


def throw_form(node: Node, env: Env, k) -> Next:
    g = ThrowEval(node, env)
    return g.then(node.operands[0], env, g.raise_value)
