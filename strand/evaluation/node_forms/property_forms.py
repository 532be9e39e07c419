from strand import Value
from strand.evaluation.group import ContinuationGroup
from strand.types.environment import Env
from strand.types.next import Next
from strand.types.node import Node, NodeKind

# resolver (getter, setter) per member-access kind
_ACCESSORS = {
    NodeKind.PROPERTY: ("get_property", "set_property"),
    NodeKind.ATTRIBUTE: ("get_attribute", "set_attribute"),
    NodeKind.INDEX: ("get_index", "set_index"),
}


class MemberAccess(ContinuationGroup):
    """Handle on ``lhs.name``, ``lhs.@name`` or ``lhs[index]``.

    Resolving evaluates the receiver and then the member key; the handle is
    passed on once both are known. With `safe` set, a None receiver reads as
    None and ignores writes.
    """

    def __init__(self, node: Node, env: Env, k):
        _, self.key_node, self.safe = node.operands
        self.getter, self.setter = _ACCESSORS[node.kind]
        self.node = node
        self.env = env
        self.k = k

    def fix_lhs(self, lhs: Value) -> Next:
        self.lhs = lhs
        return self.then(self.key_node, self.env, self.fix_key)

    def fix_key(self, key: Value) -> Next:
        self.key = key
        return self.k(self)

    def get(self, k) -> Next:
        if self.safe and self.lhs is None:
            return k(None)
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, k, getattr(resolver, self.getter), self.lhs, self.key)

    def set(self, value: Value, k) -> Next:
        if self.safe and self.lhs is None:
            return k(None)
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, k, getattr(resolver, self.setter), self.lhs, self.key, value)


def resolve_member(node: Node, env: Env, k) -> Next:
    g = MemberAccess(node, env, k)
    return g.then(node.operands[0], env, g.fix_lhs)


class StaticField(ContinuationGroup):
    """Handle on a class-level field."""

    def __init__(self, node: Node, env: Env):
        self.type, self.name = node.operands
        self.node = node
        self.env = env

    def get(self, k) -> Next:
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, k, resolver.get_static, self.type, self.name)

    def set(self, value: Value, k) -> Next:
        resolver = self.env.resolver.contextualize(self.node)
        return self.dispatch(self.env, self.node.loc, k, resolver.set_static, self.type, self.name, value)


def resolve_static_field(node: Node, env: Env, k) -> Next:
    return k(StaticField(node, env))
