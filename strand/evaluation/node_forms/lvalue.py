"""Two-phase evaluation of assignable nodes.

Each assignable kind has a resolver that hands a location handle to its
continuation. Reading such a node is resolving it and then calling ``get`` on
the handle; the LVALUE kind stops after the first phase and yields the handle
itself.
"""

from strand.evaluation.node_forms.property_forms import resolve_member, resolve_static_field
from strand.evaluation.node_forms.variable_forms import resolve_local_variable
from strand.types.environment import Env
from strand.types.errors import StrandStructureError
from strand.types.next import Next
from strand.types.node import Node, NodeKind

LVALUE_FORMS = {
    NodeKind.LOCAL_VARIABLE: resolve_local_variable,
    NodeKind.PROPERTY: resolve_member,
    NodeKind.ATTRIBUTE: resolve_member,
    NodeKind.INDEX: resolve_member,
    NodeKind.STATIC_FIELD: resolve_static_field,
}


class ReadLValue:
    __slots__ = ("k",)

    def __init__(self, k):
        self.k = k

    def __call__(self, lvalue) -> Next:
        return lvalue.get(self.k)


def read_form(node: Node, env: Env, k) -> Next:
    return LVALUE_FORMS[node.kind](node, env, ReadLValue(k))


def lvalue_form(node: Node, env: Env, k) -> Next:
    (target,) = node.operands
    try:
        resolve = LVALUE_FORMS[target.kind]
    except KeyError:
        raise StrandStructureError(f"{target.kind.value} node is not assignable") from None
    return resolve(target, env, k)
