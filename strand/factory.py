"""NodeFactory: the construction protocol front-ends use to build node trees.

One method per node kind. Each takes already-built child nodes plus literal
operands and returns an immutable Node; the factory keeps no per-tree state,
so one instance can build any number of trees and a node may be reused under
several parents.

All nodes built by one factory carry source locations inside its
MethodLocation. When a safepoint hook is configured, every loop body and every
function/closure body starts with a call to it.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from strand import Value
from strand.cursor import SUSPEND
from strand.types.callable import Function
from strand.types.errors import StrandStructureError
from strand.types.location import MethodLocation, SourceLocation, UNKNOWN_METHOD
from strand.types.node import ASSIGNABLE_KINDS, NOOP, NULL, CaseClause, CatchClause, Node, NodeKind


class NodeFactory:

    def __init__(self, location: MethodLocation = UNKNOWN_METHOD, safepoint: Optional[Callable[[], Any]] = None):
        self.location = location
        self.safepoint_hook = safepoint

    def loc(self, line: int) -> SourceLocation:
        return self.location.at(line)

    def _node(self, kind: NodeKind, line: int, *operands) -> Node:
        return Node(kind, operands, self.loc(line))

    # --- literals ---

    def null(self) -> Node:
        return NULL

    def noop(self) -> Node:
        return NOOP

    def constant(self, value: Value, line: int = -1) -> Node:
        if value is None:
            return NULL
        return self._node(NodeKind.CONSTANT, line, value)

    def zero(self) -> Node:
        return self.constant(0)

    def one(self) -> Node:
        return self.constant(1)

    def two(self) -> Node:
        return self.constant(2)

    def true_(self) -> Node:
        return self.constant(True)

    def false_(self) -> Node:
        return self.constant(False)

    def list_(self, line: int, *items: Node) -> Node:
        return self._node(NodeKind.LIST, line, tuple(items))

    def map_(self, line: int, *keys_and_values: Node) -> Node:
        """Keys and values alternate; a spread_map node stands alone in a key position."""
        i = 0
        while i < len(keys_and_values):
            if keys_and_values[i].kind is NodeKind.SPREAD_MAP:
                i += 1
            elif i + 1 < len(keys_and_values):
                i += 2
            else:
                raise StrandStructureError("map literal needs an even number of key/value nodes")
        return self._node(NodeKind.MAP, line, tuple(keys_and_values))

    def spread(self, line: int, exp: Node) -> Node:
        """``*exp`` inside an argument list or list literal."""
        return self._node(NodeKind.SPREAD, line, exp)

    def spread_map(self, line: int, exp: Node) -> Node:
        """``**exp`` inside a map literal."""
        return self._node(NodeKind.SPREAD_MAP, line, exp)

    def range_(self, line: int, start: Node, stop: Node, inclusive: bool = True) -> Node:
        return self._node(NodeKind.RANGE, line, start, stop, inclusive)

    # --- variables and assignment ---

    def local_variable(self, line: int, name: str) -> Node:
        return self._node(NodeKind.LOCAL_VARIABLE, line, name)

    def this_(self, line: int = -1) -> Node:
        return self.local_variable(line, "this")

    def declare_variable(self, line: int, type_: Any, name: str, init: Optional[Node] = None) -> Node:
        decl = self._node(NodeKind.DECLARE_VARIABLE, line, type_, name)
        if init is None:
            return decl
        return self.sequence(decl, self.assign(line, self.local_variable(line, name), init))

    def assign(self, line: int, lhs: Node, rhs: Node, op: Optional[str] = None) -> Node:
        return self._node(NodeKind.ASSIGN, line, self._lvalue(lhs), op, rhs)

    def set_local_variable(self, line: int, name: str, rhs: Node) -> Node:
        return self.assign(line, self.local_variable(line, name), rhs)

    def plus_equal(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.assign(line, lhs, rhs, "+")

    def minus_equal(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.assign(line, lhs, rhs, "-")

    def multiply_equal(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.assign(line, lhs, rhs, "*")

    def div_equal(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.assign(line, lhs, rhs, "/")

    def prefix_inc(self, line: int, lhs: Node) -> Node:
        return self._node(NodeKind.INCREMENT, line, self._lvalue(lhs), "+", True)

    def prefix_dec(self, line: int, lhs: Node) -> Node:
        return self._node(NodeKind.INCREMENT, line, self._lvalue(lhs), "-", True)

    def postfix_inc(self, line: int, lhs: Node) -> Node:
        return self._node(NodeKind.INCREMENT, line, self._lvalue(lhs), "+", False)

    def postfix_dec(self, line: int, lhs: Node) -> Node:
        return self._node(NodeKind.INCREMENT, line, self._lvalue(lhs), "-", False)

    def _lvalue(self, node: Node) -> Node:
        if node.kind not in ASSIGNABLE_KINDS:
            raise StrandStructureError(f"{node.kind.value} node cannot be assigned to")
        return Node(NodeKind.LVALUE, (node,), node.loc)

    # --- member access ---

    def property(self, line: int, lhs: Node, name: str | Node, safe: bool = False) -> Node:
        return self._node(NodeKind.PROPERTY, line, lhs, self._key(name), safe)

    def attribute(self, line: int, lhs: Node, name: str | Node, safe: bool = False) -> Node:
        return self._node(NodeKind.ATTRIBUTE, line, lhs, self._key(name), safe)

    def array(self, line: int, lhs: Node, index: Node, safe: bool = False) -> Node:
        return self._node(NodeKind.INDEX, line, lhs, index, safe)

    def static_field(self, line: int, type_: type, name: str) -> Node:
        return self._node(NodeKind.STATIC_FIELD, line, type_, name)

    def set_property(self, line: int, lhs: Node, name: str | Node, rhs: Node) -> Node:
        return self.assign(line, self.property(line, lhs, name), rhs)

    def _key(self, name: str | Node) -> Node:
        return name if isinstance(name, Node) else self.constant(name)

    # --- blocks and control flow ---

    def sequence(self, *nodes: Node) -> Node:
        if len(nodes) == 1:
            return nodes[0]
        return Node(NodeKind.SEQUENCE, (tuple(nodes),), nodes[0].loc if nodes else self.loc(-1))

    def block(self, *nodes: Node) -> Node:
        body = self.sequence(*nodes)
        return Node(NodeKind.BLOCK, (body,), body.loc)

    def if_(self, cond: Node, then: Node, else_: Optional[Node] = None) -> Node:
        return Node(NodeKind.IF, (cond, then, else_ if else_ is not None else NOOP), cond.loc)

    def ternary(self, cond: Node, then: Node, else_: Node) -> Node:
        return self.if_(cond, then, else_)

    def elvis(self, line: int, cond: Node, fallback: Node) -> Node:
        return self._node(NodeKind.ELVIS, line, cond, fallback)

    def while_(self, label: Optional[str], cond: Node, body: Node) -> Node:
        return Node(NodeKind.WHILE, (label, cond, self._guarded(body)), cond.loc)

    def do_while(self, label: Optional[str], body: Node, cond: Node) -> Node:
        return Node(NodeKind.DO_WHILE, (label, self._guarded(body), cond), cond.loc)

    def for_loop(
        self,
        label: Optional[str],
        init: Optional[Node],
        cond: Optional[Node],
        update: Optional[Node],
        body: Node,
    ) -> Node:
        # for(;;) loops forever
        cond = cond if cond is not None else self.true_()
        return Node(
            NodeKind.FOR,
            (label, init or NOOP, cond, update or NOOP, self._guarded(body)),
            body.loc,
        )

    def for_in(self, line: int, label: Optional[str], type_: Any, name: str, collection: Node, body: Node) -> Node:
        return self._node(NodeKind.FOR_IN, line, label, type_, name, collection, self._guarded(body))

    def break_(self, label: Optional[str] = None) -> Node:
        return Node(NodeKind.BREAK, (label,))

    def continue_(self, label: Optional[str] = None) -> Node:
        return Node(NodeKind.CONTINUE, (label,))

    def return_(self, line: int, exp: Optional[Node] = None) -> Node:
        return self._node(NodeKind.RETURN, line, exp if exp is not None else NULL)

    def case_(self, matcher: Node, body: Node) -> CaseClause:
        return CaseClause(matcher, body)

    def switch_(
        self,
        line: int,
        label: Optional[str],
        subject: Node,
        default: Optional[Node],
        *cases: CaseClause,
    ) -> Node:
        return self._node(NodeKind.SWITCH, line, label, subject, tuple(cases), default)

    # --- calls ---

    def function_call(self, line: int, lhs: Node, name: str | Node, *args: Node, safe: bool = False) -> Node:
        return self._node(NodeKind.CALL, line, lhs, self._key(name), tuple(args), safe)

    def call(self, line: int, callee: Node, *args: Node) -> Node:
        """Call a function, closure or plain Python callable held in `callee`."""
        return self.function_call(line, callee, "call", *args)

    def static_call(self, line: int, type_: type, name: str, *args: Node) -> Node:
        return self.function_call(line, self.constant(type_, line), name, *args)

    def new_(self, line: int, type_: type, *args: Node) -> Node:
        return self._node(NodeKind.NEW, line, type_, tuple(args))

    def method_pointer(self, line: int, lhs: Node, name: str) -> Node:
        return self._node(NodeKind.METHOD_POINTER, line, lhs, name)

    def closure(self, line: int, parameters: Sequence[str], *body: Node) -> Node:
        return self._node(NodeKind.CLOSURE, line, tuple(parameters), self._guarded(self.sequence(*body)))

    def function(self, name: str, parameters: Sequence[str], *body: Node) -> Function:
        """Define a named function whose frames report this factory's location."""
        location = MethodLocation(self.location.declaring_scope, name, self.location.file)
        return Function(parameters, self._guarded(self.sequence(*body)), name, location)

    # --- exceptions ---

    def catch(self, type_: Any, name: str, handler: Node) -> CatchClause:
        return CatchClause(type_, name, handler)

    def try_catch(self, body: Node, finally_: Optional[Node], *catches: CatchClause) -> Node:
        return Node(NodeKind.TRY, (body, tuple(catches), finally_), body.loc)

    def throw_(self, line: int, exp: Node) -> Node:
        return self._node(NodeKind.THROW, line, exp)

    def assert_(self, line: int, cond: Node, message: Optional[Node], source_text: str) -> Node:
        return self._node(NodeKind.ASSERT, line, cond, message, source_text)

    # --- operators ---

    def logical_and(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self._node(NodeKind.LOGICAL_AND, line, lhs, rhs)

    def logical_or(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self._node(NodeKind.LOGICAL_OR, line, lhs, rhs)

    def not_(self, line: int, exp: Node) -> Node:
        return self._node(NodeKind.NOT, line, exp)

    def binary(self, line: int, op: str, lhs: Node, rhs: Node) -> Node:
        return self._node(NodeKind.BINARY_OP, line, op, lhs, rhs)

    def plus(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "+", lhs, rhs)

    def minus(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "-", lhs, rhs)

    def multiply(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "*", lhs, rhs)

    def div(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "/", lhs, rhs)

    def intdiv(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "//", lhs, rhs)

    def mod(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "%", lhs, rhs)

    def power(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "**", lhs, rhs)

    def compare_equal(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "==", lhs, rhs)

    def compare_not_equal(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "!=", lhs, rhs)

    def less_than(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "<", lhs, rhs)

    def less_than_equal(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "<=", lhs, rhs)

    def greater_than(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, ">", lhs, rhs)

    def greater_than_equal(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, ">=", lhs, rhs)

    def bitwise_and(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "&", lhs, rhs)

    def bitwise_or(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "|", lhs, rhs)

    def bitwise_xor(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "^", lhs, rhs)

    def left_shift(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "<<", lhs, rhs)

    def right_shift(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, ">>", lhs, rhs)

    def in_(self, line: int, lhs: Node, rhs: Node) -> Node:
        return self.binary(line, "in", lhs, rhs)

    def unary_minus(self, line: int, exp: Node) -> Node:
        return self._node(NodeKind.UNARY_OP, line, "-", exp)

    def unary_plus(self, line: int, exp: Node) -> Node:
        return self._node(NodeKind.UNARY_OP, line, "+", exp)

    def bitwise_negation(self, line: int, exp: Node) -> Node:
        return self._node(NodeKind.UNARY_OP, line, "~", exp)

    def cast(self, line: int, exp: Node, type_: Any, coerce: bool = False) -> Node:
        return self._node(NodeKind.CAST, line, exp, type_, coerce)

    def instance_of(self, line: int, exp: Node, type_: Any) -> Node:
        return self._node(NodeKind.INSTANCE_OF, line, exp, type_)

    # --- suspension ---

    def yield_(self, value: Value, line: int = -1) -> Node:
        return self._node(NodeKind.YIELD, line, value)

    def suspend(self, line: int, exp: Node) -> Node:
        """Yield the value of `exp`; evaluates to the value the program is resumed with."""
        return self.call(line, Node(NodeKind.CONSTANT, (SUSPEND,), self.loc(line)), exp)

    def safepoint(self, line: int = -1) -> Node:
        if self.safepoint_hook is None:
            return NOOP
        return self._node(NodeKind.SAFEPOINT, line, self.safepoint_hook)

    def _guarded(self, body: Node) -> Node:
        if self.safepoint_hook is None:
            return body
        return self.sequence(self.safepoint(body.line), body)
