"""Program fragment nodes.

A Node is an immutable description of one operation: a kind tag, a tuple of
operands (child nodes and literal values), and the source location it came from.
Nodes hold no execution state, so one tree can be shared by any number of live
cursors and reused under several parents.

The operand layout of each kind is fixed; NodeFactory is the only place that
builds them and the evaluators in strand.evaluation.node_forms unpack them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from strand.types.location import SourceLocation, UNKNOWN_LOCATION


class NodeKind(str, Enum):
    # literals and variables
    CONSTANT = "constant"                # (value,)
    NOOP = "noop"                        # ()
    LOCAL_VARIABLE = "local_variable"    # (name,)
    DECLARE_VARIABLE = "declare"         # (type, name)
    LVALUE = "lvalue"                    # (assignable node,)
    ASSIGN = "assign"                    # (lhs ref, op or None, rhs)
    INCREMENT = "increment"              # (lhs ref, op, prefix)
    PROPERTY = "property"                # (lhs, name, safe)
    ATTRIBUTE = "attribute"              # (lhs, name, safe)
    INDEX = "index"                      # (lhs, index, safe)
    STATIC_FIELD = "static_field"        # (type, name)
    # blocks and control flow
    SEQUENCE = "sequence"                # (nodes tuple,)
    BLOCK = "block"                      # (body,)
    IF = "if"                            # (cond, then, else)
    WHILE = "while"                      # (label, cond, body)
    DO_WHILE = "do_while"                # (label, body, cond)
    FOR = "for"                          # (label, init, cond, update, body)
    FOR_IN = "for_in"                    # (label, type, name, collection, body)
    BREAK = "break"                      # (label,)
    CONTINUE = "continue"                # (label,)
    RETURN = "return"                    # (value,)
    SWITCH = "switch"                    # (label, subject, cases tuple, default)
    # calls
    CALL = "call"                        # (lhs, name, args tuple, safe)
    NEW = "new"                          # (type, args tuple)
    METHOD_POINTER = "method_pointer"    # (lhs, name)
    CLOSURE = "closure"                  # (params tuple, body)
    # exceptions
    TRY = "try"                          # (body, catches tuple, finally)
    THROW = "throw"                      # (exception,)
    ASSERT = "assert"                    # (cond, message, source text)
    # operators
    LOGICAL_AND = "and"                  # (lhs, rhs)
    LOGICAL_OR = "or"                    # (lhs, rhs)
    NOT = "not"                          # (operand,)
    ELVIS = "elvis"                      # (cond, fallback)
    BINARY_OP = "binary_op"              # (op, lhs, rhs)
    UNARY_OP = "unary_op"                # (op, operand)
    CAST = "cast"                        # (value, type, coerce)
    INSTANCE_OF = "instance_of"          # (value, type)
    LIST = "list"                        # (items tuple,)
    MAP = "map"                          # (keys and values tuple,)
    RANGE = "range"                      # (start, stop, inclusive)
    SPREAD = "spread"                    # (iterable,)
    SPREAD_MAP = "spread_map"            # (mapping,)
    # suspension
    YIELD = "yield"                      # (value,)
    SUSPEND = "suspend"                  # ()
    SAFEPOINT = "safepoint"              # (hook,)


@dataclass(frozen=True, eq=False)
class Node:
    kind: NodeKind
    operands: tuple = ()
    loc: SourceLocation = UNKNOWN_LOCATION

    @property
    def line(self) -> int:
        return self.loc.line

    def __repr__(self) -> str:
        return f"<Node {self.kind.value} at {self.loc}>"


@dataclass(frozen=True, eq=False)
class CatchClause:
    """One `catch (type name) { handler }` arm of a try node."""

    type: Any
    name: str
    handler: Node


@dataclass(frozen=True, eq=False)
class CaseClause:
    matcher: Node
    body: Node


NOOP = Node(NodeKind.NOOP)
NULL = Node(NodeKind.CONSTANT, (None,))

ASSIGNABLE_KINDS = frozenset(
    {
        NodeKind.LOCAL_VARIABLE,
        NodeKind.PROPERTY,
        NodeKind.ATTRIBUTE,
        NodeKind.INDEX,
        NodeKind.STATIC_FIELD,
    }
)
