"""The resolver seam.

Every dynamic dispatch a program performs (method calls, member access, indexing,
operators, casts, truth tests, iteration, switch matching) goes through a
Resolver. The engine itself never decides what `a.b` or `a + b` means, so a
host can wrap or replace the resolver to enforce its own policy.

A resolver may return an Invocation instead of a value. The engine then enters
the interpreted callable in place of the call, which is also how host code
suspends a program (see strand.cursor.suspend).

The resolver a cursor runs with is not part of its persisted bytes; it is
injected again when the cursor is loaded.
"""

from __future__ import annotations

import operator
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping
from typing import Any, Iterator, Sequence

from strand import Value
from strand.types.callable import Closure, Function, Invocation
from strand.types.errors import StrandStructureError

BINARY_OPERATORS = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "//": operator.floordiv,
    "%": operator.mod,
    "**": operator.pow,
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "<<": operator.lshift,
    ">>": operator.rshift,
    "&": operator.and_,
    "|": operator.or_,
    "^": operator.xor,
    "in": lambda a, b: a in b,
    "not in": lambda a, b: a not in b,
    "is": operator.is_,
    "is not": operator.is_not,
}

UNARY_OPERATORS = {
    "-": operator.neg,
    "+": operator.pos,
    "~": operator.invert,
}

# Slots of these types never hold None and convert on assignment
_PRIMITIVES = (bool, int, float)


class Resolver(ABC):
    """Dynamic dispatch used by a running program."""

    @abstractmethod
    def method_call(self, receiver: Value, name: str, args: Sequence[Value]) -> Value: ...

    @abstractmethod
    def constructor_call(self, type_: type, args: Sequence[Value]) -> Value: ...

    @abstractmethod
    def get_property(self, lhs: Value, name: str) -> Value: ...

    @abstractmethod
    def set_property(self, lhs: Value, name: str, value: Value) -> None: ...

    @abstractmethod
    def get_attribute(self, lhs: Value, name: str) -> Value: ...

    @abstractmethod
    def set_attribute(self, lhs: Value, name: str, value: Value) -> None: ...

    @abstractmethod
    def get_index(self, lhs: Value, index: Value) -> Value: ...

    @abstractmethod
    def set_index(self, lhs: Value, index: Value, value: Value) -> None: ...

    @abstractmethod
    def get_static(self, type_: type, name: str) -> Value: ...

    @abstractmethod
    def set_static(self, type_: type, name: str, value: Value) -> None: ...

    @abstractmethod
    def binary_op(self, op: str, lhs: Value, rhs: Value) -> Value: ...

    @abstractmethod
    def unary_op(self, op: str, operand: Value) -> Value: ...

    @abstractmethod
    def cast(self, value: Value, type_: Any, coerce: bool = False) -> Value: ...

    @abstractmethod
    def is_instance(self, value: Value, type_: Any) -> bool: ...

    @abstractmethod
    def truthy(self, value: Value) -> bool: ...

    @abstractmethod
    def iterate(self, value: Value) -> Iterator[Value]: ...

    @abstractmethod
    def is_case(self, case_value: Value, subject: Value) -> bool: ...

    @abstractmethod
    def method_pointer(self, lhs: Value, name: str) -> Value: ...

    def contextualize(self, node) -> Resolver:
        """Resolver to use for the call site `node`; the default is `self`."""
        return self


class DefaultResolver(Resolver):
    """Plain Python semantics."""

    def method_call(self, receiver, name, args):
        if name == "call":
            if isinstance(receiver, (Function, Closure)):
                return Invocation(receiver, None, args)
            if callable(receiver) and not hasattr(receiver, "call"):
                return receiver(*args)
        target = getattr(receiver, name)
        if isinstance(target, (Function, Closure)):
            return Invocation(target, receiver, args)
        return target(*args)

    def constructor_call(self, type_, args):
        return type_(*args)

    def get_property(self, lhs, name):
        if isinstance(lhs, Mapping):
            return lhs[name]
        return getattr(lhs, name)

    def set_property(self, lhs, name, value):
        if isinstance(lhs, MutableMapping):
            lhs[name] = value
        else:
            setattr(lhs, name, value)

    def get_attribute(self, lhs, name):
        # bypasses properties and other descriptors
        try:
            return vars(lhs)[name]
        except KeyError:
            raise AttributeError(f"{type(lhs).__name__!r} object has no attribute {name!r}") from None

    def set_attribute(self, lhs, name, value):
        vars(lhs)[name] = value

    def get_index(self, lhs, index):
        return lhs[index]

    def set_index(self, lhs, index, value):
        lhs[index] = value

    def get_static(self, type_, name):
        return getattr(type_, name)

    def set_static(self, type_, name, value):
        setattr(type_, name, value)

    def binary_op(self, op, lhs, rhs):
        try:
            fn = BINARY_OPERATORS[op]
        except KeyError:
            raise StrandStructureError(f"Unknown binary operator {op!r}") from None
        return fn(lhs, rhs)

    def unary_op(self, op, operand):
        try:
            fn = UNARY_OPERATORS[op]
        except KeyError:
            raise StrandStructureError(f"Unknown unary operator {op!r}") from None
        return fn(operand)

    def cast(self, value, type_, coerce=False):
        if type_ is None or isinstance(value, type_):
            return value
        if value is None and type_ not in _PRIMITIVES:
            return value
        if coerce or type_ in _PRIMITIVES and isinstance(value, (int, float)):
            return type_(value)
        raise TypeError(f"Cannot cast {type(value).__name__} to {type_.__name__}")

    def is_instance(self, value, type_):
        return isinstance(value, type_)

    def truthy(self, value):
        return bool(value)

    def iterate(self, value):
        return iter(value)

    def is_case(self, case_value, subject):
        if isinstance(case_value, type):
            return isinstance(subject, case_value)
        if isinstance(case_value, re.Pattern):
            return isinstance(subject, str) and case_value.fullmatch(subject) is not None
        if isinstance(case_value, (list, tuple, set, frozenset, range, dict)):
            return subject in case_value
        return case_value == subject

    def method_pointer(self, lhs, name):
        return getattr(lhs, name)
