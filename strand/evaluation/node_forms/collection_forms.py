from collections.abc import Mapping

from strand import Value
from strand.evaluation.group import ContinuationGroup
from strand.types.environment import Env
from strand.types.next import Next
from strand.types.node import Node, NodeKind


class SpreadList:
    """``*items``: expanded in place by the argument list or list literal around it."""

    __slots__ = ("items",)

    def __init__(self, items: tuple):
        self.items = items

    def __repr__(self) -> str:
        return f"*{list(self.items)!r}"


class SpreadMap:
    """``**entries``: merged into the map literal around it."""

    __slots__ = ("entries",)

    def __init__(self, entries: dict):
        self.entries = entries

    def __repr__(self) -> str:
        return f"**{self.entries!r}"


def spread_list(value: Value) -> SpreadList:
    if isinstance(value, Mapping):
        raise TypeError(
            f"cannot spread the type {type(value).__name__} with value {value!r}, "
            "did you mean to use the spread-map operator instead?"
        )
    try:
        return SpreadList(tuple(value))
    except TypeError:
        raise TypeError(f"cannot spread the type {type(value).__name__} with value {value!r}") from None


def spread_map(value: Value) -> SpreadMap:
    if not isinstance(value, Mapping):
        raise TypeError(f"cannot spread-map the type {type(value).__name__} with value {value!r}")
    return SpreadMap(dict(value))


def despread(values) -> list:
    expanded = []
    for v in values:
        if isinstance(v, SpreadList):
            expanded.extend(v.items)
        else:
            expanded.append(v)
    return expanded


class SpreadEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        (self.operand,) = node.operands
        self.expand = spread_map if node.kind is NodeKind.SPREAD_MAP else spread_list
        self.loc = node.loc
        self.env = env
        self.k = k

    def fix(self, v: Value) -> Next:
        return self.dispatch(self.env, self.loc, self.k, self.expand, v)


def spread_form(node: Node, env: Env, k) -> Next:
    g = SpreadEval(node, env, k)
    return g.then(g.operand, env, g.fix)


class CollectionLiteralEval(ContinuationGroup):
    """Evaluates items left to right, then builds a list or a dict."""

    def __init__(self, node: Node, env: Env, k):
        (self.items,) = node.operands
        self.is_map = node.kind is NodeKind.MAP
        self.env = env
        self.k = k
        self.values = []

    def next_item(self) -> Next:
        if len(self.values) == len(self.items):
            return self.k(self.build())
        return self.then(self.items[len(self.values)], self.env, self.fix_item)

    def fix_item(self, v: Value) -> Next:
        self.values.append(v)
        return self.next_item()

    def build(self):
        if not self.is_map:
            return despread(self.values)
        result = {}
        i = 0
        while i < len(self.values):
            if self.items[i].kind is NodeKind.SPREAD_MAP:
                result.update(self.values[i].entries)
                i += 1
            else:
                result[self.values[i]] = self.values[i + 1]
                i += 2
        return result


def collection_literal_form(node: Node, env: Env, k) -> Next:
    return CollectionLiteralEval(node, env, k).next_item()


def make_range(start, stop, inclusive: bool) -> range:
    return range(start, stop + 1 if inclusive else stop)


class RangeEval(ContinuationGroup):
    def __init__(self, node: Node, env: Env, k):
        self.start, self.stop, self.inclusive = node.operands
        self.loc = node.loc
        self.env = env
        self.k = k

    def fix_start(self, start: Value) -> Next:
        self.lower = start
        return self.then(self.stop, self.env, self.fix_stop)

    def fix_stop(self, stop: Value) -> Next:
        return self.dispatch(self.env, self.loc, self.k, make_range, self.lower, stop, self.inclusive)


def range_form(node: Node, env: Env, k) -> Next:
    g = RangeEval(node, env, k)
    return g.then(g.start, env, g.fix_start)
