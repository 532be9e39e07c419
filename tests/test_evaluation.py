import pytest

from strand.cursor import Cursor
from strand.factory import NodeFactory
from strand.types.errors import StrandStructureError
from strand.types.location import MethodLocation


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    @property
    def norm1(self):
        return abs(self.x) + abs(self.y)

    def shifted(self, dx):
        return Point(self.x + dx, self.y)


class Registry:
    count = 0


_g = NodeFactory(MethodLocation("Greeter", "greet", "Greeter.strand"))


class Greeter:
    # an interpreted method: `this` is bound to the receiver
    greet = _g.function(
        "greet",
        ["name"],
        _g.return_(3, _g.plus(3, _g.property(3, _g.this_(3), "greeting"), _g.local_variable(3, "name"))),
    )

    def __init__(self, greeting):
        self.greeting = greeting


def run(node):
    return Cursor.start(node).run()


def test_constant(driver, b):
    out = driver.start(b.constant(3)).resume()
    assert out.is_success
    assert out.normal == 3
    assert not driver.is_resumable()


def test_for_loop_sum(driver, b):
    program = b.sequence(
        b.declare_variable(1, int, "sum", b.zero()),
        b.for_loop(
            None,
            b.declare_variable(2, int, "x", b.zero()),
            b.less_than(2, b.local_variable(2, "x"), b.constant(10)),
            b.postfix_inc(2, b.local_variable(2, "x")),
            b.plus_equal(3, b.local_variable(3, "sum"), b.local_variable(3, "x")),
        ),
        b.return_(4, b.local_variable(4, "sum")),
    )
    out = driver.start(program).resume()
    assert out.normal == 45
    assert not driver.is_resumable()


def test_declared_primitive_defaults_and_casts(b):
    program = b.sequence(
        b.declare_variable(1, int, "i"),
        b.declare_variable(2, float, "f", b.constant(3)),
        b.declare_variable(3, bool, "flag"),
        b.declare_variable(4, None, "anything"),
        b.return_(5, b.list_(5, *(b.local_variable(5, n) for n in ("i", "f", "flag", "anything")))),
    )
    i, f, flag, anything = run(program)
    assert i == 0
    assert f == 3.0 and isinstance(f, float)
    assert flag is False
    assert anything is None


def test_assignment_evaluates_to_stored_value(b):
    program = b.sequence(
        b.declare_variable(1, None, "x"),
        b.return_(2, b.assign(2, b.local_variable(2, "x"), b.constant(5))),
    )
    assert run(program) == 5


def test_compound_assignment(b):
    x = lambda: b.local_variable(2, "x")
    program = b.sequence(
        b.declare_variable(1, None, "x", b.constant(10)),
        b.minus_equal(2, x(), b.constant(3)),
        b.multiply_equal(2, x(), b.two()),
        b.div_equal(2, x(), b.constant(4)),
        b.return_(3, x()),
    )
    assert run(program) == 3.5


def test_prefix_and_postfix_increments(b):
    x = lambda: b.local_variable(2, "x")
    program = b.sequence(
        b.declare_variable(1, int, "x", b.constant(5)),
        b.declare_variable(2, None, "a", b.postfix_inc(2, x())),
        b.declare_variable(3, None, "c", b.prefix_inc(3, x())),
        b.declare_variable(4, None, "d", b.prefix_dec(4, x())),
        b.declare_variable(5, None, "e", b.postfix_dec(5, x())),
        b.return_(6, b.list_(6, *(b.local_variable(6, n) for n in ("a", "c", "d", "e", "x")))),
    )
    assert run(program) == [5, 7, 6, 6, 5]


def test_block_scope_shadows_and_restores(b):
    program = b.sequence(
        b.declare_variable(1, None, "x", b.one()),
        b.block(b.declare_variable(2, None, "x", b.two())),
        b.return_(3, b.local_variable(3, "x")),
    )
    assert run(program) == 1


def test_block_assigns_through_to_outer_variable(b):
    program = b.sequence(
        b.declare_variable(1, None, "x", b.one()),
        b.block(b.set_local_variable(2, "x", b.constant(7))),
        b.return_(3, b.local_variable(3, "x")),
    )
    assert run(program) == 7


def test_property_attribute_and_index_lvalues(driver, b):
    p = lambda: b.local_variable(2, "p")
    program = b.sequence(
        b.declare_variable(1, None, "p", b.new_(1, Point, b.one(), b.two())),
        b.set_property(2, p(), "x", b.constant(10)),
        b.assign(3, b.attribute(3, p(), "y"), b.constant(5)),
        b.declare_variable(4, None, "lst", b.list_(4, b.one(), b.two(), b.constant(3))),
        b.assign(5, b.array(5, b.local_variable(5, "lst"), b.zero()), b.constant(9)),
        b.declare_variable(6, None, "m", b.map_(6, b.constant("a"), b.one())),
        b.assign(7, b.array(7, b.local_variable(7, "m"), b.constant("b")), b.two()),
        b.return_(
            8,
            b.list_(
                8,
                b.property(8, p(), "x"),
                b.property(8, p(), "norm1"),
                b.attribute(8, p(), "y"),
                b.array(8, b.local_variable(8, "lst"), b.zero()),
                b.array(8, b.local_variable(8, "m"), b.constant("b")),
                b.property(8, b.local_variable(8, "m"), "a"),
            ),
        ),
    )
    assert driver.start(program).resume().normal == [10, 15, 5, 9, 2, 1]


def test_static_field(b, monkeypatch):
    monkeypatch.setattr(Registry, "count", 0)
    program = b.sequence(
        b.assign(1, b.static_field(1, Registry, "count"), b.constant(7)),
        b.return_(2, b.prefix_inc(2, b.static_field(2, Registry, "count"))),
    )
    assert run(program) == 8
    assert Registry.count == 8


def test_safe_navigation(b):
    program = b.sequence(
        b.declare_variable(1, None, "p"),
        b.return_(
            2,
            b.list_(
                2,
                b.property(2, b.local_variable(2, "p"), "x", safe=True),
                b.function_call(2, b.local_variable(2, "p"), "shifted", b.one(), safe=True),
            ),
        ),
    )
    assert run(program) == [None, None]


def test_method_calls_on_host_objects(b):
    program = b.list_(
        1,
        b.property(1, b.function_call(1, b.new_(1, Point, b.one(), b.two()), "shifted", b.constant(3)), "x"),
        b.function_call(1, b.constant("hello"), "upper"),
        b.call(1, b.constant(len), b.list_(1, b.one(), b.two())),
        b.static_call(1, int, "from_bytes", b.constant(b"\x01\x00"), b.constant("big")),
    )
    assert run(program) == [4, "HELLO", 2, 256]


def test_method_pointer(b):
    program = b.sequence(
        b.declare_variable(1, None, "up", b.method_pointer(1, b.constant("abc"), "upper")),
        b.return_(2, b.call(2, b.local_variable(2, "up"))),
    )
    assert run(program) == "ABC"


def test_interpreted_method_binds_this(driver, b):
    program = b.function_call(1, b.new_(1, Greeter, b.constant("hello, ")), "greet", b.constant("world"))
    assert driver.start(program).resume().normal == "hello, world"


def test_closure_call(driver, b):
    program = b.sequence(
        b.declare_variable(
            1,
            None,
            "add",
            b.closure(1, ["a", "b"], b.return_(1, b.plus(1, b.local_variable(1, "a"), b.local_variable(1, "b")))),
        ),
        b.return_(2, b.call(2, b.local_variable(2, "add"), b.two(), b.constant(3))),
    )
    assert driver.start(program).resume().normal == 5


def test_closure_writes_captured_variable(driver, b):
    program = b.sequence(
        b.declare_variable(1, None, "counter", b.zero()),
        b.declare_variable(2, None, "inc", b.closure(2, [], b.plus_equal(2, b.local_variable(2, "counter"), b.one()))),
        b.call(3, b.local_variable(3, "inc")),
        b.call(4, b.local_variable(4, "inc")),
        b.return_(5, b.local_variable(5, "counter")),
    )
    assert driver.start(program).resume().normal == 2


def test_function_without_return_yields_last_value(b):
    double = b.function("double", ["n"], b.multiply(1, b.local_variable(1, "n"), b.two()))
    assert run(b.call(2, b.constant(double), b.constant(21))) == 42


@pytest.mark.parametrize(
    "op, lhs, rhs, expected",
    [
        ("+", 1, 2, 3),
        ("-", 5, 7, -2),
        ("*", 3, 4, 12),
        ("/", 7, 2, 3.5),
        ("//", 7, 2, 3),
        ("%", 7, 3, 1),
        ("**", 2, 5, 32),
        ("==", 1, 1, True),
        ("!=", 1, 1, False),
        ("<=", 2, 2, True),
        (">", 1, 2, False),
        ("<<", 1, 3, 8),
        (">>", 16, 2, 4),
        ("&", 6, 3, 2),
        ("|", 6, 3, 7),
        ("^", 6, 3, 5),
        ("in", 2, [1, 2], True),
        ("not in", 2, [1, 2], False),
        ("+", "ab", "cd", "abcd"),
    ],
)
def test_binary_operators(b, op, lhs, rhs, expected):
    assert run(b.binary(1, op, b.constant(lhs), b.constant(rhs))) == expected


def test_unary_operators(b):
    program = b.list_(
        1,
        b.unary_minus(1, b.constant(4)),
        b.unary_plus(1, b.constant(-4)),
        b.bitwise_negation(1, b.zero()),
    )
    assert run(program) == [-4, -4, -1]


def test_logical_operators_short_circuit(b):
    boom = b.div(1, b.one(), b.zero())
    program = b.list_(
        1,
        b.logical_and(1, b.false_(), boom),
        b.logical_or(1, b.true_(), boom),
        b.logical_and(1, b.one(), b.constant("x")),
        b.logical_or(1, b.zero(), b.constant("")),
        b.not_(1, b.zero()),
    )
    assert run(program) == [False, True, True, False, True]


def test_ternary_and_elvis(b):
    program = b.list_(
        1,
        b.ternary(b.compare_equal(1, b.one(), b.one()), b.constant("yes"), b.constant("no")),
        b.ternary(b.constant([]), b.constant("yes"), b.constant("no")),
        b.elvis(1, b.constant(""), b.constant("fallback")),
        b.elvis(1, b.constant("value"), b.constant("fallback")),
    )
    assert run(program) == ["yes", "no", "fallback", "value"]


def test_cast_and_instance_of(b):
    program = b.list_(
        1,
        b.cast(1, b.constant("12"), int, coerce=True),
        b.cast(1, b.constant(3), float),
        b.cast(1, b.null(), str),
        b.instance_of(1, b.list_(1), list),
        b.instance_of(1, b.constant("x"), int),
    )
    assert run(program) == [12, 3.0, None, True, False]


def test_failed_cast_is_a_program_exception(b):
    out = Cursor.start(b.cast(1, b.constant("x"), int)).resume()
    assert not out.is_success
    assert isinstance(out.abnormal, TypeError)


def test_collection_literals(b):
    program = b.list_(
        1,
        b.list_(1, b.one(), b.plus(1, b.one(), b.one())),
        b.map_(1, b.constant("a"), b.one(), b.constant("b"), b.two()),
        b.range_(1, b.one(), b.constant(3)),
        b.range_(1, b.one(), b.constant(3), inclusive=False),
    )
    assert run(program) == [[1, 2], {"a": 1, "b": 2}, range(1, 4), range(1, 3)]


def test_map_literal_needs_pairs(b):
    with pytest.raises(StrandStructureError):
        b.map_(1, b.constant("a"))


def test_only_assignable_nodes_can_be_assigned(b):
    with pytest.raises(StrandStructureError):
        b.assign(1, b.constant(1), b.two())


def test_assert_passes_and_fails(b):
    ok = Cursor.start(b.sequence(b.assert_(1, b.true_(), None, "true"), b.constant("fine"))).resume()
    assert ok.normal == "fine"

    with_message = Cursor.start(
        b.assert_(1, b.compare_equal(1, b.one(), b.two()), b.constant("math is broken"), "1 == 2")
    ).resume()
    assert isinstance(with_message.abnormal, AssertionError)
    assert str(with_message.abnormal) == "math is broken. Expression: 1 == 2"

    bare = Cursor.start(b.assert_(1, b.false_(), None, "false")).resume()
    assert str(bare.abnormal) == "assert false"


def test_node_trees_are_reusable(b):
    shared = b.plus(1, b.one(), b.two())
    program = b.list_(1, shared, b.multiply(1, shared, shared))
    assert run(program) == [3, 9]
    assert run(program) == [3, 9]


def collect(*args):
    return list(args)


def test_spread_arguments(driver, b):
    program = b.call(
        1,
        b.constant(collect),
        b.zero(),
        b.spread(1, b.list_(1, b.one(), b.two())),
        b.suspend(1, b.constant("more?")),
        b.spread(1, b.range_(1, b.constant(4), b.constant(5))),
    )
    driver.start(program)
    assert driver.resume().normal == "more?"
    assert driver.resume(3).normal == [0, 1, 2, 3, 4, 5]


def test_spread_into_interpreted_function_and_constructor(b):
    f = b.function("f", ["x", "y"], b.return_(1, b.minus(1, b.local_variable(1, "x"), b.local_variable(1, "y"))))
    assert run(b.call(1, b.constant(f), b.spread(1, b.constant((10, 4))))) == 6
    assert run(b.property(2, b.new_(2, Point, b.spread(2, b.list_(2, b.one(), b.constant(-2)))), "norm1")) == 3


def test_spread_counts_towards_arity(b):
    f = b.function("f", ["x"], b.return_(1, b.local_variable(1, "x")))
    out = Cursor.start(b.call(1, b.constant(f), b.spread(1, b.list_(1, b.one(), b.two())))).resume()
    assert isinstance(out.abnormal, TypeError)
    assert str(out.abnormal) == "f() takes 1 arguments but 2 were given"


def test_spread_in_collection_literals(b):
    assert run(b.list_(1, b.zero(), b.spread(1, b.range_(1, b.one(), b.two())), b.spread(1, b.list_(1)))) == [0, 1, 2]
    merged = b.map_(
        1,
        b.constant("a"),
        b.zero(),
        b.spread_map(1, b.constant({"a": 1, "b": 2})),
        b.constant("b"),
        b.constant(20),
    )
    assert run(merged) == {"a": 1, "b": 20}


@pytest.mark.parametrize(
    "spread, value, message",
    [
        ("spread", {"a": 1}, "did you mean to use the spread-map operator instead?"),
        ("spread", 7, "cannot spread the type int with value 7"),
        ("spread_map", [1, 2], "cannot spread-map the type list"),
    ],
)
def test_spreading_the_wrong_type_is_a_program_exception(b, spread, value, message):
    node = getattr(b, spread)(2, b.constant(value))
    program = b.try_catch(
        b.list_(2, node) if spread == "spread" else b.map_(2, node),
        None,
        b.catch(TypeError, "e", b.call(3, b.constant(str), b.local_variable(3, "e"))),
    )
    assert message in run(program)


def test_map_literal_spread_stands_alone(b):
    with pytest.raises(StrandStructureError):
        b.map_(1, b.spread_map(1, b.constant({})), b.constant("a"))
