import re

import pytest

from strand.cursor import Cursor
from strand.types.errors import StrandStructureError


def run(node):
    return Cursor.start(node).run()


def append(b, line, value_node):
    return b.function_call(line, b.local_variable(line, "log"), "append", value_node)


def with_log(b, *body):
    """Declare `log = []`, run `body`, and return the log."""
    return b.sequence(
        b.declare_variable(1, None, "log", b.list_(1)),
        *body,
        b.return_(99, b.local_variable(99, "log")),
    )


def test_if_else(b):
    def choose(n):
        return b.if_(
            b.greater_than(1, b.constant(n), b.zero()),
            b.constant("positive"),
            b.constant("not positive"),
        )

    assert run(choose(1)) == "positive"
    assert run(choose(0)) == "not positive"
    # a missing else branch evaluates to None
    assert run(b.if_(b.false_(), b.one())) is None


def test_while_with_break_and_continue(driver, b):
    i = lambda: b.local_variable(2, "i")
    program = b.sequence(
        b.declare_variable(1, int, "i"),
        b.declare_variable(1, int, "total"),
        b.while_(
            None,
            b.true_(),
            b.sequence(
                b.prefix_inc(2, i()),
                b.if_(b.greater_than(3, i(), b.constant(10)), b.break_()),
                b.if_(b.compare_equal(4, b.mod(4, i(), b.two()), b.zero()), b.continue_()),
                b.plus_equal(5, b.local_variable(5, "total"), i()),
            ),
        ),
        b.return_(6, b.local_variable(6, "total")),
    )
    assert driver.start(program).resume().normal == 1 + 3 + 5 + 7 + 9


def test_do_while_runs_body_at_least_once(b):
    program = b.sequence(
        b.declare_variable(1, int, "i", b.constant(10)),
        b.do_while(None, b.postfix_inc(2, b.local_variable(2, "i")), b.less_than(3, b.local_variable(3, "i"), b.constant(5))),
        b.return_(4, b.local_variable(4, "i")),
    )
    assert run(program) == 11


def test_for_loop_without_condition_needs_break(b):
    i = lambda: b.local_variable(2, "i")
    program = b.sequence(
        b.declare_variable(1, int, "i"),
        b.for_loop(
            None,
            None,
            None,
            b.postfix_inc(2, i()),
            b.if_(b.compare_equal(2, i(), b.constant(4)), b.break_()),
        ),
        b.return_(3, i()),
    )
    assert run(program) == 4


def test_labelled_break_and_continue(driver, b):
    i = lambda: b.local_variable(3, "i")
    j = lambda: b.local_variable(3, "j")
    program = with_log(
        b,
        b.for_loop(
            "outer",
            b.declare_variable(2, int, "i"),
            b.less_than(2, i(), b.constant(3)),
            b.postfix_inc(2, i()),
            b.for_loop(
                None,
                b.declare_variable(3, int, "j"),
                b.less_than(3, j(), b.constant(3)),
                b.postfix_inc(3, j()),
                b.sequence(
                    b.if_(b.compare_equal(4, j(), b.one()), b.continue_("outer")),
                    b.if_(b.compare_equal(5, i(), b.two()), b.break_("outer")),
                    append(b, 6, b.list_(6, i(), j())),
                ),
            ),
        ),
    )
    assert driver.start(program).resume().normal == [[0, 0], [1, 0]]


def test_for_in_over_list_map_and_range(driver, b):
    def total(collection):
        return b.sequence(
            b.declare_variable(1, None, "sum", b.zero()),
            b.for_in(2, None, None, "x", collection, b.plus_equal(3, b.local_variable(3, "sum"), b.local_variable(3, "x"))),
            b.return_(4, b.local_variable(4, "sum")),
        )

    assert driver.start(total(b.list_(1, b.one(), b.two(), b.constant(3)))).resume().normal == 6
    assert driver.start(total(b.range_(1, b.one(), b.constant(4)))).resume().normal == 10

    keys = with_log(
        b,
        b.for_in(2, None, str, "k", b.map_(2, b.constant("a"), b.one(), b.constant("b"), b.two()), append(b, 3, b.local_variable(3, "k"))),
    )
    assert driver.start(keys).resume().normal == ["a", "b"]


def test_for_in_variable_is_scoped_to_the_loop(b):
    program = b.sequence(
        b.declare_variable(1, None, "x", b.constant("outer")),
        b.for_in(2, None, None, "x", b.list_(2, b.one()), b.noop()),
        b.return_(3, b.local_variable(3, "x")),
    )
    assert run(program) == "outer"


def switch_program(b, subject):
    """case 1 -> a; case 2 -> b; case 3 -> c, break; case 4 -> d; default -> z."""
    return with_log(
        b,
        b.switch_(
            2,
            None,
            b.constant(subject),
            append(b, 9, b.constant("z")),
            b.case_(b.one(), append(b, 3, b.constant("a"))),
            b.case_(b.two(), append(b, 4, b.constant("b"))),
            b.case_(b.constant(3), b.sequence(append(b, 5, b.constant("c")), b.break_())),
            b.case_(b.constant(4), append(b, 6, b.constant("d"))),
        ),
    )


@pytest.mark.parametrize(
    "subject, expected",
    [
        (1, ["a", "b", "c"]),
        (2, ["b", "c"]),
        (3, ["c"]),
        (4, ["d"]),
        (9, ["z"]),
    ],
)
def test_switch_falls_through_until_break(b, subject, expected):
    assert run(switch_program(b, subject)) == expected


@pytest.mark.parametrize(
    "subject, expected",
    [
        ("aaa", "regex"),
        ("hello", "str"),
        (5, "collection"),
        (2.5, "default"),
    ],
)
def test_switch_case_matching(b, subject, expected):
    def case(matcher, result):
        return b.case_(b.constant(matcher), b.return_(2, b.constant(result)))

    program = b.switch_(
        1,
        None,
        b.constant(subject),
        b.return_(3, b.constant("default")),
        case(re.compile("a+"), "regex"),
        case(str, "str"),
        case([4, 5, 6], "collection"),
    )
    assert run(program) == expected


def test_continue_inside_switch_goes_to_enclosing_loop(b):
    x = lambda: b.local_variable(3, "x")
    program = with_log(
        b,
        b.for_in(
            2,
            None,
            None,
            "x",
            b.list_(2, b.one(), b.two(), b.constant(3)),
            b.sequence(
                b.switch_(3, None, x(), None, b.case_(b.two(), b.continue_())),
                append(b, 4, x()),
            ),
        ),
    )
    assert run(program) == [1, 3]


def test_break_outside_a_loop_is_a_structural_error(b):
    cursor = Cursor.start(b.sequence(b.one(), b.break_()))
    with pytest.raises(StrandStructureError):
        cursor.resume()
    assert not cursor.is_resumable()


def test_unknown_label_is_a_structural_error(b):
    program = b.while_("inner", b.true_(), b.break_("nowhere"))
    with pytest.raises(StrandStructureError):
        Cursor.start(program).resume()
