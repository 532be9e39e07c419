import pytest
from hypothesis import given, settings, strategies as st

from strand import interpreter
from strand.cursor import Cursor
from strand.factory import NodeFactory
from strand.types.location import MethodLocation
from strand.types.outcome import Outcome

SCRIPT = MethodLocation("Script1", "run", "Script1.strand")


def add_one(outcome):
    return Outcome(outcome.normal + 1)


def as_error(outcome):
    return Outcome(abnormal=LookupError(outcome.normal))


def waiting_for_input(b, times=2):
    """x = suspend("ready"); return x * times"""
    return b.sequence(
        b.declare_variable(1, None, "x", b.suspend(1, b.constant("ready"))),
        b.return_(2, b.multiply(2, b.local_variable(2, "x"), b.constant(times))),
    )


def suspended(node):
    cursor = Cursor.start(node)
    assert cursor.resume().normal == "ready"
    return cursor


def test_result_of_first_program_resumes_the_second(driver, b):
    then = suspended(waiting_for_input(b))
    composed = Cursor.start(b.return_(1, b.constant(21))).compose(then)
    out = driver.adopt(composed).resume()
    assert out.normal == 42
    assert not driver.is_resumable()


def test_first_program_without_explicit_return(driver, b):
    then = suspended(waiting_for_input(b))
    composed = interpreter.compose(Cursor.start(b.plus(1, b.constant(20), b.one())), then)
    assert driver.adopt(composed).resume().normal == 42


def test_first_program_may_suspend_on_its_own(driver, b):
    first = Cursor.start(
        b.return_(1, b.plus(1, b.suspend(1, b.constant("first is waiting")), b.one()))
    )
    driver.adopt(first.compose(suspended(waiting_for_input(b))))
    assert driver.resume().normal == "first is waiting"
    assert driver.is_resumable()
    assert driver.resume(41).normal == 84
    assert not driver.is_resumable()


def test_unhandled_exception_is_thrown_into_the_second_program(driver, b):
    then = suspended(
        b.try_catch(
            b.suspend(1, b.constant("ready")),
            None,
            b.catch(ValueError, "e", b.return_(2, b.constant("recovered"))),
        )
    )
    first = Cursor.start(b.throw_(1, b.new_(1, ValueError, b.constant("boom"))))
    assert driver.adopt(first.compose(then)).resume().normal == "recovered"


def test_mapper_rewrites_the_outcome(driver, b):
    then = suspended(waiting_for_input(b))
    composed = Cursor.start(b.constant(20)).compose(then, add_one)
    assert driver.adopt(composed).resume().normal == 42


def test_mapper_can_turn_a_value_into_an_error(b):
    then = suspended(waiting_for_input(b))
    out = Cursor.start(b.constant("key")).compose(then, as_error).resume()
    assert isinstance(out.abnormal, LookupError)


def broken_mapper(outcome):
    raise RuntimeError("mapper failed")


def test_failing_mapper_terminates_the_cursor(b):
    then = suspended(waiting_for_input(b))
    composed = Cursor.start(b.constant(1)).compose(then, broken_mapper)
    with pytest.raises(RuntimeError, match="mapper failed"):
        composed.resume()
    assert not composed.is_resumable()


def test_compositions_chain(driver, b):
    first = Cursor.start(b.return_(1, b.one()))
    middle = suspended(waiting_for_input(b, times=3))
    last = suspended(waiting_for_input(b, times=10))
    composed = first.compose(middle).compose(last)
    assert driver.adopt(composed).resume().normal == 30


def test_compose_nested_on_the_right(driver, b):
    first = Cursor.start(b.constant(2))
    middle = suspended(waiting_for_input(b, times=3))
    last = suspended(waiting_for_input(b, times=10))
    composed = first.compose(middle.compose(last))
    assert driver.adopt(composed).resume().normal == 60


@given(st.integers(min_value=-10**6, max_value=10**6), st.integers(min_value=-100, max_value=100))
@settings(deadline=None, max_examples=30)
def test_composition_equals_running_one_after_the_other(n, m):
    b = NodeFactory(SCRIPT)
    first_program = b.return_(1, b.multiply(1, b.constant(n), b.two()))

    def second_program():
        return b.sequence(
            b.declare_variable(1, None, "x", b.suspend(1, b.constant("ready"))),
            b.return_(2, b.plus(2, b.multiply(2, b.local_variable(2, "x"), b.constant(3)), b.constant(m))),
        )

    composed = Cursor.start(first_program).compose(suspended(second_program())).resume()

    handed_over = Cursor.start(first_program).resume().normal
    sequential = suspended(second_program()).resume(handed_over)

    assert composed == sequential == Outcome(n * 2 * 3 + m)
