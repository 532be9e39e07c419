"""Program cursor: the resumable handle on a running program.

A Cursor holds the (environment, continuation) pair captured at the program's
latest suspension. Resuming injects a value or an exception there and drives the
trampoline until the next yield. Everything a cursor references is plain data,
so it can be saved with strand.persistence between any two resumes.

States:

* fresh: created from a node tree and not yet resumed;
* suspended: has yielded and can be resumed again;
* terminated: the program finished; resuming raises StrandStateError.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from strand import Value
from strand.config import get_step_limit, get_trace_depth
from strand.evaluation.evaluator import run, run_bounded
from strand.evaluation.node_forms.constant_forms import SUSPEND_VALUE
from strand.evaluation.resolver import DefaultResolver, Resolver
from strand.types.callable import Function, Invocation
from strand.types.continuation import HALT
from strand.types.environment import Env, empty_env
from strand.types.errors import StrandError, StrandStateError
from strand.types.location import MethodLocation, StackFrame
from strand.types.next import Next
from strand.types.node import Node, NodeKind
from strand.types.outcome import Outcome

logger = logging.getLogger(__name__)

SUSPEND_LOCATION = MethodLocation("Cursor", "suspend", "<strand>")

SUSPEND = Function((SUSPEND_VALUE,), Node(NodeKind.SUSPEND, (), SUSPEND_LOCATION.at(0)), "suspend", SUSPEND_LOCATION)

OutcomeMapper = Callable[[Outcome], Outcome]


def suspend(value: Value) -> Invocation:
    """Pause the running program, handing `value` to the caller of resume.

    Return this from host code reached through the resolver (a method, a
    safepoint hook). The value passed to the next resume becomes the result of
    the suspending call.
    """
    return Invocation(SUSPEND, None, (value,))


def _terminated(n: Next) -> bool:
    return n.is_yield and n.k is HALT and n.env is None


class Splice:
    """Where a composed cursor carries on once its first program has ended."""

    __slots__ = ("then", "mapper", "done")

    def __init__(self, then: Cursor, mapper: Optional[OutcomeMapper]):
        self.then = then
        self.mapper = mapper
        self.done = False

    def transfer(self, outcome: Outcome) -> Next:
        self.done = True
        if self.mapper is not None:
            outcome = self.mapper(outcome)
        return outcome.resume_from(self.then.env, self.then.k)


class ConcatenatedContinuation:
    """Runs `first`; when it terminates, feeds its outcome into a second cursor.

    Non-terminal steps and intermediate yields pass through unchanged except
    that their continuation is wrapped again, so the splice stays in place for
    as long as the first program runs.
    """

    __slots__ = ("first", "splice")

    def __init__(self, first, splice: Splice):
        self.first = first
        self.splice = splice

    def __call__(self, value: Value) -> Next:
        n = self.first(value)
        if n.is_yield:
            if _terminated(n):
                return self.splice.transfer(n.outcome)
            return Next.yield0(n.outcome, n.env, ConcatenatedContinuation(n.k, self.splice))
        return Next(n.node, n.env, ConcatenatedContinuation(n.k, self.splice))


class Cursor:

    def __init__(self, env: Optional[Env], k, splices: tuple[Splice, ...] = ()):
        self.env = env
        self.k = k
        self.splices = splices
        self._running = False

    @classmethod
    def start(cls, node: Node, resolver: Optional[Resolver] = None, env: Optional[Env] = None) -> Cursor:
        """A fresh cursor that will evaluate `node` on its first resume."""
        if env is None:
            env = empty_env(resolver if resolver is not None else DefaultResolver())
        logger.debug("starting program %r", node)
        return cls(env, Next(node, env, HALT))

    @classmethod
    def from_next(cls, n: Next) -> Cursor:
        return cls(n.env, n)

    @property
    def running(self) -> bool:
        return self._running

    def is_resumable(self) -> bool:
        return self.k is not HALT or self.env is not None

    def run0(self, outcome: Outcome, max_steps: Optional[int] = None) -> Outcome:
        """Resume with `outcome` and drive the program to its next yield."""
        if not self.is_resumable():
            raise StrandStateError("Cursor has terminated and cannot be resumed")
        if self._running:
            raise StrandStateError("Cursor is already running")
        drive = run if max_steps is None else lambda n: run_bounded(n, max_steps)
        self._running = True
        try:
            n = drive(outcome.resume_from(self.env, self.k))
            # a program can end without passing through its concatenation
            # (top-level return, unhandled exception); splice it here instead
            for splice in self.splices:
                if not _terminated(n):
                    break
                if not splice.done:
                    n = drive(splice.transfer(n.outcome))
        except StrandError:
            # structural errors abort the whole run
            self.env, self.k = None, HALT
            raise
        except Exception as e:
            # program exceptions never get here; anything that does (a failing
            # mapper, a host RecursionError) leaves no state worth resuming
            logger.warning("program aborted by %s: %s", type(e).__name__, e)
            self.env, self.k = None, HALT
            raise
        finally:
            self._running = False

        self.env, self.k = n.env, n.k
        if self.is_resumable():
            logger.debug("program yielded %s", n.outcome)
        else:
            logger.debug("program terminated with %s", n.outcome)
        return n.outcome

    def resume(self, value: Value = None) -> Outcome:
        return self.run0(Outcome(value))

    def resume_with_error(self, error: BaseException) -> Outcome:
        return self.run0(Outcome(abnormal=error))

    def run(self, value: Value = None) -> Value:
        """Resume with `value`; return what the program yields or raise what it throws."""
        return self.resume(value).replay()

    def run_by_throw(self, error: BaseException) -> Value:
        return self.resume_with_error(error).replay()

    def run_bounded(self, value: Value = None, max_steps: Optional[int] = None) -> Outcome:
        """Resume, failing with StrandStepLimitExceeded after `max_steps` steps."""
        if max_steps is None:
            max_steps = get_step_limit()
        return self.run0(Outcome(value), max_steps=max_steps)

    def stack_trace(self, max_depth: Optional[int] = None) -> list[StackFrame]:
        """Logical frames at the current suspension, innermost first."""
        if self.env is None:
            return []
        if max_depth is None:
            max_depth = get_trace_depth()
        return self.env.build_stack_trace(max_depth)

    def compose(self, then: Cursor, mapper: Optional[OutcomeMapper] = None) -> Cursor:
        """A cursor that runs this program, then resumes `then` with its outcome.

        Neither program needs to know about the other: whatever this program
        ends with (a value, or an exception it did not handle) is delivered to
        `then` at the point where `then` is suspended.
        """
        splice = Splice(then, mapper)
        return Cursor(
            self.env,
            ConcatenatedContinuation(self.k, splice),
            self.splices + (splice,) + then.splices,
        )

    def __repr__(self) -> str:
        state = "resumable" if self.is_resumable() else "terminated"
        return f"<Cursor {state} k={self.k!r}>"
