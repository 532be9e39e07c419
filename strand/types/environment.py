"""Runtime environments for Strand.

An Env is one frame of a chained scope. Besides local variables it records the
control addresses of the code it belongs to: where `return` goes, where the
nearest (or a labelled) loop breaks and continues to, and which continuation
handles an exception of a given type. Every Env is plain data, so a whole chain
pickles along with the cursor that owns it.

Two kinds of link exist. Call frames (CallEnv) link to their *caller* and start
a fresh variable scope; proxy frames (blocks, loops, switch cases, try blocks)
link to their *parent* and forward whatever they do not override.
"""

from __future__ import annotations

from io import StringIO
from typing import Any, Optional

from strand import Value
from strand.config import get_trace_depth
from strand.types.continuation import HALT, UNHANDLED, ValueBound
from strand.types.errors import StrandStructureError, StrandUnboundVariable
from strand.types.location import SourceLocation, StackFrame
from strand.types.next import Next
from strand.types.node import Node

# Slot defaults for declared primitive types
_DEFAULTS: dict[Any, Value] = {bool: False, int: 0, float: 0.0}


def default_value(type_: Any) -> Value:
    return _DEFAULTS.get(type_)


class Env:
    """Common surface of every environment frame."""

    __slots__ = ()

    depth: int

    def declare(self, name: str, type_: Any = None) -> None:
        raise NotImplementedError

    def get(self, name: str) -> Value:
        raise NotImplementedError

    def set(self, name: str, value: Value) -> None:
        raise NotImplementedError

    def get_type(self, name: str) -> Any:
        raise NotImplementedError

    def closure_owner(self) -> Value:
        raise NotImplementedError

    def return_address(self):
        raise NotImplementedError

    def break_address(self, label: Optional[str] = None):
        raise NotImplementedError

    def continue_address(self, label: Optional[str] = None):
        raise NotImplementedError

    @property
    def resolver(self):
        raise NotImplementedError

    # --- links used by the iterative walks below ---

    def handler_parent(self) -> Optional[Env]:
        raise NotImplementedError

    def local_handler(self, exc_type: type):
        return None

    def trace_link(self) -> tuple[Optional[StackFrame], Optional[Env]]:
        raise NotImplementedError

    def exception_handler(self, exc_type: type):
        """Find the continuation that handles `exc_type`.

        Walks outward across call boundaries. Every try block passed on the way
        contributes its finally block, innermost first, and the root falls back
        to UNHANDLED which terminates the program.
        """
        passed: list[TryBlockEnv] = []
        env: Optional[Env] = self
        handler = None
        while env is not None:
            handler = env.local_handler(exc_type)
            if handler is not None:
                break
            if isinstance(env, TryBlockEnv) and env.finally_ is not None:
                passed.append(env)
            env = env.handler_parent()
        if handler is None:
            handler = UNHANDLED
        for t in reversed(passed):
            handler = t.with_finally(handler)
        return handler

    def build_stack_trace(self, max_depth: int) -> list[StackFrame]:
        """One frame per call boundary, innermost first."""
        frames: list[StackFrame] = []
        env: Optional[Env] = self
        while env is not None and len(frames) < max_depth:
            frame, env = env.trace_link()
            if frame is not None:
                frames.append(frame)
        return frames


class CallEnv(Env):
    """A frame created by a function or closure call."""

    __slots__ = ("caller", "_return_address", "call_site", "_resolver", "depth", "vars", "types")

    def __init__(
        self,
        caller: Optional[Env],
        return_address,
        call_site: Optional[SourceLocation],
        resolver=None,
    ):
        self.caller = caller
        self._return_address = return_address
        self.call_site = call_site
        if resolver is None and caller is not None:
            resolver = caller.resolver
        self._resolver = resolver
        self.depth = caller.depth + 1 if caller is not None else 1
        self.vars: dict[str, Value] = {}
        self.types: dict[str, Any] = {}

    def declare(self, name: str, type_: Any = None) -> None:
        self.types[name] = type_
        self.vars[name] = default_value(type_)

    def get(self, name: str) -> Value:
        try:
            return self.vars[name]
        except KeyError:
            raise StrandUnboundVariable(f"No such variable: {name}") from None

    def set(self, name: str, value: Value) -> None:
        if name not in self.vars:
            raise StrandUnboundVariable(f"Cannot set undeclared variable {name}")
        self.vars[name] = value

    def get_type(self, name: str) -> Any:
        return self.types.get(name)

    def return_address(self):
        return self._return_address

    def break_address(self, label: Optional[str] = None):
        raise StrandStructureError("unexpected break statement")

    def continue_address(self, label: Optional[str] = None):
        raise StrandStructureError("unexpected continue statement")

    @property
    def resolver(self):
        return self._resolver

    def handler_parent(self) -> Optional[Env]:
        return self.caller

    def trace_link(self) -> tuple[Optional[StackFrame], Optional[Env]]:
        frame = self.call_site.to_frame() if self.call_site is not None else None
        return frame, self.caller

    def _write_vars(self, out: StringIO) -> None:
        for name, value in self.vars.items():
            out.write(f"  {name}: {value!r}\n")

    def __str__(self) -> str:
        out = StringIO()
        out.write(f"{type(self).__name__}(depth={self.depth}, call_site={self.call_site})\n")
        self._write_vars(out)
        return out.getvalue()


class FunctionCallEnv(CallEnv):
    """Frame of a function call; binds `this` to the receiver."""

    __slots__ = ()

    def __init__(self, caller, return_address, call_site, this: Value, resolver=None):
        super().__init__(caller, return_address, call_site, resolver)
        self.vars["this"] = this

    def closure_owner(self) -> Value:
        return self.vars["this"]


class ClosureCallEnv(CallEnv):
    """Frame of a closure call; reads through to the captured environment."""

    __slots__ = ("captured", "closure")

    def __init__(self, caller, return_address, call_site, captured: Env, closure: Value):
        super().__init__(caller, return_address, call_site)
        self.captured = captured
        self.closure = closure

    def get(self, name: str) -> Value:
        if name in self.vars:
            return self.vars[name]
        return self.captured.get(name)

    def set(self, name: str, value: Value) -> None:
        if name in self.vars:
            self.vars[name] = value
        else:
            self.captured.set(name, value)

    def get_type(self, name: str) -> Any:
        if name in self.vars:
            return self.types.get(name)
        return self.captured.get_type(name)

    def closure_owner(self) -> Value:
        return self.closure


class ProxyEnv(Env):
    """A frame that forwards everything to its parent unless overridden."""

    __slots__ = ("parent", "depth")

    def __init__(self, parent: Env):
        self.parent = parent
        self.depth = parent.depth

    def declare(self, name: str, type_: Any = None) -> None:
        self.parent.declare(name, type_)

    def get(self, name: str) -> Value:
        return self.parent.get(name)

    def set(self, name: str, value: Value) -> None:
        self.parent.set(name, value)

    def get_type(self, name: str) -> Any:
        return self.parent.get_type(name)

    def closure_owner(self) -> Value:
        return self.parent.closure_owner()

    def return_address(self):
        return self.parent.return_address()

    def break_address(self, label: Optional[str] = None):
        return self.parent.break_address(label)

    def continue_address(self, label: Optional[str] = None):
        return self.parent.continue_address(label)

    @property
    def resolver(self):
        return self.parent.resolver

    def handler_parent(self) -> Optional[Env]:
        return self.parent

    def trace_link(self) -> tuple[Optional[StackFrame], Optional[Env]]:
        return None, self.parent


class BlockScopeEnv(ProxyEnv):
    """Lexical block with its own variables."""

    __slots__ = ("vars", "types")

    def __init__(self, parent: Env):
        super().__init__(parent)
        self.vars: dict[str, Value] = {}
        self.types: dict[str, Any] = {}

    def declare(self, name: str, type_: Any = None) -> None:
        self.types[name] = type_
        self.vars[name] = default_value(type_)

    def get(self, name: str) -> Value:
        if name in self.vars:
            return self.vars[name]
        return self.parent.get(name)

    def set(self, name: str, value: Value) -> None:
        if name in self.vars:
            self.vars[name] = value
        else:
            self.parent.set(name, value)

    def get_type(self, name: str) -> Any:
        if name in self.vars:
            return self.types.get(name)
        return self.parent.get_type(name)


class LoopBlockScopeEnv(BlockScopeEnv):
    __slots__ = ("label", "break_k", "continue_k")

    def __init__(self, parent: Env, label: Optional[str], break_k, continue_k):
        super().__init__(parent)
        self.label = label
        self.break_k = break_k
        self.continue_k = continue_k

    def _matches(self, label: Optional[str]) -> bool:
        return label is None or label == self.label

    def break_address(self, label: Optional[str] = None):
        if self._matches(label):
            return self.break_k
        return self.parent.break_address(label)

    def continue_address(self, label: Optional[str] = None):
        if self._matches(label):
            return self.continue_k
        return self.parent.continue_address(label)


class CaseEnv(ProxyEnv):
    """Switch body: `break` leaves the switch, `continue` goes to the enclosing loop."""

    __slots__ = ("label", "break_k")

    def __init__(self, parent: Env, label: Optional[str], break_k):
        super().__init__(parent)
        self.label = label
        self.break_k = break_k

    def break_address(self, label: Optional[str] = None):
        if label is None or label == self.label:
            return self.break_k
        return self.parent.break_address(label)


class TryBlockEnv(ProxyEnv):
    """Body of a try block: ordered catch handlers plus an optional finally."""

    __slots__ = ("handlers", "finally_")

    def __init__(self, parent: Env, finally_: Optional[Node]):
        super().__init__(parent)
        self.handlers: list[tuple[Any, Any]] = []
        self.finally_ = finally_

    def add_handler(self, exc_type: Any, k) -> None:
        self.handlers.append((exc_type, k))

    def local_handler(self, exc_type: type):
        # First matching clause in declaration order wins, as with `except`.
        for caught, k in self.handlers:
            if issubclass(exc_type, caught):
                return k
        return None

    def with_finally(self, k):
        if self.finally_ is None:
            return k
        return Finally(self.finally_, self.parent, k)

    def return_address(self):
        return self.with_finally(self.parent.return_address())

    def break_address(self, label: Optional[str] = None):
        return self.with_finally(self.parent.break_address(label))

    def continue_address(self, label: Optional[str] = None):
        return self.with_finally(self.parent.continue_address(label))


class Finally:
    """Runs a finally block in the enclosing environment, then passes the value on."""

    __slots__ = ("body", "env", "k")

    def __init__(self, body: Node, env: Env, k):
        self.body = body
        self.env = env
        self.k = k

    def __call__(self, value: Value) -> Next:
        return Next(self.body, self.env, ValueBound(self.k, value))


def empty_env(resolver=None, this: Value = None) -> FunctionCallEnv:
    """Root environment of a fresh program."""
    return FunctionCallEnv(None, HALT, None, this, resolver)


def attach_trace(exc: BaseException, loc: Optional[SourceLocation], env: Env, max_depth: int) -> None:
    """Record the logical stack on `exc` unless one is already there."""
    if getattr(exc, "strand_trace", None) is not None:
        return
    frames = [loc.to_frame()] if loc is not None and loc.line >= 0 else []
    frames.extend(env.build_stack_trace(max_depth))
    try:
        exc.strand_trace = frames
    except AttributeError:
        # exceptions without a __dict__ just go without a trace
        pass


def throw(env: Env, exc: BaseException, loc: Optional[SourceLocation] = None) -> Next:
    """Route a program-level exception to the handler `env` has for it."""
    attach_trace(exc, loc, env, get_trace_depth())
    return env.exception_handler(type(exc))(exc)
