"""Saving and restoring cursors.

The object graph behind a suspended cursor is cyclic (environments point at
continuations that point back at environments) and as deep as the program's
call stack. Rather than handing that graph to pickle in one piece, the engine's
own objects are laid out as a flat arena: every Env, continuation group,
pending step and cursor gets an integer id, and references between them are
written as persistent ids. Each arena record is pickled on its own, so the
pickle recursion never goes deeper than one record.

Well-known singletons (the terminal continuation, the no-op node...) are
written as constant ids and resolve to the very same objects on load. The
resolver is never written; `loads` injects the one it is given.

Only load data you produced yourself: like any pickle, a crafted payload can
run arbitrary code.
"""

from __future__ import annotations

import io
import logging
import pickle
from typing import BinaryIO, Optional

from strand.cursor import SUSPEND, ConcatenatedContinuation, Cursor, Splice
from strand.evaluation.group import ContinuationGroup
from strand.evaluation.node_forms.lvalue import ReadLValue
from strand.evaluation.node_forms.try_catch_form import CatchHandler
from strand.evaluation.resolver import DefaultResolver, Resolver
from strand.types.callable import Closure
from strand.types.continuation import HALT, UNHANDLED, Returning, ValueBound
from strand.types.environment import Env, Finally
from strand.types.errors import PersistenceError
from strand.types.location import UNKNOWN_LOCATION
from strand.types.next import Next
from strand.types.node import NOOP, NULL

logger = logging.getLogger(__name__)

MAGIC = b"STRAND"
FORMAT_VERSION = 1
PROTOCOL = pickle.HIGHEST_PROTOCOL

WELL_KNOWN = {
    "halt": HALT,
    "unhandled": UNHANDLED,
    "noop": NOOP,
    "null": NULL,
    "unknown-location": UNKNOWN_LOCATION,
    "suspend": SUSPEND,
}

# Objects written as separate arena records
ARENA_TYPES = (
    Cursor,
    Splice,
    Env,
    Next,
    ContinuationGroup,
    ConcatenatedContinuation,
    Finally,
    ValueBound,
    Returning,
    CatchHandler,
    ReadLValue,
    Closure,
)

_SAVE_ERRORS = (pickle.PicklingError, TypeError, AttributeError, RecursionError, ValueError)
_LOAD_ERRORS = (
    pickle.UnpicklingError,
    EOFError,
    AttributeError,
    ImportError,
    IndexError,
    KeyError,
    TypeError,
    ValueError,
)


def _slot_names(cls: type) -> list[str]:
    names = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.extend(s for s in slots if s not in ("__dict__", "__weakref__"))
    return names


def _state_of(obj) -> tuple[Optional[dict], dict]:
    attrs = getattr(obj, "__dict__", None)
    slots = {name: getattr(obj, name) for name in _slot_names(type(obj)) if hasattr(obj, name)}
    return (dict(attrs) if attrs else None), slots


def _restore(obj, state) -> None:
    attrs, slots = state
    if attrs:
        obj.__dict__.update(attrs)
    for name, value in slots.items():
        object.__setattr__(obj, name, value)


class ArenaPickler(pickle.Pickler):

    def __init__(self, file: BinaryIO, root):
        super().__init__(file, protocol=PROTOCOL)
        self.objects = [root]
        self.index = {id(root): 0}
        self.constants = {id(v): k for k, v in WELL_KNOWN.items()}

    def persistent_id(self, obj):
        key = self.constants.get(id(obj))
        if key is not None:
            return ("const", key)
        if isinstance(obj, Resolver):
            return ("resolver",)
        if isinstance(obj, ARENA_TYPES):
            idx = self.index.get(id(obj))
            if idx is None:
                idx = len(self.objects)
                self.objects.append(obj)
                self.index[id(obj)] = idx
            return ("ref", idx)
        return None

    def dump_records(self) -> None:
        # the list grows while records are written
        i = 0
        while i < len(self.objects):
            self.dump(_state_of(self.objects[i]))
            i += 1


class ArenaUnpickler(pickle.Unpickler):

    def __init__(self, file: BinaryIO, shells: list, resolver: Resolver):
        super().__init__(file)
        self.shells = shells
        self.resolver = resolver

    def persistent_load(self, pid):
        match pid:
            case ("ref", int(idx)):
                return self.shells[idx]
            case ("const", str(key)) if key in WELL_KNOWN:
                return WELL_KNOWN[key]
            case ("resolver",):
                return self.resolver
        raise pickle.UnpicklingError(f"Unknown persistent id {pid!r}")


def dumps(cursor: Cursor) -> bytes:
    """Serialize `cursor`; raises PersistenceError, leaving the cursor untouched."""
    if not isinstance(cursor, Cursor):
        raise PersistenceError(f"Expected a Cursor, got {type(cursor).__name__}")
    if cursor.running:
        raise PersistenceError("Cannot save a cursor while it is running")
    records = io.BytesIO()
    try:
        pickler = ArenaPickler(records, cursor)
        pickler.dump_records()
        classes = [type(o) for o in pickler.objects]
        body = pickle.dumps((FORMAT_VERSION, classes, records.getvalue()), protocol=PROTOCOL)
    except _SAVE_ERRORS as e:
        logger.warning("failed to save cursor: %s", e)
        raise PersistenceError(f"Cannot save cursor: {e}") from e
    logger.debug("saved cursor: %d objects, %d bytes", len(classes), len(body))
    return MAGIC + body


def loads(data: bytes, resolver: Optional[Resolver] = None) -> Cursor:
    """Rebuild a cursor saved by `dumps`, running with `resolver`."""
    if resolver is None:
        resolver = DefaultResolver()
    if not data.startswith(MAGIC):
        raise PersistenceError("Not a saved cursor")
    try:
        version, classes, records = pickle.loads(data[len(MAGIC):])
        if version != FORMAT_VERSION:
            raise PersistenceError(f"Unsupported format version {version}")
        shells = [cls.__new__(cls) for cls in classes]
        unpickler = ArenaUnpickler(io.BytesIO(records), shells, resolver)
        for shell in shells:
            _restore(shell, unpickler.load())
    except _LOAD_ERRORS as e:
        logger.warning("failed to load cursor: %s", e)
        raise PersistenceError(f"Cannot load cursor: {e}") from e
    cursor = shells[0]
    if not isinstance(cursor, Cursor):
        raise PersistenceError(f"Saved root is a {type(cursor).__name__}, not a Cursor")
    logger.debug("loaded cursor: %d objects", len(shells))
    return cursor


def dump(cursor: Cursor, file: BinaryIO) -> None:
    file.write(dumps(cursor))


def load(file: BinaryIO, resolver: Optional[Resolver] = None) -> Cursor:
    return loads(file.read(), resolver)
