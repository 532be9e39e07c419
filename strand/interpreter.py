from __future__ import annotations

from typing import BinaryIO, Optional

from strand import Value
from strand.cursor import Cursor, OutcomeMapper
from strand.evaluation.resolver import DefaultResolver, Resolver
from strand.persistence import dumps, loads
from strand.types.location import StackFrame
from strand.types.node import Node
from strand.types.outcome import Outcome


def start(node: Node, resolver: Optional[Resolver] = None) -> Cursor:
    return Cursor.start(node, resolver)


def resume(cursor: Cursor, value: Value = None) -> Outcome:
    return cursor.resume(value)


def resume_with_error(cursor: Cursor, error: BaseException) -> Outcome:
    return cursor.resume_with_error(error)


def is_resumable(cursor: Cursor) -> bool:
    return cursor.is_resumable()


def stack_trace(cursor: Cursor, max_depth: Optional[int] = None) -> list[StackFrame]:
    return cursor.stack_trace(max_depth)


def compose(first: Cursor, then: Cursor, mapper: Optional[OutcomeMapper] = None) -> Cursor:
    """Run `first` to completion, then deliver its outcome to `then`."""
    return first.compose(then, mapper)


class Interpreter:
    """
    Runs node trees with one resolver and saves/loads their cursors.
    The resolver is re-attached to every cursor this interpreter loads.
    """
    def __init__(self, resolver: Optional[Resolver] = None):
        self.resolver = resolver if resolver is not None else DefaultResolver()

    def start(self, node: Node) -> Cursor:
        return Cursor.start(node, self.resolver)

    def eval(self, node: Node) -> Value:
        """Run `node` until it first yields; return the value or raise the exception."""
        return self.start(node).run()

    def save(self, cursor: Cursor) -> bytes:
        return dumps(cursor)

    def load(self, data: bytes) -> Cursor:
        return loads(data, self.resolver)

    def save_to(self, cursor: Cursor, file: BinaryIO) -> None:
        file.write(self.save(cursor))

    def load_from(self, file: BinaryIO) -> Cursor:
        return self.load(file.read())
