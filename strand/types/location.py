"""Source locations carried by nodes and call frames.

A MethodLocation names the function a node was compiled from; a SourceLocation
adds the line. Call frames record the SourceLocation of their call site, which
is all the data needed to rebuild a readable stack trace after a reload.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MethodLocation:
    declaring_scope: str
    operation: str
    file: str

    def at(self, line: int) -> SourceLocation:
        return SourceLocation(self, line)


@dataclass(frozen=True)
class StackFrame:
    """One logical frame of a rebuilt stack trace."""

    declaring_scope: str
    operation: str
    file: str
    line: int

    def __str__(self) -> str:
        return f'  File "{self.file}", line {self.line}, in {self.declaring_scope}.{self.operation}'


@dataclass(frozen=True)
class SourceLocation:
    method: MethodLocation
    line: int

    def to_frame(self) -> StackFrame:
        m = self.method
        return StackFrame(m.declaring_scope, m.operation, m.file, self.line)

    def __str__(self) -> str:
        m = self.method
        return f"{m.declaring_scope}.{m.operation}({m.file}:{self.line})"


UNKNOWN_METHOD = MethodLocation("Unknown", "Unknown", "Unknown")
UNKNOWN_LOCATION = SourceLocation(UNKNOWN_METHOD, -1)


def format_stack_trace(frames: list[StackFrame]) -> str:
    """Render frames innermost-first, one per line."""
    return "\n".join(str(f) for f in frames)
