# Core type aliases for Strand's data model.
# Program values are plain Python objects; nothing is boxed. Node trees are built
# from strand.types.node.Node and are immutable once constructed.
#
# Naming guidance:
# - Value:        use in evaluator/runtime code for evaluated program values.
# - Continuation: any picklable one-argument callable returning a Next. Bound
#                 methods of ContinuationGroup objects are the common case.

from typing import Any, Callable

# Runtime value alias
Value = Any

# Continuation: resumption value -> Next (kept loose to avoid an import cycle)
Continuation = Callable[[Value], Any]
