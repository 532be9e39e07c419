import pytest

from strand import persistence
from strand.cursor import Cursor
from strand.evaluation.resolver import DefaultResolver
from strand.factory import NodeFactory
from strand.types.location import MethodLocation

# Tests that take the `driver` fixture run twice:
# 1) resuming the cursor in memory ["direct"]
# 2) saving and reloading the cursor before every resume ["persisted"]
# so each suspend/resume scenario also checks that a reloaded cursor carries on
# exactly where the original would have.

SCRIPT = MethodLocation("Script1", "run", "Script1.strand")


class Driver:
    def __init__(self, persisted: bool):
        self.persisted = persisted
        self.cursor = None
        self.resolver = DefaultResolver()

    def start(self, node, resolver=None):
        if resolver is not None:
            self.resolver = resolver
        self.cursor = Cursor.start(node, self.resolver)
        return self

    def adopt(self, cursor, resolver=None):
        if resolver is not None:
            self.resolver = resolver
        self.cursor = cursor
        return self

    def _reload(self):
        if self.persisted:
            self.cursor = persistence.loads(persistence.dumps(self.cursor), self.resolver)

    def resume(self, value=None):
        self._reload()
        return self.cursor.resume(value)

    def resume_with_error(self, error):
        self._reload()
        return self.cursor.resume_with_error(error)

    def run_all(self, inputs=()):
        """Resume once with None, then once per input; return every outcome."""
        outcomes = [self.resume()]
        for value in inputs:
            outcomes.append(self.resume(value))
        return outcomes

    def is_resumable(self):
        return self.cursor.is_resumable()


@pytest.fixture(params=["direct", "persisted"])
def driver(request):
    return Driver(request.param == "persisted")


@pytest.fixture
def b():
    """A node factory whose nodes report locations in Script1.run."""
    return NodeFactory(SCRIPT)
