from strand.types.environment import Env
from strand.types.next import Next
from strand.types.node import Node

# Local that carries a value from suspend() to the suspend node
SUSPEND_VALUE = "suspend_value"


def constant_form(node: Node, env: Env, k) -> Next:
    (value,) = node.operands
    return k(value)


def noop_form(node: Node, env: Env, k) -> Next:
    return k(None)


def yield_form(node: Node, env: Env, k) -> Next:
    (value,) = node.operands
    return Next.yield_(value, env, k)


def suspend_form(node: Node, env: Env, k) -> Next:
    # Clear the slot first so the yielded value is not saved with the cursor.
    value = env.get(SUSPEND_VALUE)
    env.set(SUSPEND_VALUE, None)
    return Next.yield_(value, env, k)
