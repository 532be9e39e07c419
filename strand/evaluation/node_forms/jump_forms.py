from strand.types.environment import Env
from strand.types.next import Next
from strand.types.node import Node


def break_form(node: Node, env: Env, k) -> Next:
    (label,) = node.operands
    return env.break_address(label)(None)


def continue_form(node: Node, env: Env, k) -> Next:
    (label,) = node.operands
    return env.continue_address(label)(None)


def return_form(node: Node, env: Env, k) -> Next:
    (value,) = node.operands
    return Next(value, env, env.return_address())
