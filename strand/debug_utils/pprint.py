from typing import Optional

from strand.types.node import CaseClause, CatchClause, Node

# ----------------- ANSI colors -----------------
RESET = "\033[0m"
COLOR_KIND = "\033[94m"
COLOR_LITERAL = "\033[92m"
COLOR_LOCATION = "\033[90m"

# ----------------- Defaults -----------------
DEFAULT_OPTIONS = {
    "max_depth": 8,
    "color": False,
    "show_lines": True,
}


def _paint(text: str, color: str, options: dict) -> str:
    if options.get("color", False):
        return f"{color}{text}{RESET}"
    return text


def _format_operand(value, indent: int, options: dict, depth: int) -> str:
    if isinstance(value, Node):
        return format_node(value, indent, options, depth)
    pad = "  " * indent
    if isinstance(value, CatchClause):
        head = f"{pad}catch {getattr(value.type, '__name__', value.type)} as {value.name}:"
        return head + "\n" + format_node(value.handler, indent + 1, options, depth)
    if isinstance(value, CaseClause):
        return (
            f"{pad}case:\n"
            + format_node(value.matcher, indent + 1, options, depth)
            + "\n"
            + format_node(value.body, indent + 1, options, depth)
        )
    if isinstance(value, tuple) and any(isinstance(v, (Node, CatchClause, CaseClause)) for v in value):
        return "\n".join(_format_operand(v, indent, options, depth) for v in value)
    return pad + _paint(repr(value), COLOR_LITERAL, options)


# ----------------- Pretty printer -----------------
def format_node(
    node: Node,
    indent: int = 0,
    options: Optional[dict] = None,
    _current_depth: int = 0,
) -> str:
    """Render a node tree, one node per line, children indented below their parent."""
    if options is None:
        options = DEFAULT_OPTIONS
    pad = "  " * indent
    if _current_depth >= options.get("max_depth", 8):
        return pad + "…"

    head = pad + _paint(node.kind.value, COLOR_KIND, options)
    if options.get("show_lines", True) and node.line >= 0:
        head += " " + _paint(f"@{node.line}", COLOR_LOCATION, options)

    lines = [head]
    for operand in node.operands:
        lines.append(_format_operand(operand, indent + 1, options, _current_depth + 1))
    return "\n".join(lines)


def pprint_node(node: Node, options: Optional[dict] = None) -> None:
    print(format_node(node, options=options))
