"""
MiniC Abstract Syntax Tree
Immutable node variants, a canonical source printer and debugging dumps
"""

from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Type, Union

from error_handling import SourceSpan


# ============================================================================
# NODE VARIANTS
# ============================================================================

@dataclass(frozen=True)
class NumberLiteral:
    kind: str  # "int" or "float"
    text: str


@dataclass(frozen=True)
class Variable:
    name: str
    span: Optional[SourceSpan] = field(default=None, compare=False)


@dataclass(frozen=True)
class BinaryOp:
    op: str  # one of + - * /
    left: 'Expr'
    right: 'Expr'


@dataclass(frozen=True)
class UnaryOp:
    op: str  # + or -
    operand: 'Expr'


@dataclass(frozen=True)
class Declare:
    name: str
    declared_type: str
    span: Optional[SourceSpan] = field(default=None, compare=False)


@dataclass(frozen=True)
class Assign:
    target: Variable
    value: 'Expr'


@dataclass(frozen=True)
class Compound:
    statements: Tuple['Stmt', ...]


@dataclass(frozen=True)
class Empty:
    """No-op statement produced by an empty compound body"""


@dataclass(frozen=True)
class Param:
    declared_type: str
    name: str


@dataclass(frozen=True)
class FunctionDef:
    name: str
    params: Tuple[Param, ...]
    body: Compound


@dataclass(frozen=True)
class Program:
    function: FunctionDef


Expr = Union[NumberLiteral, Variable, BinaryOp, UnaryOp]
Stmt = Union[Compound, Assign, Declare, Empty]
Node = Union[NumberLiteral, Variable, BinaryOp, UnaryOp, Declare, Assign,
             Compound, Empty, Param, FunctionDef, Program]

NODE_TYPES = (
    NumberLiteral, Variable, BinaryOp, UnaryOp, Declare, Assign,
    Compound, Empty, Param, FunctionDef, Program,
)

PRECEDENCE = {'+': 1, '-': 1, '*': 2, '/': 2}


def ensure_exhaustive(handlers: Dict[Type, Callable], stage: str) -> Dict[Type, Callable]:
    """Fail at import time when a visitor table misses a node variant"""
    missing = [node_type.__name__ for node_type in NODE_TYPES if node_type not in handlers]
    if missing:
        raise TypeError(f"{stage} has no handler for: {', '.join(missing)}")
    return handlers


# ============================================================================
# TRAVERSAL HELPERS
# ============================================================================

def iter_children(node: Node) -> Iterator[Node]:
    """Yield the direct child nodes of a node in source order"""
    for item in fields(node):
        value = getattr(node, item.name)
        if isinstance(value, NODE_TYPES):
            yield value
        elif isinstance(value, tuple):
            yield from value


def find_nodes_by_type(node: Node, node_type: Type) -> List[Node]:
    """Find all nodes of a specific type in the tree, pre-order"""
    result = []

    def search(current: Node):
        if isinstance(current, node_type):
            result.append(current)
        for child in iter_children(current):
            search(child)

    search(node)
    return result


def pretty_print_ast(node: Node, indent: int = 0) -> str:
    """Pretty print an AST node for debugging"""
    attributes = [
        f"{item.name}={getattr(node, item.name)!r}"
        for item in fields(node)
        if isinstance(getattr(node, item.name), str)
    ]
    result = "  " * indent + type(node).__name__
    if attributes:
        result += f"({', '.join(attributes)})"
    result += "\n"

    for child in iter_children(node):
        result += pretty_print_ast(child, indent + 1)

    return result


def ast_to_dict(node: Node) -> Dict[str, Any]:
    """Convert an AST to nested dictionaries"""
    result = {"type": type(node).__name__}
    for item in fields(node):
        if not item.compare:
            continue
        value = getattr(node, item.name)
        if isinstance(value, NODE_TYPES):
            result[item.name] = ast_to_dict(value)
        elif isinstance(value, tuple):
            result[item.name] = [ast_to_dict(child) for child in value]
        else:
            result[item.name] = value
    return result


# ============================================================================
# CANONICAL SOURCE PRINTER
# ============================================================================

INDENT = "    "


def to_source(node: Node) -> str:
    """Render a node as MiniC text that parses back to an equal tree"""
    if isinstance(node, (NumberLiteral, Variable, BinaryOp, UnaryOp)):
        return _render_expression(node)
    if isinstance(node, Param):
        return f"{node.declared_type} {node.name}"
    return "\n".join(_render_lines(node, 0))


def _render_lines(node: Node, depth: int) -> List[str]:
    prefix = INDENT * depth

    if isinstance(node, Program):
        return _render_lines(node.function, depth)
    elif isinstance(node, FunctionDef):
        params = ", ".join(to_source(param) for param in node.params)
        return [f"{prefix}function {node.name}({params})"] + _render_lines(node.body, depth)
    elif isinstance(node, Compound):
        lines = [prefix + "{"]
        for statement in node.statements:
            lines.extend(_render_lines(statement, depth + 1))
        lines.append(prefix + "}")
        return lines
    elif isinstance(node, Declare):
        return [f"{prefix}{node.declared_type} {node.name};"]
    elif isinstance(node, Assign):
        return [f"{prefix}{node.target.name} = {_render_expression(node.value)};"]
    elif isinstance(node, Empty):
        return []
    raise TypeError(f"Not a statement: {node!r}")


def _render_expression(node: Expr) -> str:
    if isinstance(node, NumberLiteral):
        return node.text
    elif isinstance(node, Variable):
        return node.name
    elif isinstance(node, UnaryOp):
        operand = _render_expression(node.operand)
        if isinstance(node.operand, BinaryOp):
            operand = f"({operand})"
        return f"{node.op}{operand}"
    elif isinstance(node, BinaryOp):
        precedence = PRECEDENCE[node.op]
        left = _render_expression(node.left)
        right = _render_expression(node.right)
        # Left-associative: only the right side needs parens at equal precedence
        if isinstance(node.left, BinaryOp) and PRECEDENCE[node.left.op] < precedence:
            left = f"({left})"
        if isinstance(node.right, BinaryOp) and PRECEDENCE[node.right.op] <= precedence:
            right = f"({right})"
        return f"{left} {node.op} {right}"
    raise TypeError(f"Not an expression: {node!r}")
