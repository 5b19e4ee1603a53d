"""
MiniC Semantics Analysis - Pure Functional Style
Builds a tree of scopes and rejects programs that break declare-before-use
"""

from typing import Callable, Dict, Optional

from error_handling import MiniCSemanticsError, SourceSpan
from syntax_tree import (
    Assign, BinaryOp, Compound, Declare, Empty, FunctionDef, Node,
    NumberLiteral, Param, Program, UnaryOp, Variable,
    ensure_exhaustive, iter_children, to_source
)


GLOBAL_SCOPE_NAME = "GLOBAL"


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_symbol(name: str, declared_type: str, assigned: bool = False,
                value: Optional[str] = None) -> Dict:
  """Create an immutable symbol record"""
  return {
      'name': name,
      'declared_type': declared_type,
      'assigned': assigned,
      'value': value
  }


def make_scope(name: str, parent: Optional[int] = None) -> Dict:
  """Create an empty scope; parent is an index into the scope arena"""
  return {
      'name': name,
      'parent': parent,
      'symbols': {},
      'children': {}
  }


def make_scope_tree() -> Dict:
  """Create a scope arena holding only the global scope"""
  return {
      'scopes': [make_scope(GLOBAL_SCOPE_NAME)],
      'current': 0
  }


# ============================================================================
# SCOPE TREE OPERATIONS (Pure Functions)
# ============================================================================

def current_scope(tree: Dict) -> Dict:
  return tree['scopes'][tree['current']]


def _replace_scope(tree: Dict, index: int, scope: Dict) -> Dict:
  scopes = list(tree['scopes'])
  scopes[index] = scope
  return {**tree, 'scopes': scopes}


def _find_scope_index(tree: Dict, name: str) -> Optional[int]:
  """Index of the nearest scope, walking outward, that defines name"""
  index = tree['current']
  while index is not None:
    scope = tree['scopes'][index]
    if name in scope['symbols']:
      return index
    index = scope['parent']
  return None


def scope_lookup(tree: Dict, name: str) -> Optional[Dict]:
  """Look up a name in the current scope and its ancestors"""
  index = _find_scope_index(tree, name)
  if index is None:
    return None
  return tree['scopes'][index]['symbols'][name]


def scope_lookup_local(tree: Dict, name: str) -> Optional[Dict]:
  """Look up a name in the current scope only"""
  return current_scope(tree)['symbols'].get(name)


def scope_define(tree: Dict, name: str, declared_type: str,
                 span: Optional[SourceSpan] = None) -> Dict:
  """Return new tree with an unassigned symbol in the current scope"""
  if scope_lookup_local(tree, name) is not None:
    raise MiniCSemanticsError(f"Variable '{name}' is declared more than once", span)

  scope = current_scope(tree)
  symbols = {**scope['symbols'], name: make_symbol(name, declared_type)}
  return _replace_scope(tree, tree['current'], {**scope, 'symbols': symbols})


def scope_bind(tree: Dict, name: str, value: str,
               span: Optional[SourceSpan] = None) -> Dict:
  """Return new tree where the visible symbol for name is assigned value"""
  index = _find_scope_index(tree, name)
  if index is None:
    raise MiniCSemanticsError(f"Variable '{name}' is undefined", span)

  scope = tree['scopes'][index]
  symbol = {**scope['symbols'][name], 'assigned': True, 'value': value}
  symbols = {**scope['symbols'], name: symbol}
  return _replace_scope(tree, index, {**scope, 'symbols': symbols})


def add_scope(tree: Dict, name: str) -> Dict:
  """Return new tree with a named child scope under the current scope"""
  parent_index = tree['current']
  parent = current_scope(tree)
  if name in parent['children']:
    raise MiniCSemanticsError(f"Scope '{name}' already exists in '{parent['name']}'")

  child_index = len(tree['scopes'])
  tree = {**tree, 'scopes': tree['scopes'] + [make_scope(name, parent_index)]}
  children = {**parent['children'], name: child_index}
  return _replace_scope(tree, parent_index, {**parent, 'children': children})


def enter_scope(tree: Dict, name: str) -> Dict:
  """Move the current-scope pointer into a named child"""
  index = current_scope(tree)['children'].get(name)
  if index is None:
    raise MiniCSemanticsError(f"No scope named '{name}' in '{current_scope(tree)['name']}'")
  return {**tree, 'current': index}


def exit_scope(tree: Dict) -> Dict:
  """Move the current-scope pointer back to the enclosing scope"""
  parent = current_scope(tree)['parent']
  if parent is None:
    raise MiniCSemanticsError("Cannot exit the global scope")
  return {**tree, 'current': parent}


def pretty_print_scope_tree(tree: Dict, index: int = 0, indent: int = 0) -> str:
  """Render a scope and its descendants for debugging"""
  scope = tree['scopes'][index]
  result = "  " * indent + f"{scope['name']}\n"
  for symbol in scope['symbols'].values():
    line = f"{symbol['name']}: {symbol['declared_type']}"
    if symbol['assigned']:
      line += f" = {symbol['value']}"
    result += "  " * (indent + 1) + line + "\n"
  for child_index in scope['children'].values():
    result += pretty_print_scope_tree(tree, child_index, indent + 1)
  return result


# ============================================================================
# DECLARATION CHECKS
# ============================================================================

def check_node(node: Node, tree: Dict, debug: bool = False) -> Dict:
  """Check one node, returning the scope tree extended by its declarations"""
  if debug:
    print(f"Checking: {type(node).__name__}")
  return SCOPE_CHECKS[type(node)](node, tree, debug)


def check_children(node: Node, tree: Dict, debug: bool = False) -> Dict:
  for child in iter_children(node):
    tree = check_node(child, tree, debug)
  return tree


def check_declare(node: Declare, tree: Dict, debug: bool = False) -> Dict:
  tree = scope_define(tree, node.name, node.declared_type, node.span)
  if debug:
    print(f"Defined symbol {node.name}: {node.declared_type}")
  return tree


def check_variable(node: Variable, tree: Dict, debug: bool = False) -> Dict:
  if scope_lookup(tree, node.name) is None:
    raise MiniCSemanticsError(f"Variable '{node.name}' is undefined", node.span)
  return tree


def check_assign(node: Assign, tree: Dict, debug: bool = False) -> Dict:
  tree = check_children(node, tree, debug)
  return scope_bind(tree, node.target.name, to_source(node.value), node.target.span)


SCOPE_CHECKS: Dict[type, Callable[[Node, Dict, bool], Dict]] = ensure_exhaustive({
    Declare: check_declare,
    Variable: check_variable,
    Assign: check_assign,
    NumberLiteral: check_children,
    BinaryOp: check_children,
    UnaryOp: check_children,
    Compound: check_children,
    Empty: check_children,
    Param: check_children,
    FunctionDef: check_children,
    Program: check_children,
}, "scope checker")


# ============================================================================
# MAIN ANALYSIS FUNCTION
# ============================================================================

def check_program(program: Program, debug: bool = False) -> Dict:
  """
  Validate declarations before evaluation.
  Returns the scope tree; the evaluator does not consume it.
  """
  try:
    return check_node(program, make_scope_tree(), debug)
  except RecursionError:
    raise MiniCSemanticsError("Nesting too deep") from None


class ScopeAnalyzer:
  """Analyzer object handed out by the factory functions"""

  def __init__(self, debug: bool = False):
    self.debug = debug

  def analyze(self, program: Program) -> Dict:
    return check_program(program, self.debug)


def create_analyzer(debug: bool = False) -> ScopeAnalyzer:
  """Factory function returning an analyzer"""
  return ScopeAnalyzer(debug)


def create_debug_analyzer() -> ScopeAnalyzer:
  """Factory function returning a debug analyzer"""
  return create_analyzer(debug=True)
