"""
MiniC Interpreter - Pure Functional Style
Tree-walking evaluation over a flat runtime environment
"""

from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from error_handling import MiniCRuntimeError
from stdlib import BUILTIN_OPERATORS, UNARY_OPERATORS, make_number, make_value, zero_value
from syntax_tree import (
    Assign, BinaryOp, Compound, Declare, Empty, FunctionDef, Node,
    NumberLiteral, Param, Program, UnaryOp, Variable, ensure_exhaustive
)


class ExecutionResult(NamedTuple):
  """Program result plus every binding left in the environment"""
  result: Dict
  bindings: List[Tuple[str, Dict]]


# ============================================================================
# RUNTIME ENVIRONMENT
# ============================================================================

def make_runtime_env(bindings: Optional[Dict] = None) -> Dict:
  """Create a runtime environment (name -> value, insertion ordered)"""
  return dict(bindings or {})


def env_bind_value(env: Dict, name: str, value: Dict) -> Dict:
  """Return new environment with name bound to value"""
  return {**env, name: value}


def env_lookup_value(env: Dict, name: str) -> Optional[Dict]:
  return env.get(name)


# ============================================================================
# EVALUATION
# ============================================================================

def eval_ast(node: Node, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  """
  Evaluate an AST node and return (result_value, updated_environment).
  This is a pure function that threads the environment through evaluation.
  """
  if debug:
    print(f"Evaluating: {type(node).__name__}")
  return EVALUATORS[type(node)](node, env, debug)


def eval_program_node(node: Program, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  return eval_ast(node.function, env, debug)


def eval_function_def(node: FunctionDef, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  """Run the body; parameters stay unbound since nothing can call the function"""
  return eval_ast(node.body, env, debug)


def eval_param(node: Param, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  return make_value(0, "int"), env


def eval_compound(node: Compound, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  """Execute statements in order; the last one's value is the block's value"""
  value = make_value(0, "int")
  for statement in node.statements:
    value, env = eval_ast(statement, env, debug)
  return value, env


def eval_empty(node: Empty, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  return make_value(0, "int"), env


def eval_declare(node: Declare, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  """Bind a fresh zero value of the declared type"""
  if node.name in env:
    raise MiniCRuntimeError(f"Variable '{node.name}' is already bound", node.span)

  value = zero_value(node.declared_type)
  if debug:
    print(f"  {node.name} := {value['value']} ({node.declared_type})")
  return value, env_bind_value(env, node.name, value)


def eval_assign(node: Assign, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  """Evaluate the right-hand side and bind it, creating the binding if needed"""
  value, env = eval_ast(node.value, env, debug)
  if debug:
    print(f"  {node.target.name} := {value['value']} ({value['type']})")
  return value, env_bind_value(env, node.target.name, value)


def eval_variable(node: Variable, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  value = env_lookup_value(env, node.name)
  if value is None:
    raise MiniCRuntimeError(f"Variable does not exist: {node.name}", node.span)
  return value, env


def eval_number(node: NumberLiteral, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  return make_number(node.kind, node.text), env


def eval_binary_op(node: BinaryOp, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  left_val, env = eval_ast(node.left, env, debug)
  right_val, env = eval_ast(node.right, env, debug)

  op_func = BUILTIN_OPERATORS.get(node.op)
  if op_func is None:
    raise MiniCRuntimeError(f"Unknown operation: {node.op}")
  return op_func(left_val, right_val), env


def eval_unary_op(node: UnaryOp, env: Dict, debug: bool = False) -> Tuple[Dict, Dict]:
  operand, env = eval_ast(node.operand, env, debug)

  op_func = UNARY_OPERATORS.get(node.op)
  if op_func is None:
    raise MiniCRuntimeError(f"Unknown unary operation: {node.op}")
  return op_func(operand), env


EVALUATORS: Dict[type, Callable[[Node, Dict, bool], Tuple[Dict, Dict]]] = ensure_exhaustive({
    Program: eval_program_node,
    FunctionDef: eval_function_def,
    Param: eval_param,
    Compound: eval_compound,
    Empty: eval_empty,
    Declare: eval_declare,
    Assign: eval_assign,
    Variable: eval_variable,
    NumberLiteral: eval_number,
    BinaryOp: eval_binary_op,
    UnaryOp: eval_unary_op,
}, "evaluator")


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def eval_program(program: Program, debug: bool = False) -> ExecutionResult:
  """
  Evaluate a program in an empty environment.
  Returns the value of the last top-level statement and the final bindings.
  """
  try:
    result, env = eval_ast(program, make_runtime_env(), debug)
  except RecursionError:
    raise MiniCRuntimeError("Nesting too deep") from None
  return ExecutionResult(result, list(env.items()))


class Interpreter:
  """Interpreter object handed out by the factory functions"""

  def __init__(self, debug: bool = False):
    self.debug = debug

  def interpret(self, program: Program) -> ExecutionResult:
    return eval_program(program, self.debug)


def create_interpreter(debug: bool = False) -> Interpreter:
  """Factory function returning an interpreter"""
  return Interpreter(debug)


def create_debug_interpreter() -> Interpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
