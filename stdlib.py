"""
MiniC Standard Library
Runtime numeric values and the built-in arithmetic operators
Pure functional style using immutable dictionaries
"""

from typing import Any, Callable, Dict
import math
import operator

from error_handling import MiniCRuntimeError


NUMERIC_TYPES = ("int", "float")


# ============================================================================
# VALUE CONSTRUCTION
# ============================================================================

def make_value(value: Any, type_name: str) -> Dict:
  """Create an immutable runtime value"""
  return {
      'value': value,
      'type': type_name
  }


def zero_value(type_name: str) -> Dict:
  """The value a freshly declared variable starts with"""
  if type_name == "int":
    return make_value(0, "int")
  elif type_name == "float":
    return make_value(0.0, "float")
  raise MiniCRuntimeError(f"Unknown type: {type_name}")


def make_number(kind: str, text: str) -> Dict:
  """Convert literal text to a runtime value"""
  if kind == "int":
    return make_value(int(text), "int")
  elif kind == "float":
    return make_value(float(text), "float")
  raise MiniCRuntimeError(f"Unknown literal kind: {kind}")


def format_value(value: Dict) -> str:
  """Render a runtime value for output"""
  return str(value['value'])


def as_float(value: Dict) -> float:
  try:
    return float(value['value'])
  except OverflowError:
    raise MiniCRuntimeError(f"Value too large for arithmetic: {value['value']}") from None


# ============================================================================
# ERROR MESSAGE BUILDERS
# ============================================================================

def operation_error(op: str, left_type: str, right_type: str) -> MiniCRuntimeError:
  """
  Generate operation error

  Args:
    op: Operation name
    left_type: Left operand type
    right_type: Right operand type

  Returns:
    MiniCRuntimeError with formatted message
  """
  return MiniCRuntimeError(f"Cannot {op} {left_type} and {right_type}")


# ============================================================================
# ARITHMETIC FUNCTIONS
# ============================================================================

def float_divide(x: float, y: float) -> float:
  """IEEE-754 division: a zero divisor gives a signed infinity or nan"""
  if y == 0:
    if x == 0 or math.isnan(x):
      return math.nan
    return math.copysign(math.inf, x) * math.copysign(1.0, y)
  return x / y


def binary_arithmetic_op(
  op: Callable[[float, float], float],
  op_name: str
) -> Callable[[Dict, Dict], Dict]:
  """
  Factory for binary arithmetic operations

  Both operands must carry the same numeric type. The computation is
  done in floating point and the result is always a float.

  Args:
    op: Function on two floats (e.g., operator.add)
    op_name: Name for error messages

  Returns:
    Function that performs the arithmetic operation

  Examples:
    minic_add = binary_arithmetic_op(operator.add, "add")
    minic_add({"type": "int", "value": 1}, {"type": "int", "value": 2})
      -> {"type": "float", "value": 3.0}
  """
  def arithmetic(x: Dict, y: Dict) -> Dict:
    if x['type'] != y['type'] or x['type'] not in NUMERIC_TYPES:
      raise operation_error(op_name, x['type'], y['type'])
    return make_value(op(as_float(x), as_float(y)), "float")

  return arithmetic


minic_add = binary_arithmetic_op(operator.add, "add")
minic_sub = binary_arithmetic_op(operator.sub, "subtract")
minic_mul = binary_arithmetic_op(operator.mul, "multiply")
minic_div = binary_arithmetic_op(float_divide, "divide")


def minic_identity(x: Dict) -> Dict:
  """Unary plus"""
  if x['type'] not in NUMERIC_TYPES:
    raise MiniCRuntimeError(f"Cannot apply unary + to {x['type']}")
  return x


def minic_negate(x: Dict) -> Dict:
  """Unary minus"""
  if x['type'] not in NUMERIC_TYPES:
    raise MiniCRuntimeError(f"Cannot negate {x['type']}")
  return make_value(-x['value'], x['type'])


BUILTIN_OPERATORS = {
    '+': minic_add,
    '-': minic_sub,
    '*': minic_mul,
    '/': minic_div,
}

UNARY_OPERATORS = {
    '+': minic_identity,
    '-': minic_negate,
}
