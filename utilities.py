"""
Utilities module for the MiniC interpreter
Integer helpers shared by the tokenizer and the built-in operators
"""

from typing import Callable, Optional
from error_handling import MiniCRuntimeError


INT_BITS = 32
INT_MIN = -(1 << (INT_BITS - 1))
INT_MAX = (1 << (INT_BITS - 1)) - 1


# ==================== INTEGER UTILITIES ====================

def wrap_int(value: int, bits: int = INT_BITS) -> int:
  """
  Wrap an unbounded Python int into a two's-complement machine integer

  Args:
    value: Any Python int
    bits: Width of the machine integer

  Returns:
    The value reduced modulo 2**bits into the signed range

  Examples:
    wrap_int(2147483648) -> -2147483648
    wrap_int(-1) -> -1
  """
  mask = (1 << bits) - 1
  value &= mask
  if value >> (bits - 1):
    value -= 1 << bits
  return value


def accumulate_digits(digits: str) -> int:
  """Build an integer from a digit run, one `value * 10 + digit` step at a time"""
  value = 0
  for digit in digits:
    value = wrap_int(value * 10 + (ord(digit) - ord('0')))
  return value


def truncating_div(x: int, y: int) -> int:
  """Integer division rounding toward zero (Python's // rounds toward -inf)"""
  quotient = abs(x) // abs(y)
  return quotient if (x < 0) == (y < 0) else -quotient


# ==================== OPERATION FACTORIES ====================

def binary_arithmetic_op(
  op: Callable[[int, int], int],
  op_name: str,
  guard: Optional[Callable[[int, int], Optional[str]]] = None
) -> Callable[[int, int], int]:
  """
  Factory for binary arithmetic operations on machine integers

  Args:
    op: Python operator function (e.g., operator.add)
    op_name: Name for error messages
    guard: Optional check returning an error message for bad operands

  Returns:
    Function that performs the operation and wraps the result

  Examples:
    minic_add = binary_arithmetic_op(operator.add, "add")
    minic_add(2147483647, 1) -> -2147483648
  """
  def arithmetic(x: int, y: int) -> int:
    if guard is not None:
      problem = guard(x, y)
      if problem:
        raise MiniCRuntimeError(problem)
    return wrap_int(op(x, y))

  arithmetic.__name__ = f"minic_{op_name}"
  return arithmetic


def nonzero_divisor(x: int, y: int) -> Optional[str]:
  """Guard for division: the right operand must not be zero"""
  return "division by zero" if y == 0 else None
