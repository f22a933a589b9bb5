"""
MiniC Standard Library
Built-in operators and the print primitive
All arithmetic is on 32-bit two's-complement integers
"""

from typing import Callable, Dict, Optional, TextIO
import operator
import sys

from utilities import binary_arithmetic_op, nonzero_divisor, truncating_div


# ============================================================================
# ARITHMETIC
# ============================================================================

minic_add = binary_arithmetic_op(operator.add, "add")
minic_sub = binary_arithmetic_op(operator.sub, "sub")
minic_mul = binary_arithmetic_op(operator.mul, "mul")
# INT_MIN / -1 overflows and wraps back to INT_MIN
minic_div = binary_arithmetic_op(truncating_div, "div", guard=nonzero_divisor)


BUILTIN_OPERATORS: Dict[str, Callable[[int, int], int]] = {
    '+': minic_add,
    '-': minic_sub,
    '*': minic_mul,
    '/': minic_div,
}


# ============================================================================
# PRINT FUNCTIONS
# ============================================================================

def minic_print(value: int, output: Optional[TextIO] = None) -> None:
  """Print an integer followed by a newline"""
  print(value, file=output if output is not None else sys.stdout, flush=True)
