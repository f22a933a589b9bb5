"""
MiniC Interpreter
Tree-walking evaluation of a parsed program against a variable store
Output is produced as a side effect; errors propagate to the caller
"""

from typing import Dict, Iterator, Optional, TextIO
import sys

from error_handling import MiniCRuntimeError
from parsing import (
  Program, Statement, Expression,
  Number, Variable, BinaryOp,
  Assignment, Print, ExpressionStatement,
)
from stdlib import BUILTIN_OPERATORS, minic_print


DEFAULT_CAPACITY = 128


# ============================================================================
# VARIABLE STORE
# ============================================================================

class VariableStore:
  """Ordered name -> integer mapping with a bounded number of entries

  A capacity of None makes the store unbounded.
  """

  def __init__(self, capacity: Optional[int] = DEFAULT_CAPACITY):
    if capacity is not None and capacity < 0:
      raise ValueError(f"capacity must be non-negative, got {capacity}")
    self.capacity = capacity
    self._values: Dict[str, int] = {}

  def lookup(self, name: str) -> int:
    """Get the current value of a variable"""
    if name not in self._values:
      raise MiniCRuntimeError(f"undefined variable '{name}'", env_snapshot=self.snapshot())
    return self._values[name]

  def assign(self, name: str, value: int) -> None:
    """Overwrite an existing variable or insert a new one"""
    if name not in self._values and self.capacity is not None \
        and len(self._values) >= self.capacity:
      raise MiniCRuntimeError("symbol table overflow", env_snapshot=self.snapshot())
    self._values[name] = value

  def snapshot(self) -> Dict[str, int]:
    """Plain copy of the current bindings"""
    return dict(self._values)

  def items(self):
    return self._values.items()

  def __contains__(self, name: object) -> bool:
    return name in self._values

  def __len__(self) -> int:
    return len(self._values)

  def __iter__(self) -> Iterator[str]:
    return iter(self._values)

  def __repr__(self) -> str:
    return f"VariableStore({self._values!r}, capacity={self.capacity})"


# ============================================================================
# EXPRESSION EVALUATION
# ============================================================================

def eval_expression(node: Expression, store: VariableStore, debug: bool = False) -> int:
  """Evaluate an expression node to an integer"""
  if debug:
    print(f"Evaluating: {type(node).__name__}", file=sys.stderr)

  if isinstance(node, Number):
    return node.value
  elif isinstance(node, Variable):
    return eval_variable(node, store)
  elif isinstance(node, BinaryOp):
    return eval_binary_op(node, store, debug)
  else:
    raise MiniCRuntimeError("invalid expression node", getattr(node, 'span', None),
                            store.snapshot())


def eval_variable(node: Variable, store: VariableStore) -> int:
  """Evaluate a variable by looking it up in the store"""
  try:
    return store.lookup(node.name)
  except MiniCRuntimeError as e:
    raise MiniCRuntimeError(e.message, node.span, e.env_snapshot) from e


def eval_binary_op(node: BinaryOp, store: VariableStore, debug: bool = False) -> int:
  """Evaluate a chain of binary operations, left operands first

  The right spine is walked in a loop: every left operand is evaluated in
  source order, then the operators are applied from the innermost outward.
  """
  spine = []
  while isinstance(node, BinaryOp):
    spine.append((node, eval_expression(node.left, store, debug)))
    node = node.right
  value = eval_expression(node, store, debug)

  for op_node, left_val in reversed(spine):
    value = apply_operator(op_node, left_val, value, store)
  return value


def apply_operator(node: BinaryOp, left_val: int, right_val: int, store: VariableStore) -> int:
  """Apply the operator of a BinaryOp to two evaluated operands"""
  op_func = BUILTIN_OPERATORS.get(node.op)
  if op_func is None:
    raise MiniCRuntimeError(f"unknown operator '{node.op}'", node.span, store.snapshot())

  try:
    return op_func(left_val, right_val)
  except MiniCRuntimeError as e:
    raise MiniCRuntimeError(e.message, node.span, store.snapshot()) from e


# ============================================================================
# STATEMENT EXECUTION
# ============================================================================

def exec_statement(node: Statement, store: VariableStore, output: Optional[TextIO] = None,
                   debug: bool = False) -> None:
  """Execute one statement"""
  if debug:
    print(f"Executing: {type(node).__name__}", file=sys.stderr)

  if isinstance(node, Assignment):
    value = eval_expression(node.value, store, debug)
    try:
      store.assign(node.name, value)
    except MiniCRuntimeError as e:
      raise MiniCRuntimeError(e.message, node.span, e.env_snapshot) from e
    if debug:
      print(f"  {node.name} = {value}", file=sys.stderr)

  elif isinstance(node, Print):
    value = eval_expression(node.value, store, debug)
    minic_print(value, output)

  elif isinstance(node, ExpressionStatement):
    # Evaluated for its errors only; the value is discarded
    eval_expression(node.expression, store, debug)

  else:
    raise MiniCRuntimeError("invalid statement node", getattr(node, 'span', None),
                            store.snapshot())


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def interpret(program: Program, store: Optional[VariableStore] = None,
              output: Optional[TextIO] = None, debug: bool = False) -> VariableStore:
  """
  Run every statement in source order against one variable store.
  Returns the final store; a fresh one is created when none is given.
  Trees nested deeper than the interpreter stack allows fail with a
  MiniCRuntimeError instead of RecursionError.
  """
  if store is None:
    store = VariableStore()

  for statement in program.statements:
    try:
      exec_statement(statement, store, output, debug)
    except RecursionError:
      raise MiniCRuntimeError("expression nested too deeply", getattr(statement, 'span', None),
                              store.snapshot()) from None

  if debug:
    print(f"Final environment ({len(store)} bindings):", file=sys.stderr)
    for name, value in store.items():
      print(f"  {name} = {value}", file=sys.stderr)

  return store


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

class MiniCInterpreter:
  """Interpreter configured with a store capacity and an output stream"""

  def __init__(self, debug: bool = False, capacity: Optional[int] = DEFAULT_CAPACITY,
               output: Optional[TextIO] = None):
    self.debug = debug
    self.capacity = capacity
    self.output = output

  def interpret_program(self, program: Program) -> VariableStore:
    """Run a program with a fresh store"""
    return interpret(program, VariableStore(self.capacity), self.output, self.debug)

  def evaluate(self, node: Expression, bindings: Optional[Dict[str, int]] = None) -> int:
    """Evaluate a single expression against optional initial bindings"""
    store = VariableStore(None)
    for name, value in (bindings or {}).items():
      store.assign(name, value)
    return eval_expression(node, store, self.debug)


def create_interpreter(debug: bool = False, capacity: Optional[int] = DEFAULT_CAPACITY,
                       output: Optional[TextIO] = None) -> MiniCInterpreter:
  """Factory function returning an interpreter"""
  return MiniCInterpreter(debug, capacity, output)


def create_debug_interpreter(capacity: Optional[int] = DEFAULT_CAPACITY) -> MiniCInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True, capacity=capacity)
