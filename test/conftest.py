"""
Test configuration for MiniC tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lexing import tokenize
from parsing import parse
from interpreter import VariableStore, interpret


@pytest.fixture
def run_program(capsys):
  """Run source text and return (printed output, final store)"""
  def run(source, capacity=128):
    store = VariableStore(capacity)
    interpret(parse(tokenize(source)), store)
    return capsys.readouterr().out, store
  return run


@pytest.fixture
def examples_dir():
  """Get the examples directory path"""
  return project_root / "examples"
