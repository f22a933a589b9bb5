"""
MiniC - Main Entry Point
Integer arithmetic, `let` bindings and `print`: tokenize, parse, interpret
"""

import sys
import argparse
from typing import List, Optional, TextIO

from error_handling import (
  MiniCError, MiniCIOError, MiniCRuntimeError, MiniCErrorHandler
)
from lexing import tokenize, format_tokens
from parsing import parse, format_ast
from interpreter import DEFAULT_CAPACITY, VariableStore, interpret


VERSION = "MiniC v0.1.0"


def capacity_arg(text: str) -> Optional[int]:
  """Parse --capacity; 0 means unbounded"""
  try:
    value = int(text)
  except ValueError:
    raise argparse.ArgumentTypeError(f"invalid capacity: '{text}'")
  if value < 0:
    raise argparse.ArgumentTypeError(f"capacity must be >= 0, got {value}")
  return value or None


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='minic',
      description='MiniC - integer expressions, let bindings and print',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s program.mc              # Run a program
  %(prog)s --tokens program.mc     # Show the token dump, then run
  %(prog)s --ast program.mc        # Show the tree dump, then run
  %(prog)s -v program.mc           # Source, tokens, tree and output
  %(prog)s --capacity 0 big.mc     # No limit on distinct variables
        """
  )

  parser.add_argument(
      'script',
      help='MiniC source file to execute'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Print the token dump before running'
  )

  parser.add_argument(
      '--ast',
      action='store_true',
      help='Print the tree dump before running'
  )

  parser.add_argument(
      '-v', '--verbose',
      action='store_true',
      help='Print source, tokens, tree and a program output header'
  )

  parser.add_argument(
      '--capacity',
      type=capacity_arg,
      default=DEFAULT_CAPACITY,
      help=f'Variable store capacity, 0 for unbounded (default: {DEFAULT_CAPACITY})'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Trace evaluation on stderr'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_source(script_path: str) -> str:
  """Read a whole source file as UTF-8 text"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      return f.read()
  except FileNotFoundError:
    raise MiniCIOError(f"Script file '{script_path}' not found")
  except IsADirectoryError:
    raise MiniCIOError(f"'{script_path}' is a directory")
  except PermissionError:
    raise MiniCIOError(f"Permission denied reading '{script_path}'")
  except UnicodeDecodeError as e:
    raise MiniCIOError(f"Cannot decode file '{script_path}': {e}")
  except OSError as e:
    raise MiniCIOError(f"Cannot read '{script_path}': {e}")


def run_source(
    text: str,
    filename: str = "<input>",
    show_tokens: bool = False,
    show_ast: bool = False,
    verbose: bool = False,
    capacity: Optional[int] = DEFAULT_CAPACITY,
    debug: bool = False,
    out: Optional[TextIO] = None
) -> VariableStore:
  """Run the whole pipeline on a text buffer

  Dumps are written as soon as their stage finishes, so a syntax error still
  leaves the token dump on the output. Errors propagate to the caller.
  """
  if out is None:
    out = sys.stdout

  if verbose:
    print(f"Source code:\n{text}\n", file=out)

  tokens = tokenize(text, filename)
  if show_tokens or verbose:
    print("Tokens:", file=out)
    print(format_tokens(tokens), file=out, end='')
    if verbose:
      print(file=out)

  program = parse(tokens, debug)
  if show_ast or verbose:
    print("AST:", file=out)
    print(format_ast(program), file=out, end='')
    if verbose:
      print(file=out)

  if verbose:
    print("Program output:", file=out)
  out.flush()

  return interpret(program, VariableStore(capacity), out, debug)


def print_runtime_environment(e: MiniCRuntimeError) -> None:
  """Show the variable store at the point of a runtime error"""
  bindings = e.env_snapshot or {}
  print("\nEnvironment at error:", file=sys.stderr)
  if not bindings:
    print("  (no variables)", file=sys.stderr)
  for name, value in list(bindings.items())[:10]:  # Show first 10
    print(f"  {name} = {value}", file=sys.stderr)
  if len(bindings) > 10:
    print(f"  ... and {len(bindings) - 10} more bindings", file=sys.stderr)


def run_script_file(
    script_path: str,
    show_tokens: bool = False,
    show_ast: bool = False,
    verbose: bool = False,
    capacity: Optional[int] = DEFAULT_CAPACITY,
    debug: bool = False
) -> int:
  """Run a MiniC script file, returning the process exit status"""
  source = None
  try:
    source = read_source(script_path)
    run_source(source, script_path, show_tokens, show_ast, verbose, capacity, debug)
    return 0

  except MiniCError as e:
    sys.stdout.flush()
    handler = MiniCErrorHandler(source, script_path)
    print(handler.report(e), file=sys.stderr, end='')
    if debug and isinstance(e, MiniCRuntimeError):
      print_runtime_environment(e)
    return 1
  except Exception as e:
    sys.stdout.flush()
    print(f"Unexpected error while executing '{script_path}': {e}", file=sys.stderr)
    if debug:
      import traceback
      traceback.print_exc()
    return 1


def main(argv: Optional[List[str]] = None) -> int:
  """Main entry point for MiniC"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  return run_script_file(
      args.script,
      show_tokens=args.tokens,
      show_ast=args.ast,
      verbose=args.verbose,
      capacity=args.capacity,
      debug=args.debug
  )


if __name__ == "__main__":
  sys.exit(main())
