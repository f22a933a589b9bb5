"""
Error report tests for MiniC
"""

import pytest
from lexing import tokenize, SourceSpan, Token, PLUS, EOF
from parsing import parse, parse_source
from error_handling import (
  MiniCError, MiniCIOError, MiniCLexError, MiniCParseError, MiniCRuntimeError,
  MiniCErrorHandler, make_error_report, format_error_report,
  get_context_lines, generate_suggestions,
)


def raised(func, *args):
  with pytest.raises(MiniCError) as exc_info:
    func(*args)
  return exc_info.value


class TestHierarchy:
  """Every stage error is a MiniCError"""

  @pytest.mark.parametrize("cls", [MiniCIOError, MiniCLexError, MiniCParseError, MiniCRuntimeError])
  def test_subclasses(self, cls):
    assert issubclass(cls, MiniCError)

  def test_message_without_span(self):
    error = MiniCRuntimeError("division by zero")
    assert str(error) == "Runtime error: division by zero"

  def test_message_with_span(self):
    span = SourceSpan("a.mc", 1, 3, 1, 4, "/")
    error = MiniCRuntimeError("division by zero", span)
    assert str(error) == "Runtime error at a.mc:1:3-4: division by zero"


class TestContextLines:
  """Source context with a caret"""

  def test_caret_under_column(self):
    context = get_context_lines("let x = 1;\nlet y 2;\nprint y;", 2, 7)
    lines = context.split('\n')
    assert lines[1] == "   2: let y 2;"
    assert lines[2] == "      " + " " * 6 + "^ Error here"
    assert lines[3] == "   3: print y;"

  def test_window_is_clipped(self):
    context = get_context_lines("only line", 1, 1)
    assert context.split('\n')[0] == "   1: only line"


class TestReports:
  """Report dicts and their rendering"""

  def test_format_report(self):
    report = make_error_report(
      kind="Syntax error", message="expected ';'", line=1, column=10, position=4,
      got="end of input", suggestions=["Statements must end with ';'"])
    text = format_error_report(report)
    assert text.startswith("Syntax error at line 1, column 10 (token 4):\n")
    assert "  expected ';'\n" in text
    assert "  Got: end of input\n" in text
    assert "    - Statements must end with ';'\n" in text

  def test_suggestions(self):
    assert "Statements must end with ';'" in generate_suggestions("Syntax error", "expected ';'", None)
    assert "Every '(' needs a matching ')'" in generate_suggestions("Syntax error", "expected ')'", None)
    assert generate_suggestions("Runtime error", "undefined variable 'z'", None) == [
      "Assign the variable with 'let' before using it"]
    assert generate_suggestions("Runtime error", "division by zero", None) == []


class TestErrorHandler:
  """Full diagnostics against the source text"""

  def test_parse_error_report(self):
    source = "let x = 5\nprint x;"
    error = raised(parse_source, source, "prog.mc")
    text = MiniCErrorHandler(source, "prog.mc").report(error)
    assert text.startswith("prog.mc: Syntax error at line 2, column 1 (token 4):")
    assert "Got: 'print'" in text
    assert "^ Error here" in text

  def test_lex_error_report(self):
    source = "print 3 % 2;"
    error = raised(tokenize, source)
    text = MiniCErrorHandler(source).report(error)
    assert "Lexical error at line 1, column 9" in text
    assert "Unknown character '%'" in text
    assert "Got: '%'" in text

  def test_io_error_report_without_source(self):
    error = MiniCIOError("Script file 'missing.mc' not found")
    text = MiniCErrorHandler(None, "missing.mc").report(error)
    assert text == "missing.mc: I/O error:\n  Script file 'missing.mc' not found\n"

  def test_report_for_tokens_without_spans(self):
    """Hand-built tokens carry no span; the token itself is described"""
    error = raised(parse, (Token(PLUS, '+'), Token(EOF, None, index=1)))
    assert str(error) == "Syntax error at pos=0: unexpected token"
    text = MiniCErrorHandler(None, "built.mc").report(error)
    assert text.startswith("built.mc: Syntax error (token 0):\n")
    assert "  Got: 'PLUS'\n" in text
