"""
Integration tests for MiniC: the command line driver and example files
"""

import io
import pytest
from main import main, run_source, read_source, create_arg_parser
from error_handling import MiniCIOError, MiniCParseError


@pytest.fixture
def script(tmp_path):
  """Write source text to a temporary script file"""
  def write(source, name="prog.mc"):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return str(path)
  return write


class TestCommandLine:
  """Exit status and streams"""

  def test_success(self, script, capsys):
    path = script("let x = 5 + 3; let y = 1 + 1; print(x + y);")
    assert main([path]) == 0
    captured = capsys.readouterr()
    assert captured.out == "10\n"
    assert captured.err == ""

  def test_no_arguments_is_usage_error(self, capsys):
    with pytest.raises(SystemExit) as exc_info:
      main([])
    assert exc_info.value.code == 2
    assert "usage:" in capsys.readouterr().err

  def test_missing_file(self, tmp_path, capsys):
    path = str(tmp_path / "missing.mc")
    assert main([path]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "not found" in captured.err

  def test_undefined_variable(self, script, capsys):
    assert main([script("print(z);")]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "undefined variable 'z'" in captured.err

  def test_division_by_zero(self, script, capsys):
    assert main([script("print(4 / 0);")]) == 1
    assert "division by zero" in capsys.readouterr().err

  def test_lexical_error(self, script, capsys):
    assert main([script("print 1 # comment")]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Unknown character '#'" in captured.err

  def test_syntax_error_runs_nothing(self, script, capsys):
    assert main([script("print 1; let x 2;")]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "expected '='" in captured.err

  def test_output_before_runtime_error_is_kept(self, script, capsys):
    assert main([script("print 1; print 2 / 0; print 3;")]) == 1
    assert capsys.readouterr().out == "1\n"

  def test_long_expression(self, script, capsys):
    assert main([script("print " + " + ".join(["1"] * 600) + ";")]) == 0
    captured = capsys.readouterr()
    assert captured.out == "600\n"
    assert captured.err == ""

  def test_deep_nesting_is_syntax_error(self, script, capsys):
    assert main([script("print " + "(" * 3000 + "1" + ")" * 3000 + ";")]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Syntax error" in captured.err
    assert "expression nested too deeply" in captured.err
    assert "intermediate 'let' bindings" in captured.err

  def test_capacity_option(self, script, capsys):
    path = script("let a = 1; let b = 2; print a + b;")
    assert main(["--capacity", "1", path]) == 1
    assert "symbol table overflow" in capsys.readouterr().err
    assert main(["--capacity", "0", path]) == 0
    assert capsys.readouterr().out == "3\n"

  def test_bad_capacity(self, script, capsys):
    with pytest.raises(SystemExit):
      main(["--capacity", "-1", script("print 1;")])

  def test_debug_shows_environment_on_error(self, script, capsys):
    assert main(["--debug", script("let a = 4; print a / (a - a);")]) == 1
    err = capsys.readouterr().err
    assert "Environment at error:" in err
    assert "  a = 4" in err


class TestDumps:
  """Token and tree dumps"""

  def test_tokens_flag(self, script, capsys):
    assert main(["--tokens", script("print 7;")]) == 0
    assert capsys.readouterr().out == "Tokens:\nPRINT\nNUMBER(7)\nSEMICOLON\nEOF\n7\n"

  def test_ast_flag(self, script, capsys):
    assert main(["--ast", script("let x = 2; print x;")]) == 0
    assert capsys.readouterr().out == (
      "AST:\nAST_ASSIGN(x)\n  AST_NUMBER(2)\nAST_PRINT\n  AST_VAR(x)\n2\n")

  def test_verbose_matches_reference_layout(self):
    out = io.StringIO()
    run_source("let x = 1; print(x);", verbose=True, out=out)
    assert out.getvalue() == (
      "Source code:\n"
      "let x = 1; print(x);\n"
      "\n"
      "Tokens:\n"
      "LET\nIDENT(x)\nEQUAL\nNUMBER(1)\nSEMICOLON\n"
      "PRINT\nLPAREN\nIDENT(x)\nRPAREN\nSEMICOLON\nEOF\n"
      "\n"
      "AST:\n"
      "AST_ASSIGN(x)\n  AST_NUMBER(1)\nAST_PRINT\n  AST_VAR(x)\n"
      "\n"
      "Program output:\n"
      "1\n"
    )

  def test_tokens_dumped_before_syntax_error(self):
    out = io.StringIO()
    with pytest.raises(MiniCParseError):
      run_source("let;", show_tokens=True, show_ast=True, out=out)
    assert out.getvalue() == "Tokens:\nLET\nSEMICOLON\nEOF\n"


class TestReadSource:
  """Source file loading"""

  def test_reads_utf8(self, script):
    assert read_source(script("print 1;\n")) == "print 1;\n"

  def test_directory(self, tmp_path):
    with pytest.raises(MiniCIOError):
      read_source(str(tmp_path))

  def test_undecodable(self, tmp_path):
    path = tmp_path / "bad.mc"
    path.write_bytes(b"print \xff;")
    with pytest.raises(MiniCIOError) as exc_info:
      read_source(str(path))
    assert "Cannot decode" in exc_info.value.message

  def test_arg_parser_defaults(self):
    args = create_arg_parser().parse_args(["x.mc"])
    assert args.capacity == 128
    assert not (args.tokens or args.ast or args.verbose or args.debug)


class TestExampleFiles:
  """Run the bundled example programs"""

  @pytest.mark.parametrize("name,expected_output,expected_status", [
    ("arith.mc", "10\n", 0),
    ("grouping.mc", "4\n14\n10\n-3\n", 0),
    ("bindings.mc", "14\n2\n", 0),
    ("undefined.mc", "1\n", 1),
  ])
  def test_example(self, examples_dir, capsys, name, expected_output, expected_status):
    path = examples_dir / name
    assert main([str(path)]) == expected_status
    assert capsys.readouterr().out == expected_output
