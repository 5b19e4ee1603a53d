"""
Command line tests for MiniC
"""

import pytest
from main import VERSION, create_arg_parser, main


@pytest.fixture
def script(tmp_path):
  def write(source, name="prog.mc"):
    path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return str(path)
  return write


COUNTER = "function main(int a) { int y; y = 5; y = y + 1; }"


class TestRun:
  """Default mode runs the program and prints its bindings"""

  def test_run_prints_bindings_and_result(self, script, capsys):
    with pytest.raises(SystemExit) as exc_info:
      main([script(COUNTER)])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.splitlines() == ["y = 6.0", "Result: 6.0"]

  def test_declared_only(self, script, capsys):
    with pytest.raises(SystemExit) as exc_info:
      main([script("function main(int a) { int x; float f; }")])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.splitlines() == ["x = 0", "f = 0.0", "Result: 0.0"]

  def test_debug_run(self, script, capsys):
    with pytest.raises(SystemExit) as exc_info:
      main(["--debug", script(COUNTER)])
    assert exc_info.value.code == 0
    out = capsys.readouterr().out
    assert "Checking declarations..." in out
    assert "Evaluating: Assign" in out

  def test_no_script_prints_help(self, capsys):
    with pytest.raises(SystemExit) as exc_info:
      main([])
    assert exc_info.value.code == 1
    assert "usage:" in capsys.readouterr().out


class TestStages:
  """--tokens, --parse and --analyze stop early"""

  def test_tokens(self, script, capsys):
    with pytest.raises(SystemExit):
      main(["--tokens", script(COUNTER)])
    out = capsys.readouterr().out
    assert "IDENT('function')" in out
    assert "EOF('')" in out

  def test_parse(self, script, capsys):
    with pytest.raises(SystemExit):
      main(["--parse", script(COUNTER)])
    out = capsys.readouterr().out
    assert out.startswith("Program\n")
    assert "FunctionDef(name='main')" in out

  def test_analyze(self, script, capsys):
    with pytest.raises(SystemExit):
      main(["--analyze", script(COUNTER)])
    assert capsys.readouterr().out == "GLOBAL\n  y: int = y + 1\n"

  def test_stages_are_exclusive(self, script):
    with pytest.raises(SystemExit) as exc_info:
      create_arg_parser().parse_args(["--tokens", "--parse", script(COUNTER)])
    assert exc_info.value.code == 2

  def test_version(self, capsys):
    with pytest.raises(SystemExit) as exc_info:
      main(["--version"])
    assert exc_info.value.code == 0
    assert VERSION in capsys.readouterr().out


class TestFailures:
  """Every failure prints a message and exits with status 1"""

  @pytest.mark.parametrize("source,heading", [
      ("function main(int a) { x = 1 @; }", "Lexical error in"),
      ("function main(int a) { x = 1 }", "Parse error in"),
      ("function main(int a) { x = 1; }", "Semantic analysis error in"),
      ("function main(int a) { int x; float y; x = x + y; }", "Runtime error in"),
  ])
  def test_stage_errors(self, script, capsys, source, heading):
    with pytest.raises(SystemExit) as exc_info:
      main([script(source)])
    assert exc_info.value.code == 1
    assert heading in capsys.readouterr().out

  def test_missing_file(self, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
      main([str(tmp_path / "absent.mc")])
    assert exc_info.value.code == 1
    assert "not found" in capsys.readouterr().out
