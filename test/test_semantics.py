"""
Scope analysis tests for MiniC
Scope arena operations and declare-before-use checking
"""

import pytest
from semantics import (
    GLOBAL_SCOPE_NAME, SCOPE_CHECKS, ScopeAnalyzer, add_scope, check_program,
    create_analyzer, create_debug_analyzer, current_scope, enter_scope,
    exit_scope, make_scope_tree, pretty_print_scope_tree, scope_bind,
    scope_define, scope_lookup, scope_lookup_local
)
from error_handling import MiniCSemanticsError, format_error
from parsing import create_parser
from syntax_tree import (
    NODE_TYPES, Assign, Compound, Declare, FunctionDef, Param, Program,
    UnaryOp, Variable
)


class TestScopeTree:
  """Pure operations on the scope arena"""

  @pytest.fixture
  def tree(self):
    return make_scope_tree()

  def test_starts_at_global(self, tree):
    assert current_scope(tree)['name'] == GLOBAL_SCOPE_NAME
    assert current_scope(tree)['parent'] is None

  def test_define_then_lookup(self, tree):
    tree = scope_define(tree, "foo", "int")
    symbol = scope_lookup(tree, "foo")
    assert symbol['declared_type'] == "int"
    assert symbol['assigned'] is False
    assert symbol['value'] is None

  def test_bind_marks_assigned(self, tree):
    tree = scope_define(tree, "foo", "int")
    tree = scope_bind(tree, "foo", "bar")
    symbol = scope_lookup(tree, "foo")
    assert symbol['assigned'] is True
    assert symbol['value'] == "bar"

  def test_operations_do_not_mutate(self, tree):
    defined = scope_define(tree, "foo", "int")
    assert scope_lookup(tree, "foo") is None
    scope_bind(defined, "foo", "1")
    assert scope_lookup(defined, "foo")['assigned'] is False

  def test_duplicate_define_in_same_scope(self, tree):
    tree = scope_define(tree, "foo", "int")
    with pytest.raises(MiniCSemanticsError) as exc_info:
      scope_define(tree, "foo", "float")
    assert "declared more than once" in str(exc_info.value)

  def test_bind_undefined(self, tree):
    with pytest.raises(MiniCSemanticsError) as exc_info:
      scope_bind(tree, "ghost", "1")
    assert "Variable 'ghost' is undefined" in str(exc_info.value)

  def test_lookup_walks_to_ancestors(self, tree):
    tree = scope_define(tree, "outer", "int")
    tree = enter_scope(add_scope(tree, "block"), "block")
    assert current_scope(tree)['name'] == "block"
    assert scope_lookup(tree, "outer") is not None
    assert scope_lookup_local(tree, "outer") is None

  def test_shadowing_in_child_scope(self, tree):
    tree = scope_define(tree, "x", "int")
    tree = enter_scope(add_scope(tree, "block"), "block")
    tree = scope_define(tree, "x", "float")
    assert scope_lookup(tree, "x")['declared_type'] == "float"
    tree = exit_scope(tree)
    assert scope_lookup(tree, "x")['declared_type'] == "int"

  def test_bind_updates_defining_scope(self, tree):
    tree = scope_define(tree, "x", "int")
    tree = enter_scope(add_scope(tree, "block"), "block")
    tree = scope_bind(tree, "x", "5")
    tree = exit_scope(tree)
    assert scope_lookup(tree, "x")['value'] == "5"

  def test_lookup_never_descends(self, tree):
    tree = enter_scope(add_scope(tree, "block"), "block")
    tree = scope_define(tree, "inner", "int")
    tree = exit_scope(tree)
    assert scope_lookup(tree, "inner") is None

  def test_exit_global_fails(self, tree):
    with pytest.raises(MiniCSemanticsError):
      exit_scope(tree)

  def test_enter_unknown_scope_fails(self, tree):
    with pytest.raises(MiniCSemanticsError):
      enter_scope(tree, "nowhere")

  def test_duplicate_child_scope_fails(self, tree):
    tree = add_scope(tree, "block")
    with pytest.raises(MiniCSemanticsError):
      add_scope(tree, "block")

  def test_pretty_print(self, tree):
    tree = scope_define(tree, "x", "int")
    tree = scope_bind(tree, "x", "1 + 2")
    tree = add_scope(tree, "block")
    assert pretty_print_scope_tree(tree) == "GLOBAL\n  x: int = 1 + 2\n  block\n"


class TestDeclarationChecks:
  """check_program over parsed programs"""

  def test_valid_program(self, parse_body):
    tree = check_program(parse_body("{ int y; y = 5; y = y + 1; }"))
    symbol = scope_lookup(tree, "y")
    assert symbol['assigned'] is True
    assert symbol['value'] == "y + 1"

  def test_declared_but_never_assigned(self, parse_body):
    tree = check_program(parse_body("{ float z; }"))
    assert scope_lookup(tree, "z") == {
        'name': "z", 'declared_type': "float", 'assigned': False, 'value': None
    }

  def test_assign_to_undeclared(self, parse_body):
    with pytest.raises(MiniCSemanticsError) as exc_info:
      check_program(parse_body("{ x = 1; }"))
    assert "Variable 'x' is undefined" in str(exc_info.value)

  def test_read_of_undeclared(self, parse_body):
    with pytest.raises(MiniCSemanticsError) as exc_info:
      check_program(parse_body("{ int y; y = z + 1; }"))
    assert "Variable 'z' is undefined" in str(exc_info.value)

  def test_use_before_declaration(self, parse_body):
    with pytest.raises(MiniCSemanticsError):
      check_program(parse_body("{ x = 1; int x; }"))

  def test_redeclaration(self, parse_body):
    with pytest.raises(MiniCSemanticsError) as exc_info:
      check_program(parse_body("{ int x; float x; }"))
    assert "declared more than once" in str(exc_info.value)

  def test_nested_blocks_share_one_scope(self, parse_body):
    with pytest.raises(MiniCSemanticsError):
      check_program(parse_body("{ int x; { int x; } }"))
    tree = check_program(parse_body("{ { int x; } x = 2; }"))
    assert scope_lookup(tree, "x")['value'] == "2"

  def test_parameters_are_not_declared(self, parse_body):
    with pytest.raises(MiniCSemanticsError):
      check_program(parse_body("{ int y; y = arg; }"))

  def test_empty_body(self, parse_body):
    tree = check_program(parse_body("{ }"))
    assert current_scope(tree)['symbols'] == {}

  def test_undefined_variable_location(self):
    source = "function main(int a)\n{\n  int y;\n  y = z + 1;\n}\n"
    program = create_parser().parse_string(source, "use.mc")
    with pytest.raises(MiniCSemanticsError) as exc_info:
      check_program(program)
    span = exc_info.value.span
    assert (span.filename, span.start_line, span.start_col) == ("use.mc", 4, 7)
    text = format_error(exc_info.value, source)
    assert text.startswith("Semantics error at use.mc:4:7-8: Variable 'z' is undefined")
    assert " " * 12 + "^ Error here" in text.splitlines()

  def test_redeclaration_location(self):
    source = "function main(int a) { int x; float x; }"
    with pytest.raises(MiniCSemanticsError) as exc_info:
      check_program(create_parser().parse_string(source))
    assert exc_info.value.span.start_col == 37


class TestAnalyzerFactories:
  """Analyzer objects and debug tracing"""

  def test_factories(self):
    assert isinstance(create_analyzer(), ScopeAnalyzer)
    assert create_debug_analyzer().debug is True

  def test_debug_trace(self, parse_body, capsys):
    create_debug_analyzer().analyze(parse_body("{ int x; }"))
    out = capsys.readouterr().out
    assert "Checking: Declare" in out
    assert "Defined symbol x: int" in out

  def test_checks_cover_every_node(self):
    assert set(SCOPE_CHECKS) == set(NODE_TYPES)


class TestDeepNesting:
  """Trees deeper than the interpreter stack raise semantic errors"""

  def test_deep_tree(self):
    expr = Variable("x")
    for _ in range(5000):
      expr = UnaryOp("-", expr)
    body = Compound((Declare("x", "int"), Assign(Variable("x"), expr)))
    program = Program(FunctionDef("main", (Param("int", "a"),), body))
    with pytest.raises(MiniCSemanticsError) as exc_info:
      check_program(program)
    assert "Nesting too deep" in str(exc_info.value)
