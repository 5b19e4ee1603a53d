"""
MiniC Programming Language - Main Entry Point
Runs a single-function MiniC program and reports its variables
"""

import sys
import argparse
from typing import List, Optional

from error_handling import (
    MiniCError, MiniCLexError, MiniCParseError, MiniCRuntimeError,
    MiniCSemanticsError, format_error
)
from parsing import create_parser
from semantics import create_analyzer, pretty_print_scope_tree
from interpreter import create_interpreter
from stdlib import format_value
from syntax_tree import pretty_print_ast


VERSION = "MiniC v0.1.0"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='MiniC - a minimal C-like language interpreter',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s program.mc              # Run a MiniC program
  %(prog)s --tokens program.mc     # Show the token stream
  %(prog)s --parse program.mc      # Parse and show the AST
  %(prog)s --analyze program.mc    # Parse, check and show the scope tree
  %(prog)s --debug program.mc      # Run with debug output
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='MiniC source file to execute'
  )

  stage = parser.add_mutually_exclusive_group()
  stage.add_argument(
      '--tokens',
      action='store_true',
      help='Tokenize file and show tokens (for debugging)'
  )
  stage.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show AST (for debugging)'
  )
  stage.add_argument(
      '--analyze',
      action='store_true',
      help='Parse and check file, show scope tree (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_source(script_path: str) -> str:
  with open(script_path, 'r', encoding='utf-8') as f:
    return f.read()


def tokenize_file(script_path: str, source: str, debug: bool = False) -> None:
  """Show the token stream of a MiniC file"""
  for token in create_parser(debug).tokenize(source, script_path):
    span = f"{token.span.start_line}:{token.span.start_col}" if token.span else ""
    print(f"{span:>8}  {token}")


def parse_file(script_path: str, source: str, debug: bool = False) -> None:
  """Parse a MiniC file and show the AST"""
  program = create_parser(debug).parse_string(source, script_path)
  print(pretty_print_ast(program), end="")


def analyze_file(script_path: str, source: str, debug: bool = False) -> None:
  """Parse and check a MiniC file and show the scope tree"""
  program = create_parser(debug).parse_string(source, script_path)
  tree = create_analyzer(debug).analyze(program)
  print(pretty_print_scope_tree(tree), end="")


def run_script_file(script_path: str, source: str, debug: bool = False) -> None:
  """Run a MiniC file: parse, check declarations, then evaluate"""
  if debug:
    print(f"Parsing {script_path}...")
  program = create_parser(debug).parse_string(source, script_path)

  if debug:
    print("Checking declarations...")
  create_analyzer(debug).analyze(program)

  if debug:
    print("Evaluating...")
  execution = create_interpreter(debug).interpret(program)

  for name, value in execution.bindings:
    print(f"{name} = {format_value(value)}")
  print(f"Result: {format_value(execution.result)}")


def run_stage(script_path: str, args: argparse.Namespace) -> int:
  """Dispatch to the requested stage and turn failures into an exit status"""
  source: Optional[str] = None
  try:
    source = read_source(script_path)
    if args.tokens:
      tokenize_file(script_path, source, debug=args.debug)
    elif args.parse:
      parse_file(script_path, source, debug=args.debug)
    elif args.analyze:
      analyze_file(script_path, source, debug=args.debug)
    else:
      run_script_file(script_path, source, debug=args.debug)
    return 0

  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print("  Hint: Check the file path and make sure the file exists")
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print("  Hint: Make sure the file is a text file with UTF-8 encoding")
  except MiniCLexError as e:
    print(f"Lexical error in '{script_path}':\n{format_error(e, source)}")
  except MiniCParseError as e:
    print(f"Parse error in '{script_path}':\n{format_error(e, source)}")
  except MiniCSemanticsError as e:
    print(f"Semantic analysis error in '{script_path}':\n{format_error(e, source)}")
  except MiniCRuntimeError as e:
    print(f"Runtime error in '{script_path}':\n{format_error(e, source)}")
  except MiniCError as e:
    print(f"Error in '{script_path}':\n{format_error(e, source)}")
  except Exception as e:
    print(f"Unexpected error while processing '{script_path}': {e}")
    if args.debug:
      import traceback
      traceback.print_exc()
  return 1


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for MiniC"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if not args.script:
    arg_parser.print_help()
    sys.exit(1)

  sys.exit(run_stage(args.script, args))


if __name__ == "__main__":
  main()
