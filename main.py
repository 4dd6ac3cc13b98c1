"""
Monkey Programming Language - Main Entry Point
Runs scripts, dumps tokens or ASTs, and hosts the interactive REPL
"""

import sys
import argparse
import logging
from pathlib import Path
import os
from typing import Optional

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from ast_nodes import pretty_print_ast
from environment import env_user_bindings
from error_handling import (
  MonkeyParseError,
  MonkeyRuntimeError,
  format_parse_errors,
  format_runtime_error,
)
from interpreter import MonkeyInterpreter, create_interpreter
from lexer import KEYWORDS, tokenize
from parsing import create_parser
from stdlib import list_builtin_functions
from values import is_null, show_value


VERSION = "Monkey v1.0"
HISTORY_FILE = "~/.monkey_history"
HISTORY_LENGTH = 1000
DEFAULT_RECURSION_LIMIT = 10000
PROMPT = ">> "
EXIT_COMMAND = "exit"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='Monkey Programming Language - tree-walking interpreter',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.mk              # Run a Monkey script
  %(prog)s -i                     # Interactive mode
  %(prog)s --parse script.mk      # Parse and show the AST
  %(prog)s --tokens script.mk     # Show the token stream
  %(prog)s --debug script.mk      # Run with debug logging
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Monkey script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the AST (for debugging)'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Tokenize file and show the tokens (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug logging for all stages'
  )

  parser.add_argument(
      '--recursion-limit',
      type=int,
      default=DEFAULT_RECURSION_LIMIT,
      help='Maximum Python recursion depth available to Monkey programs'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def configure_logging(debug: bool) -> None:
  """Route debug records from the parser and interpreter to stderr"""
  logging.basicConfig(
      level=logging.DEBUG if debug else logging.WARNING,
      format="%(levelname)s %(name)s: %(message)s"
  )


def read_source(script_path: str) -> str:
  with open(script_path, 'r', encoding='utf-8') as f:
    return f.read()


def parse_file(script_path: str, debug: bool = False) -> int:
  """Parse a Monkey script file and show the AST"""
  parser = create_parser(debug)
  try:
    program, errors = parser.parse_file(script_path)
  except MonkeyParseError as e:
    print(e)
    return 1

  if errors:
    print(format_parse_errors(errors))
    return 1

  print(f"Parsed {len(program.statements)} top-level statements:")
  print("=" * 50)
  print(pretty_print_ast(program))
  print(program)
  return 0


def tokens_file(script_path: str) -> int:
  """Tokenize a Monkey script file and show every token"""
  try:
    content = read_source(script_path)
  except (OSError, UnicodeDecodeError) as e:
    print(f"Error: Cannot read '{script_path}': {e}")
    return 1

  for token in tokenize(content, script_path):
    print(f"{token.span}\t{token.type}\t{token}")
  return 0


def run_script_file(script_path: str, debug: bool = False,
                    interpreter: Optional[MonkeyInterpreter] = None) -> int:
  """Run a Monkey script file and print its final value"""
  if interpreter is None:
    interpreter = create_interpreter(debug)

  try:
    result = interpreter.run_file(script_path)
  except MonkeyParseError as e:
    print(e)
    return 1
  except MonkeyRuntimeError as e:
    print(format_runtime_error(e.message, e.source_line))
    return 1
  except RecursionError:
    print("Error: maximum recursion depth exceeded")
    return 1

  print(show_value(result))
  return 0


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

def setup_readline() -> None:
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(HISTORY_LENGTH)

  completions = sorted(KEYWORDS) + list_builtin_functions() + [
      ":parse", ":tokens", ":env", ":help", EXIT_COMMAND
  ]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def print_repl_help() -> None:
  print("REPL Commands:")
  print("  :parse <src>      - Show the parsed AST")
  print("  :tokens <src>     - Show the token stream")
  print("  :env              - Show current global bindings")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language features:")
  print("  let x = 5;                      - Value binding")
  print("  let add = fn(a, b) { a + b };   - Function literal")
  print("  add(1, 2)                       - Function call")
  print("  if x > 1 { x } else { 0 }       - Conditional expression")
  print("  println(len(\"monkey\"))          - Built-ins: len, str, println, input")


def handle_repl_input(code: str, interpreter: MonkeyInterpreter) -> bool:
  """Handle one REPL input line; returns False when the session should end"""
  stripped = code.strip()

  if stripped == EXIT_COMMAND:
    return False

  if not stripped:
    return True

  if stripped.startswith(":parse "):
    program, errors = interpreter.parser.parse_string(stripped[len(":parse "):])
    if errors:
      print(format_parse_errors(errors))
    else:
      print(pretty_print_ast(program), end="")
    return True

  if stripped.startswith(":tokens "):
    for token in interpreter.parser.tokenize(stripped[len(":tokens "):]):
      print(f"{token.type}\t{token}")
    return True

  if stripped == ":env":
    bindings = env_user_bindings(interpreter.global_env)
    if bindings:
      for name, value in bindings.items():
        val_str = show_value(value).replace("\n", " ")
        if len(val_str) > 60:
          val_str = val_str[:57] + "..."
        print(f"  {name} = {val_str}")
    else:
      print("  (no user-defined bindings)")
    return True

  if stripped == ":help":
    print_repl_help()
    return True

  try:
    result = interpreter.run_source(code)
    if not is_null(result):
      print(show_value(result))
  except MonkeyParseError as e:
    print(e)
  except MonkeyRuntimeError as e:
    print(format_runtime_error(e.message, e.source_line))
  except RecursionError:
    print("Error: maximum recursion depth exceeded")
  return True


def run_interactive_mode(debug: bool = False) -> None:
  """Run Monkey in interactive mode; bindings persist between inputs"""
  print(f"{VERSION} - Interactive Mode")
  print(f"Type '{EXIT_COMMAND}' to quit, ':help' for commands")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()
  interpreter = create_interpreter(debug)

  while True:
    try:
      code = input(PROMPT)
      if not handle_repl_input(code, interpreter):
        break
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break
    except Exception as e:
      print(f"Unexpected error: {e}")
      if debug:
        import traceback
        traceback.print_exc()


def main() -> None:
  """Main entry point for Monkey"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  configure_logging(args.debug)
  sys.setrecursionlimit(args.recursion_limit)

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.parse:
      status = parse_file(args.script, debug=args.debug)
    elif args.tokens:
      status = tokens_file(args.script)
    else:
      status = run_script_file(args.script, debug=args.debug)
    sys.exit(status)

  run_interactive_mode(debug=args.debug)


if __name__ == "__main__":
  main()
