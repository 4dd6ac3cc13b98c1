"""
Monkey Standard Library
Built-in functions. Console access goes through an injected I/O capability
so the evaluator itself never touches stdin/stdout.
"""

from typing import Callable, Dict, List, Optional
import re

from utilities import fits_int64, validate_function_args
from values import (
  NULL,
  STRING,
  make_builtin,
  make_integer,
  make_string,
  show_value,
)


# ============================================================================
# I/O CAPABILITY
# ============================================================================

def make_io(read_line: Callable[[str], str], write_line: Callable[[str], None]) -> Dict:
  """Bundle a line reader and a line writer into an I/O capability"""
  return {
      'read_line': read_line,
      'write_line': write_line
  }


def make_console_io() -> Dict:
  """I/O capability backed by the process console"""
  return make_io(input, print)


# ============================================================================
# BUILT-IN FUNCTIONS
# ============================================================================

INTEGER_PATTERN = re.compile(r"[+-]?\d+")


def monkey_len(args: List[Dict]) -> Dict:
  """Length of a string"""
  validate_function_args("len", args, [STRING])
  return make_integer(len(args[0]['value']))


def monkey_str(args: List[Dict]) -> Dict:
  """Display form of any value as a string"""
  validate_function_args("str", args, [None])
  return make_string(show_value(args[0]))


def make_println(io: Dict) -> Callable[[List[Dict]], Dict]:
  def monkey_println(args: List[Dict]) -> Dict:
    """Write a value as one line of output"""
    validate_function_args("println", args, [None])
    io['write_line'](show_value(args[0]))
    return NULL
  return monkey_println


def make_input(io: Dict) -> Callable[[List[Dict]], Dict]:
  def monkey_input(args: List[Dict]) -> Dict:
    """Read a line after showing the prompt; integers come back as Integer"""
    validate_function_args("input", args, [STRING])
    try:
      text = io['read_line'](args[0]['value']).strip()
    except EOFError:
      # End of input reads as an empty line
      text = ""
    if INTEGER_PATTERN.fullmatch(text) and fits_int64(int(text)):
      return make_integer(int(text))
    return make_string(text)
  return monkey_input


def create_builtins(io: Optional[Dict] = None) -> Dict[str, Dict]:
  """Create the name -> BuiltIn registry bound to an I/O capability"""
  if io is None:
    io = make_console_io()
  return {
      'len': make_builtin('len', monkey_len, 1),
      'str': make_builtin('str', monkey_str, 1),
      'println': make_builtin('println', make_println(io), 1),
      'input': make_builtin('input', make_input(io), 1),
  }


def list_builtin_functions() -> List[str]:
  """Names of all built-in functions"""
  return sorted(create_builtins(make_io(lambda prompt: "", lambda text: None)))
