"""
Utilities module for the Monkey interpreter
Contains common helper functions shared by the evaluator and the built-ins
"""

from typing import Dict, List, Optional

from error_handling import MonkeyRuntimeError


INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


# ==================== TYPE CHECKING UTILITIES ====================

def get_value_type(val: Optional[Dict]) -> str:
  """Safely get the type tag of a runtime value"""
  return val.get('type', 'Unknown') if isinstance(val, dict) else 'Unknown'


def fits_int64(value: int) -> bool:
  """Check that an integer is representable as a signed 64-bit integer"""
  return INT64_MIN <= value <= INT64_MAX


# ==================== ERROR MESSAGE BUILDERS ====================

def type_mismatch_error(
  func_name: str,
  param_name: str,
  expected: str,
  actual: Dict
) -> MonkeyRuntimeError:
  """
  Generate type mismatch error

  Args:
    func_name: Function name
    param_name: Parameter name
    expected: Expected type
    actual: Actual value dict

  Returns:
    MonkeyRuntimeError with formatted message
  """
  return MonkeyRuntimeError(
    f"{func_name} requires {expected} for {param_name}, got {get_value_type(actual)}"
  )


def arity_error(func_name: str, expected: int, got: int) -> MonkeyRuntimeError:
  """
  Generate arity mismatch error for a built-in

  Args:
    func_name: Function name
    expected: Expected number of arguments
    got: Actual number of arguments

  Returns:
    MonkeyRuntimeError with formatted message
  """
  noun = "argument" if expected == 1 else "arguments"
  return MonkeyRuntimeError(
    f"{func_name} requires {expected} {noun}, got {got}"
  )


# ==================== VALIDATION UTILITIES ====================

def validate_function_args(
  func_name: str,
  args: List[Dict],
  expected_types: List[Optional[str]]
) -> None:
  """
  Validate function arguments match expected types

  Args:
    func_name: Function name for error messages
    args: List of argument values
    expected_types: List of expected type names, None accepts any type

  Raises:
    MonkeyRuntimeError if validation fails
  """
  if len(args) != len(expected_types):
    raise arity_error(func_name, len(expected_types), len(args))

  for i, (arg, expected) in enumerate(zip(args, expected_types)):
    if expected is not None and get_value_type(arg) != expected:
      raise type_mismatch_error(func_name, f"argument {i+1}", expected, arg)
