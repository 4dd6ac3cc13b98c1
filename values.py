"""
Monkey runtime values
Tagged immutable dictionaries: Integer, Boolean, String, Function, BuiltIn, Null
"""

from typing import Any, Callable, Dict, List


INTEGER = "Integer"
BOOLEAN = "Boolean"
STRING = "String"
FUNCTION = "Function"
BUILTIN = "BuiltIn"
NULL_TYPE = "Null"


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_value(value: Any, type_name: str) -> Dict:
  """Create an immutable runtime value"""
  return {
      'value': value,
      'type': type_name
  }


def make_integer(value: int) -> Dict:
  return make_value(value, INTEGER)


def make_boolean(value: bool) -> Dict:
  return TRUE if value else FALSE


def make_string(value: str) -> Dict:
  return make_value(value, STRING)


def make_function(params: List[str], body, closure_env: Dict) -> Dict:
  """Create a function value closing over its defining environment"""
  return {
      'type': FUNCTION,
      'params': list(params),
      'body': body,
      'closure_env': closure_env
  }


def make_builtin(name: str, func: Callable[[List[Dict]], Dict], arity: int) -> Dict:
  """Create a built-in function value"""
  return {
      'type': BUILTIN,
      'name': name,
      'func': func,
      'arity': arity
  }


TRUE = make_value(True, BOOLEAN)
FALSE = make_value(False, BOOLEAN)
NULL = make_value(None, NULL_TYPE)


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def is_truthy(value: Dict) -> bool:
  """Integers are truthy when positive, booleans by value, everything else is falsy"""
  value_type = value['type']
  if value_type == INTEGER:
    return value['value'] > 0
  elif value_type == BOOLEAN:
    return value['value']
  elif value_type in (STRING, FUNCTION, BUILTIN, NULL_TYPE):
    return False
  raise ValueError(f"No truthiness for type: {value_type}")


def show_value(value: Dict) -> str:
  """Render a runtime value as text"""
  value_type = value['type']
  if value_type == INTEGER:
    return str(value['value'])
  elif value_type == BOOLEAN:
    return "true" if value['value'] else "false"
  elif value_type == STRING:
    return value['value']
  elif value_type == NULL_TYPE:
    return "null"
  elif value_type == FUNCTION:
    return f"fn({', '.join(value['params'])}) {{\n{value['body']}\n}}"
  elif value_type == BUILTIN:
    return f"builtin function {value['name']}"
  raise ValueError(f"No display for type: {value_type}")


def is_null(value: Dict) -> bool:
  return value['type'] == NULL_TYPE
