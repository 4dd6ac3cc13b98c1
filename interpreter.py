"""
Monkey Interpreter - tree-walking evaluator
Walks the AST against a chain of environments. Early `return` is threaded
through evaluation as an explicit Outcome instead of an exception; evaluation
errors raise MonkeyRuntimeError at the first failure.
"""

from typing import Dict, List, NamedTuple, Optional
import logging

from ast_nodes import (
  BlockStatement,
  CallExpression,
  Expression,
  IfExpression,
  Node,
  Program,
  Statement,
  quote_string,
)
from environment import (
  env_enclose,
  env_lookup_value,
  env_set_value,
  make_runtime_env,
)
from error_handling import MonkeyParseError, MonkeyRuntimeError
from parsing import create_parser
from stdlib import create_builtins, make_console_io
from utilities import fits_int64
from values import (
  BOOLEAN,
  BUILTIN,
  FUNCTION,
  INTEGER,
  NULL,
  STRING,
  is_truthy,
  make_boolean,
  make_function,
  make_integer,
  make_string,
  show_value,
)

logger = logging.getLogger(__name__)


# ============================================================================
# DATA STRUCTURES
# ============================================================================

class Outcome(NamedTuple):
  """Result of evaluating a node: a value, and whether a `return` produced it"""
  value: Dict
  returned: bool = False


def completed(value: Dict) -> Outcome:
  return Outcome(value, False)


def returned(value: Dict) -> Outcome:
  return Outcome(value, True)


def make_execution_context(builtins: Optional[Dict] = None, debug: bool = False) -> Dict:
  """Create an execution context carrying the built-in registry"""
  return {
      'builtins': builtins if builtins is not None else create_builtins(make_console_io()),
      'debug': debug
  }


def inspect_value(value: Dict) -> str:
  """Render a value for error messages; strings keep their quotes"""
  if value['type'] == STRING:
    return quote_string(value['value'])
  return show_value(value)


# ============================================================================
# ARITHMETIC
# ============================================================================

def truncated_div(left: int, right: int) -> int:
  """Integer division rounding toward zero"""
  quotient = abs(left) // abs(right)
  return quotient if (left >= 0) == (right > 0) else -quotient


def truncated_mod(left: int, right: int) -> int:
  """Remainder whose sign follows the dividend"""
  return left - right * truncated_div(left, right)


INTEGER_ARITHMETIC = {
    '+': lambda l, r: l + r,
    '-': lambda l, r: l - r,
    '*': lambda l, r: l * r,
    '/': truncated_div,
    '%': truncated_mod,
}

INTEGER_COMPARISON = {
    '<': lambda l, r: l < r,
    '>': lambda l, r: l > r,
    '==': lambda l, r: l == r,
    '!=': lambda l, r: l != r,
}


# ============================================================================
# ENTRY POINTS
# ============================================================================

def eval_ast(ast_node: Node, env: Dict, context: Optional[Dict] = None) -> Dict:
  """
  Evaluate a program, statement or expression and return its value.
  A top-level `return` simply ends evaluation with its value.
  """
  if context is None:
    context = make_execution_context()

  if isinstance(ast_node, Program):
    return eval_program(ast_node, env, context)
  elif isinstance(ast_node, Statement):
    return eval_statement(ast_node, env, context).value
  elif isinstance(ast_node, Expression):
    return eval_expression(ast_node, env, context).value
  raise MonkeyRuntimeError(f"cannot evaluate {type(ast_node).__name__}")


evaluate = eval_ast


def eval_program(program: Program, env: Dict, context: Dict) -> Dict:
  """
  Evaluate top-level statements in order; `return` stops the program.
  A runtime error is tagged with the rendering of the failing statement.
  """
  result = NULL
  for stmt in program.statements:
    try:
      outcome = eval_statement(stmt, env, context)
    except MonkeyRuntimeError as e:
      if e.source_line is None:
        e.source_line = str(stmt)
      raise
    if outcome.returned:
      return outcome.value
    result = outcome.value
  return result


# ============================================================================
# STATEMENTS
# ============================================================================

def eval_statement(stmt: Statement, env: Dict, context: Dict) -> Outcome:
  if context['debug']:
    logger.debug("Evaluating: %s", stmt.type)

  node_type = stmt.type

  if node_type == "EXPRESSION_STATEMENT":
    return eval_expression(stmt.expression, env, context)
  elif node_type == "LET":
    outcome = eval_expression(stmt.value, env, context)
    if outcome.returned:
      return outcome
    return completed(env_set_value(env, stmt.name, outcome.value))
  elif node_type == "RETURN":
    outcome = eval_expression(stmt.value, env, context)
    return returned(outcome.value)
  elif node_type == "BLOCK":
    return eval_block_statement(stmt, env, context)
  raise MonkeyRuntimeError(f"unknown statement type: {node_type}")


def eval_block_statement(block: BlockStatement, env: Dict, context: Dict) -> Outcome:
  """
  Evaluate a block in the current environment. Blocks are not scopes; only
  function application creates one. A `return` stops the block and is passed
  on unchanged to the enclosing call or program.
  """
  result = completed(NULL)
  for stmt in block.statements:
    result = eval_statement(stmt, env, context)
    if result.returned:
      return result
  return result


# ============================================================================
# EXPRESSIONS
# ============================================================================

def eval_expression(expr: Expression, env: Dict, context: Dict) -> Outcome:
  if context['debug']:
    logger.debug("Evaluating: %s", expr.type)

  node_type = expr.type

  if node_type == "INTEGER":
    return completed(make_integer(expr.value))
  elif node_type == "BOOLEAN":
    return completed(make_boolean(expr.value))
  elif node_type == "STRING":
    return completed(make_string(expr.value))
  elif node_type == "IDENTIFIER":
    return completed(eval_identifier(expr.name, env, context))
  elif node_type == "PREFIX":
    right = eval_expression(expr.right, env, context)
    if right.returned:
      return right
    return completed(eval_prefix_expression(expr.operator, right.value))
  elif node_type == "INFIX":
    left = eval_expression(expr.left, env, context)
    if left.returned:
      return left
    right = eval_expression(expr.right, env, context)
    if right.returned:
      return right
    return completed(eval_infix_expression(expr.operator, left.value, right.value))
  elif node_type == "IF":
    return eval_if_expression(expr, env, context)
  elif node_type == "FUNCTION":
    return completed(make_function(expr.parameters, expr.body, env))
  elif node_type == "CALL":
    return eval_call_expression(expr, env, context)
  raise MonkeyRuntimeError(f"unknown expression type: {node_type}")


def eval_identifier(name: str, env: Dict, context: Dict) -> Dict:
  """Resolve a name through the scope chain, then the built-in registry"""
  value = env_lookup_value(env, name)
  if value is not None:
    return value

  builtin = context['builtins'].get(name)
  if builtin is not None:
    return builtin

  raise MonkeyRuntimeError(f"identifier not found: {name}")


def eval_prefix_expression(operator: str, right: Dict) -> Dict:
  if operator == '!':
    return make_boolean(not is_truthy(right))
  if operator == '-' and right['type'] == INTEGER:
    result = -right['value']
    if not fits_int64(result):
      raise MonkeyRuntimeError(f"integer overflow: ({operator}{inspect_value(right)})")
    return make_integer(result)
  raise MonkeyRuntimeError(f"invalid prefix expression: ({operator}{inspect_value(right)})")


def eval_infix_expression(operator: str, left: Dict, right: Dict) -> Dict:
  if left['type'] == INTEGER and right['type'] == INTEGER:
    return eval_integer_infix_expression(operator, left, right)
  if left['type'] == BOOLEAN and right['type'] == BOOLEAN:
    if operator == '==':
      return make_boolean(left['value'] == right['value'])
    if operator == '!=':
      return make_boolean(left['value'] != right['value'])
  raise MonkeyRuntimeError(
    f"invalid infix expression: ({inspect_value(left)} {operator} {inspect_value(right)})"
  )


def eval_integer_infix_expression(operator: str, left: Dict, right: Dict) -> Dict:
  l, r = left['value'], right['value']
  expression = f"({l} {operator} {r})"

  if operator in INTEGER_COMPARISON:
    return make_boolean(INTEGER_COMPARISON[operator](l, r))

  if operator not in INTEGER_ARITHMETIC:
    raise MonkeyRuntimeError(f"invalid infix expression: {expression}")
  if r == 0 and operator == '/':
    raise MonkeyRuntimeError(f"division by zero: {expression}")
  if r == 0 and operator == '%':
    raise MonkeyRuntimeError(f"modulo by zero: {expression}")

  result = INTEGER_ARITHMETIC[operator](l, r)
  if not fits_int64(result):
    raise MonkeyRuntimeError(f"integer overflow: {expression}")
  return make_integer(result)


def eval_if_expression(expr: IfExpression, env: Dict, context: Dict) -> Outcome:
  condition = eval_expression(expr.condition, env, context)
  if condition.returned:
    return condition

  if is_truthy(condition.value):
    return eval_block_statement(expr.consequence, env, context)
  elif expr.alternative is not None:
    return eval_block_statement(expr.alternative, env, context)
  return completed(NULL)


def eval_call_expression(expr: CallExpression, env: Dict, context: Dict) -> Outcome:
  """Evaluate the callee, then the arguments left to right, then apply"""
  function = eval_expression(expr.function, env, context)
  if function.returned:
    return function

  args = []
  for arg_expr in expr.arguments:
    arg = eval_expression(arg_expr, env, context)
    if arg.returned:
      return arg
    args.append(arg.value)

  return completed(apply_function(function.value, args, context))


def apply_function(function: Dict, args: List[Dict], context: Dict) -> Dict:
  """Apply a user function or a built-in to already evaluated arguments"""
  if function['type'] == FUNCTION:
    call_env = extend_function_env(function, args)
    outcome = eval_block_statement(function['body'], call_env, context)
    # Unwrap so a `return` never escapes past its own function
    return outcome.value

  if function['type'] == BUILTIN:
    return function['func'](args)

  raise MonkeyRuntimeError(f"not a function: {inspect_value(function)}")


def extend_function_env(function: Dict, args: List[Dict]) -> Dict:
  """Create the call scope: parameters bound positionally, enclosing the closure"""
  params = function['params']
  if len(params) != len(args):
    raise MonkeyRuntimeError(
      f"wrong number of arguments: want={len(params)}, got={len(args)}"
    )

  call_env = env_enclose(function['closure_env'])
  for param, arg in zip(params, args):
    env_set_value(call_env, param, arg)
  return call_env


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

class MonkeyInterpreter:
  """Interpreter session: global environment, built-ins and I/O capability"""

  def __init__(self, debug: bool = False, io: Optional[Dict] = None):
    self.debug = debug
    self.io = io if io is not None else make_console_io()
    self.builtins = create_builtins(self.io)
    self.parser = create_parser(debug)
    self.global_env = make_runtime_env()

  def make_context(self) -> Dict:
    return make_execution_context(self.builtins, self.debug)

  def evaluate(self, ast_node: Node, env: Optional[Dict] = None) -> Dict:
    """Evaluate a node in env, or in the session's global environment"""
    target_env = self.global_env if env is None else env
    return eval_ast(ast_node, target_env, self.make_context())

  def run_source(self, text: str, filename: str = "<input>") -> Dict:
    """Parse and evaluate source text in the global environment"""
    program, errors = self.parser.parse_string(text, filename)
    if errors:
      raise MonkeyParseError(errors, filename)
    return self.evaluate(program)

  def run_file(self, filepath: str) -> Dict:
    """Parse and evaluate a source file in the global environment"""
    program, _ = self.parser.parse_file(filepath, strict=True)
    return self.evaluate(program)

  def reset(self) -> None:
    """Drop every global binding"""
    self.global_env = make_runtime_env()


def create_interpreter(debug: bool = False, io: Optional[Dict] = None) -> MonkeyInterpreter:
  """Factory function returning an interpreter"""
  return MonkeyInterpreter(debug=debug, io=io)
