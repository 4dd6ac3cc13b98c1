"""
Monkey Abstract Syntax Tree
Immutable node types produced by the parser and walked by the interpreter.
str() of any node is its canonical, re-parseable source rendering.
"""

from typing import ClassVar, Optional, Sequence, Tuple, Union
from dataclasses import dataclass


# ============================================================================
# RENDERING HELPERS
# ============================================================================

_STRING_RENDER_ESCAPES = {
    '\\': '\\\\', '"': '\\"', '\n': '\\n', '\t': '\\t', '\r': '\\r', '\0': '\\0',
}


def quote_string(text: str) -> str:
    """Render text as a double-quoted Monkey string literal"""
    return '"' + ''.join(_STRING_RENDER_ESCAPES.get(ch, ch) for ch in text) + '"'


def render_statements(statements: Sequence['Statement'], separator: str) -> str:
    """Render a statement sequence so that it parses back to the same sequence"""
    parts = []
    last = len(statements) - 1
    for i, stmt in enumerate(statements):
        text = str(stmt)
        # Without a terminator, "a" followed by "(b)" would re-parse as a call
        if isinstance(stmt, ExpressionStatement) and i < last:
            text += ";"
        parts.append(text)
    return separator.join(parts)


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Expression:
    type: ClassVar[str] = "EXPRESSION"


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    type: ClassVar[str] = "INTEGER"
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    type: ClassVar[str] = "BOOLEAN"
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class StringLiteral(Expression):
    type: ClassVar[str] = "STRING"
    value: str

    def __str__(self) -> str:
        return quote_string(self.value)


@dataclass(frozen=True)
class Identifier(Expression):
    type: ClassVar[str] = "IDENTIFIER"
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class PrefixExpression(Expression):
    type: ClassVar[str] = "PREFIX"
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass(frozen=True)
class InfixExpression(Expression):
    type: ClassVar[str] = "INFIX"
    left: Expression
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class IfExpression(Expression):
    type: ClassVar[str] = "IF"
    condition: Expression
    consequence: 'BlockStatement'
    alternative: Optional['BlockStatement'] = None

    def __str__(self) -> str:
        result = f"if {self.condition} {{{self.consequence}}}"
        if self.alternative is not None:
            result += f" else {{{self.alternative}}}"
        return result


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    type: ClassVar[str] = "FUNCTION"
    parameters: Tuple[str, ...]
    body: 'BlockStatement'

    def __str__(self) -> str:
        return f"fn({', '.join(self.parameters)}) {{{self.body}}}"


@dataclass(frozen=True)
class CallExpression(Expression):
    type: ClassVar[str] = "CALL"
    function: Expression
    arguments: Tuple[Expression, ...]

    def __str__(self) -> str:
        args = ", ".join(str(arg) for arg in self.arguments)
        return f"{self.function}({args})"


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class Statement:
    type: ClassVar[str] = "STATEMENT"


@dataclass(frozen=True)
class LetStatement(Statement):
    type: ClassVar[str] = "LET"
    name: str
    value: Expression

    def __str__(self) -> str:
        return f"let {self.name} = {self.value};"


@dataclass(frozen=True)
class ReturnStatement(Statement):
    type: ClassVar[str] = "RETURN"
    value: Expression

    def __str__(self) -> str:
        return f"return {self.value};"


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    type: ClassVar[str] = "EXPRESSION_STATEMENT"
    expression: Expression

    def __str__(self) -> str:
        return str(self.expression)


@dataclass(frozen=True)
class BlockStatement(Statement):
    type: ClassVar[str] = "BLOCK"
    statements: Tuple[Statement, ...] = ()

    def __str__(self) -> str:
        return render_statements(self.statements, " ")


@dataclass(frozen=True)
class Program:
    """Root of a parsed source text"""
    type: ClassVar[str] = "PROGRAM"
    statements: Tuple[Statement, ...] = ()

    def __str__(self) -> str:
        return render_statements(self.statements, "\n")


Node = Union[Program, Statement, Expression]


def pretty_print_ast(node: Node, indent: int = 0) -> str:
    """Pretty print an AST node as an indented tree for debugging"""
    pad = "  " * indent
    if isinstance(node, (Program, BlockStatement)):
        result = f"{pad}{node.type}\n"
        for stmt in node.statements:
            result += pretty_print_ast(stmt, indent + 1)
        return result
    if isinstance(node, LetStatement):
        return f"{pad}LET {node.name}\n" + pretty_print_ast(node.value, indent + 1)
    if isinstance(node, ReturnStatement):
        return f"{pad}RETURN\n" + pretty_print_ast(node.value, indent + 1)
    if isinstance(node, ExpressionStatement):
        return pretty_print_ast(node.expression, indent)
    if isinstance(node, PrefixExpression):
        return f"{pad}PREFIX {node.operator}\n" + pretty_print_ast(node.right, indent + 1)
    if isinstance(node, InfixExpression):
        return (f"{pad}INFIX {node.operator}\n" + pretty_print_ast(node.left, indent + 1)
                + pretty_print_ast(node.right, indent + 1))
    if isinstance(node, IfExpression):
        result = f"{pad}IF\n" + pretty_print_ast(node.condition, indent + 1)
        result += pretty_print_ast(node.consequence, indent + 1)
        if node.alternative is not None:
            result += f"{pad}ELSE\n" + pretty_print_ast(node.alternative, indent + 1)
        return result
    if isinstance(node, FunctionLiteral):
        result = f"{pad}FUNCTION({', '.join(node.parameters)})\n"
        return result + pretty_print_ast(node.body, indent + 1)
    if isinstance(node, CallExpression):
        result = f"{pad}CALL\n" + pretty_print_ast(node.function, indent + 1)
        for arg in node.arguments:
            result += pretty_print_ast(arg, indent + 1)
        return result
    return f"{pad}{node.type}({node})\n"
