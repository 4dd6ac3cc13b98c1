"""
Monkey Programming Language Parser
Precedence-climbing (Pratt) parser over a pull-based token source.
Syntax errors are collected as messages instead of aborting the whole program.
"""

from typing import Callable, Dict, List, Optional, Tuple
from enum import IntEnum
import logging

import lexer
from lexer import Lexer, Token, tokenize as tokenize_text
from ast_nodes import (
    BlockStatement, BooleanLiteral, CallExpression, Expression, ExpressionStatement,
    FunctionLiteral, Identifier, IfExpression, InfixExpression, IntegerLiteral,
    LetStatement, PrefixExpression, Program, ReturnStatement, Statement, StringLiteral,
)
from error_handling import MonkeyParseError
from utilities import INT64_MAX

logger = logging.getLogger(__name__)


class Precedence(IntEnum):
    """Binding power of a token in infix position, lowest to highest"""
    LOWEST = 1
    EQUALS = 2        # == or !=
    LESSGREATER = 3   # < or >
    SUM = 4           # + or -
    PRODUCT = 5       # * / %
    PREFIX = 6        # -x or !x
    CALL = 7          # f(x)


PRECEDENCES: Dict[str, Precedence] = {
    lexer.EQ: Precedence.EQUALS,
    lexer.NOT_EQ: Precedence.EQUALS,
    lexer.LT: Precedence.LESSGREATER,
    lexer.GT: Precedence.LESSGREATER,
    lexer.PLUS: Precedence.SUM,
    lexer.MINUS: Precedence.SUM,
    lexer.ASTERISK: Precedence.PRODUCT,
    lexer.SLASH: Precedence.PRODUCT,
    lexer.PERCENT: Precedence.PRODUCT,
    lexer.LPAREN: Precedence.CALL,
}


PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]


class Parser:
    """Pratt parser holding a two-token window over the token source"""

    def __init__(self, token_source, debug: bool = False):
        self.token_source = token_source
        self.debug = debug
        self.errors: List[str] = []

        self.cur_token: Token = Token(lexer.ILLEGAL, "")
        self.peek_token: Token = Token(lexer.ILLEGAL, "")

        self.prefix_parse_fns: Dict[str, PrefixParseFn] = {
            lexer.IDENT: self.parse_identifier,
            lexer.INT: self.parse_integer_literal,
            lexer.STRING: self.parse_string_literal,
            lexer.TRUE: self.parse_boolean,
            lexer.FALSE: self.parse_boolean,
            lexer.BANG: self.parse_prefix_expression,
            lexer.MINUS: self.parse_prefix_expression,
            lexer.LPAREN: self.parse_grouped_expression,
            lexer.IF: self.parse_if_expression,
            lexer.FUNCTION: self.parse_function_literal,
        }

        self.infix_parse_fns: Dict[str, InfixParseFn] = {
            token_type: self.parse_infix_expression
            for token_type in PRECEDENCES if token_type != lexer.LPAREN
        }
        self.infix_parse_fns[lexer.LPAREN] = self.parse_call_expression

        # Read two tokens so cur_token and peek_token are both set
        self.next_token()
        self.next_token()

    # ------------------------------------------------------------------
    # Token window
    # ------------------------------------------------------------------

    def next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self.token_source.next_token()

    def cur_token_is(self, token_type: str) -> bool:
        return self.cur_token.type == token_type

    def peek_token_is(self, token_type: str) -> bool:
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: str) -> bool:
        """Advance if the next token has the given type, otherwise record an error"""
        if self.peek_token_is(token_type):
            self.next_token()
            return True
        self.peek_error(token_type)
        return False

    def peek_error(self, token_type: str) -> None:
        self.errors.append(
            f"expected next token to be {token_type}, got {self.peek_token} instead"
        )

    def no_prefix_parse_fn_error(self, token: Token) -> None:
        self.errors.append(f"no prefix parse function for {token}")

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def parse_program(self) -> Program:
        """Parse statements until end of input; failed statements are skipped"""
        statements = []
        while not self.cur_token_is(lexer.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
                if self.debug:
                    logger.debug("Parsed statement: %s", stmt)
            self.next_token()
        return Program(tuple(statements))

    def parse_statement(self) -> Optional[Statement]:
        if self.cur_token_is(lexer.LET):
            return self.parse_let_statement()
        if self.cur_token_is(lexer.RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[LetStatement]:
        if not self.expect_peek(lexer.IDENT):
            return None
        name = self.cur_token.literal

        if not self.expect_peek(lexer.ASSIGN):
            return None
        self.next_token()

        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        if self.peek_token_is(lexer.SEMICOLON):
            self.next_token()
        return LetStatement(name, value)

    def parse_return_statement(self) -> Optional[ReturnStatement]:
        self.next_token()

        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        if self.peek_token_is(lexer.SEMICOLON):
            self.next_token()
        return ReturnStatement(value)

    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None
        if self.peek_token_is(lexer.SEMICOLON):
            self.next_token()
        return ExpressionStatement(expression)

    def parse_block_statement(self) -> BlockStatement:
        """Collect statements until '}' or end of input; cur_token is '{' on entry"""
        statements = []
        self.next_token()
        while not self.cur_token_is(lexer.RBRACE) and not self.cur_token_is(lexer.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.next_token()
        return BlockStatement(tuple(statements))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token)
            return None

        left = prefix()
        if left is None:
            return None

        while not self.peek_token_is(lexer.SEMICOLON) and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left
            self.next_token()
            left = infix(left)
            if left is None:
                return None

        return left

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur_token.literal)

    def parse_integer_literal(self) -> Optional[Expression]:
        value = int(self.cur_token.literal)
        if value > INT64_MAX:
            self.errors.append(f"could not parse {self.cur_token.literal} as integer")
            return None
        return IntegerLiteral(value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token.literal)

    def parse_boolean(self) -> Expression:
        return BooleanLiteral(self.cur_token_is(lexer.TRUE))

    def parse_prefix_expression(self) -> Optional[Expression]:
        operator = self.cur_token.literal
        self.next_token()

        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None
        return PrefixExpression(operator, right)

    def parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        operator = self.cur_token.literal
        precedence = self.cur_precedence()
        self.next_token()

        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(left, operator, right)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.next_token()

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None
        if not self.expect_peek(lexer.RPAREN):
            return None
        return expression

    def parse_if_expression(self) -> Optional[Expression]:
        self.next_token()

        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None
        if not self.expect_peek(lexer.LBRACE):
            return None
        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_token_is(lexer.ELSE):
            self.next_token()
            if not self.expect_peek(lexer.LBRACE):
                return None
            alternative = self.parse_block_statement()

        return IfExpression(condition, consequence, alternative)

    def parse_function_literal(self) -> Optional[Expression]:
        if not self.expect_peek(lexer.LPAREN):
            return None

        parameters = self.parse_function_parameters()
        if parameters is None:
            return None
        if not self.expect_peek(lexer.LBRACE):
            return None

        body = self.parse_block_statement()
        return FunctionLiteral(tuple(parameters), body)

    def parse_function_parameters(self) -> Optional[List[str]]:
        identifiers: List[str] = []

        if self.peek_token_is(lexer.RPAREN):
            self.next_token()
            return identifiers

        if not self.expect_peek(lexer.IDENT):
            return None
        identifiers.append(self.cur_token.literal)

        while self.peek_token_is(lexer.COMMA):
            self.next_token()
            if not self.expect_peek(lexer.IDENT):
                return None
            identifiers.append(self.cur_token.literal)

        if not self.expect_peek(lexer.RPAREN):
            return None
        return identifiers

    def parse_call_expression(self, function: Expression) -> Optional[Expression]:
        arguments = self.parse_expression_list(lexer.RPAREN)
        if arguments is None:
            return None
        return CallExpression(function, tuple(arguments))

    def parse_expression_list(self, end: str) -> Optional[List[Expression]]:
        """Parse a comma-separated expression list closed by the given token"""
        elements: List[Expression] = []

        if self.peek_token_is(end):
            self.next_token()
            return elements

        self.next_token()
        element = self.parse_expression(Precedence.LOWEST)
        if element is None:
            return None
        elements.append(element)

        while self.peek_token_is(lexer.COMMA):
            self.next_token()
            self.next_token()
            element = self.parse_expression(Precedence.LOWEST)
            if element is None:
                return None
            elements.append(element)

        if not self.expect_peek(end):
            return None
        return elements


# ============================================================================
# FACADE
# ============================================================================

class MonkeyParser:
    """Main Monkey parser combining the tokenizer and the Pratt parser"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def parse_string(self, text: str, filename: str = "<input>") -> Tuple[Program, List[str]]:
        """Parse Monkey source code; a non-empty error list means the program may be partial"""
        parser = Parser(Lexer(text, filename), debug=self.debug)
        program = parser.parse_program()
        if self.debug and parser.errors:
            logger.debug("%d parse errors in %s", len(parser.errors), filename)
        return program, parser.errors

    def parse_file(self, filepath: str, strict: bool = False) -> Tuple[Program, List[str]]:
        """Parse a Monkey source file, raising MonkeyParseError on errors when strict"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise MonkeyParseError([f"File not found: {filepath}"], filepath)
        except UnicodeDecodeError as e:
            raise MonkeyParseError([f"Cannot decode file {filepath}: {e}"], filepath)
        except OSError as e:
            raise MonkeyParseError([f"Cannot read file {filepath}: {e.strerror}"], filepath)

        program, errors = self.parse_string(content, filepath)
        if strict and errors:
            raise MonkeyParseError(errors, filepath)
        return program, errors

    def tokenize(self, text: str, filename: str = "<input>") -> List[Token]:
        """Tokenize Monkey source code"""
        return tokenize_text(text, filename)


def create_parser(debug: bool = False) -> MonkeyParser:
    """Create a Monkey parser"""
    return MonkeyParser(debug=debug)


def parse(text: str, filename: str = "<input>") -> Tuple[Program, List[str]]:
    """Parse source text into (Program, errors)"""
    return create_parser().parse_string(text, filename)
