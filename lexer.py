"""
Monkey Tokenizer
Turns source text into a pull-based stream of tokens using pyparsing scanners
"""

from typing import Any, Dict, Iterator, List, Optional
from dataclasses import dataclass

from pyparsing import MatchFirst, ParserElement, Regex, col, lineno, one_of


# ============================================================================
# TOKEN TYPES
# ============================================================================

ILLEGAL = "ILLEGAL"
EOF = "EOF"

IDENT = "IDENT"
INT = "INT"
STRING = "STRING"

ASSIGN = "="
BANG = "!"
PLUS = "+"
MINUS = "-"
ASTERISK = "*"
SLASH = "/"
PERCENT = "%"

EQ = "=="
NOT_EQ = "!="
LT = "<"
GT = ">"

COMMA = ","
SEMICOLON = ";"
LPAREN = "("
RPAREN = ")"
LBRACE = "{"
RBRACE = "}"

FUNCTION = "fn"
LET = "let"
TRUE = "true"
FALSE = "false"
IF = "if"
ELSE = "else"
RETURN = "return"

KEYWORDS: Dict[str, str] = {
    "fn": FUNCTION,
    "let": LET,
    "true": TRUE,
    "false": FALSE,
    "if": IF,
    "else": ELSE,
    "return": RETURN,
}

OPERATORS = [ASSIGN, BANG, PLUS, MINUS, ASTERISK, SLASH, PERCENT, EQ, NOT_EQ,
             LT, GT, COMMA, SEMICOLON, LPAREN, RPAREN, LBRACE, RBRACE]


def lookup_identifier(name: str) -> str:
    """Return the keyword token type for name, or IDENT"""
    return KEYWORDS.get(name, IDENT)


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True)
class SourceSpan:
    """Source location of a token"""
    filename: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    text: str = ""

    def __str__(self) -> str:
        if self.start_line == self.end_line:
            return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_col}"
        return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


@dataclass(frozen=True)
class Token:
    """Monkey token with source information"""
    type: str
    literal: Any
    span: Optional[SourceSpan] = None

    def __str__(self) -> str:
        if self.type == STRING:
            return self.span.text if self.span else f'"{self.literal}"'
        if self.type == ILLEGAL:
            return f"ILLEGAL({self.literal})"
        if self.type == EOF:
            return "EOF"
        return str(self.literal)


# ============================================================================
# SCANNER
# ============================================================================

STRING_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', '\\': '\\', '"': '"', '0': '\0',
}


def process_string_escapes(s: str) -> str:
    """Decode escape sequences in the body of a string literal"""
    result = []
    i = 0
    while i < len(s):
        if s[i] == '\\' and i + 1 < len(s) and s[i + 1] in STRING_ESCAPES:
            result.append(STRING_ESCAPES[s[i + 1]])
            i += 2
        else:
            # Unknown escape, keep as-is
            result.append(s[i])
            i += 1
    return ''.join(result)


def _build_token_scanner() -> ParserElement:
    """Build the pyparsing expression matching a single token"""
    string_literal = Regex(r'"(?:[^"\\\n]|\\.)*"').set_parse_action(
        lambda t: (STRING, process_string_escapes(t[0][1:-1]))
    )
    integer = Regex(r"[0-9]+").set_parse_action(lambda t: (INT, t[0]))
    identifier = Regex(r"[A-Za-z_][A-Za-z0-9_]*").set_parse_action(
        lambda t: (lookup_identifier(t[0]), t[0])
    )
    # one_of reorders the alternatives so "==" wins over "="
    operator = one_of(" ".join(OPERATORS)).set_parse_action(lambda t: (t[0], t[0]))

    # Offsets must line up with the raw text for spans and ILLEGAL gaps
    return MatchFirst([string_literal, integer, identifier, operator]).parse_with_tabs()


TOKEN_SCANNER = _build_token_scanner()


class Lexer:
    """Token source for the parser; next_token() yields EOF forever once exhausted"""

    def __init__(self, text: str, filename: str = "<input>"):
        self.text = text
        self.filename = filename
        self._tokens = self._scan()
        self._eof: Optional[Token] = None

    def _span(self, start: int, end: int) -> SourceSpan:
        return SourceSpan(
            self.filename,
            lineno(start, self.text), col(start, self.text),
            lineno(end, self.text), col(end, self.text),
            self.text[start:end],
        )

    def _illegal_tokens(self, start: int, end: int) -> Iterator[Token]:
        """Characters skipped by the scanner become one ILLEGAL token each"""
        for pos in range(start, end):
            if not self.text[pos].isspace():
                yield Token(ILLEGAL, self.text[pos], self._span(pos, pos + 1))

    def _scan(self) -> Iterator[Token]:
        last_end = 0
        for tokens, start, end in TOKEN_SCANNER.scan_string(self.text):
            yield from self._illegal_tokens(last_end, start)
            token_type, literal = tokens[0]
            yield Token(token_type, literal, self._span(start, end))
            last_end = end
        yield from self._illegal_tokens(last_end, len(self.text))

    def next_token(self) -> Token:
        """Return the next token"""
        if self._eof is not None:
            return self._eof
        token = next(self._tokens, None)
        if token is None:
            end = len(self.text)
            self._eof = Token(EOF, "", self._span(end, end))
            return self._eof
        return token

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == EOF:
                return


def tokenize(text: str, filename: str = "<input>") -> List[Token]:
    """Tokenize Monkey source code, including the trailing EOF token"""
    return list(Lexer(text, filename))
