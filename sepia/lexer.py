"""Lexer for the Sepia language.

The lexer is a small stateful scanner. It keeps two cursors into the
source: `position` points at `current_char` and `reading_position` is
always one character ahead. Tokens are produced on demand by
`next_token`; once the input is exhausted the lexer keeps returning EOF.
"""

from __future__ import annotations

from typing import Iterator, List

from . import token
from .token import Token

NUL = '\0'

_WHITESPACE = ' \t\r\n'

# Characters that stand on their own; no lookahead needed.
_SINGLE_CHAR_TOKENS = {
    '(': token.LPAREN,
    ')': token.RPAREN,
    '{': token.LBRACE,
    '}': token.RBRACE,
    '[': token.LBRACKET,
    ']': token.RBRACKET,
    ',': token.COMMA,
    ';': token.SEMICOLON,
    ':': token.COLON,
}

# first char -> ((second char, kind), ...), fallback kind when nothing matches
_COMPOUND_TOKENS = {
    '+': ((('=', token.PLUSEQ), ('+', token.INCREMENT)), token.PLUS),
    '-': ((('>', token.OPENBLOCK), ('=', token.MINUSEQ), ('-', token.DECREMENT)), token.MINUS),
    '*': ((('=', token.MULEQ),), token.ASTERISK),
    '/': ((('=', token.SLASHEQ),), token.SLASH),
    '<': ((('=', token.LTEQ),), token.LT),
    '>': ((('=', token.GTEQ),), token.GT),
    '=': ((('=', token.EQ),), token.ASSIGN),
    '!': ((('=', token.NOT_EQ),), token.BANG),
    '|': ((('|', token.OR),), token.ILLEGAL),
    '&': ((('&', token.AND),), token.ILLEGAL),
}


def is_letter(ch: str) -> bool:
    return ('a' <= ch <= 'z') or ('A' <= ch <= 'Z') or ch == '_'


def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


class Lexer:
    """Turns Sepia source text into a stream of tokens."""

    def __init__(self, source: str):
        self.input = source
        self.position = 0
        self.reading_position = 0
        self.current_char = ''
        self.line = 1
        self.column = 0
        self.consume_char()

    def consume_char(self) -> None:
        if self.current_char == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        if self.reading_position >= len(self.input):
            self.current_char = NUL
        else:
            self.current_char = self.input[self.reading_position]
        self.position = self.reading_position
        self.reading_position += 1

    def peek_char(self) -> str:
        if self.reading_position >= len(self.input):
            return NUL
        return self.input[self.reading_position]

    def skip_whitespace(self) -> None:
        while self.current_char in _WHITESPACE:
            self.consume_char()

    def skip_comment(self) -> None:
        while self.current_char not in ('\n', NUL):
            self.consume_char()

    def next_token(self) -> Token:
        self.skip_whitespace()
        while self.current_char == '#':
            self.skip_comment()
            self.skip_whitespace()

        ch = self.current_char
        line, column = self.line, self.column

        if ch == NUL and self.position >= len(self.input):
            return Token(token.EOF, '', line, column)
        if ch in _SINGLE_CHAR_TOKENS:
            tok = Token(_SINGLE_CHAR_TOKENS[ch], ch, line, column)
        elif ch in _COMPOUND_TOKENS:
            tok = self.read_compound(line, column)
        elif ch == '"':
            tok = Token(token.STRING, self.read_string(), line, column)
        elif is_letter(ch):
            literal = self.read_identifier()
            return Token(token.lookup_ident(literal), literal, line, column)
        elif is_digit(ch):
            return Token(token.INT, self.read_integer(), line, column)
        else:
            tok = Token(token.ILLEGAL, ch, line, column)
        self.consume_char()
        return tok

    def read_compound(self, line: int, column: int) -> Token:
        first = self.current_char
        candidates, fallback = _COMPOUND_TOKENS[first]
        nxt = self.peek_char()
        for second, kind in candidates:
            if nxt == second:
                self.consume_char()
                return Token(kind, first + second, line, column)
        return Token(fallback, first, line, column)

    def read_string(self) -> str:
        start = self.position + 1
        while True:
            self.consume_char()
            if self.current_char == '"' or self.position >= len(self.input):
                break
        return self.input[start:self.position]

    def read_identifier(self) -> str:
        start = self.position
        while is_letter(self.current_char):
            self.consume_char()
        return self.input[start:self.position]

    def read_integer(self) -> str:
        start = self.position
        while is_digit(self.current_char):
            self.consume_char()
        return self.input[start:self.position]

    def tokens(self) -> Iterator[Token]:
        """Yield tokens up to and including the first EOF."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == token.EOF:
                return


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with EOF."""
    return list(Lexer(source).tokens())
