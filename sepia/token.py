"""Token definitions for the Sepia language.

Token kinds are plain strings so they can be printed directly in parser
error messages. The keyword table promotes identifiers such as `value`
or `end` to their keyword kinds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


ILLEGAL = 'ILLEGAL'
EOF = 'EOF'

# Identifiers and literals
IDENT = 'IDENT'
INT = 'INT'
STRING = 'STRING'

# Operators
ASSIGN = 'ASSIGN'
PLUS = 'PLUS'
MINUS = 'MINUS'
BANG = 'BANG'
ASTERISK = 'ASTERISK'
SLASH = 'SLASH'
LT = 'LT'
GT = 'GT'
LTEQ = 'LTEQ'
GTEQ = 'GTEQ'
EQ = 'EQ'
NOT_EQ = 'NOT_EQ'
AND = 'AND'
OR = 'OR'
PLUSEQ = 'PLUSEQ'
MINUSEQ = 'MINUSEQ'
MULEQ = 'MULEQ'
SLASHEQ = 'SLASHEQ'
INCREMENT = 'INCREMENT'
DECREMENT = 'DECREMENT'

# Delimiters
COMMA = 'COMMA'
COLON = 'COLON'
SEMICOLON = 'SEMICOLON'
LPAREN = 'LPAREN'
RPAREN = 'RPAREN'
LBRACE = 'LBRACE'
RBRACE = 'RBRACE'
LBRACKET = 'LBRACKET'
RBRACKET = 'RBRACKET'
OPENBLOCK = 'OPENBLOCK'
CLOSEBLOCK = 'CLOSEBLOCK'

# Keywords
VALUE = 'VALUE'
UPDATE = 'UPDATE'
RETURN = 'RETURN'
IF = 'IF'
ELSE = 'ELSE'
FUNCTION = 'FUNCTION'
TRUE = 'TRUE'
FALSE = 'FALSE'


KEYWORDS: Dict[str, str] = {
    'value': VALUE,
    'update': UPDATE,
    'return': RETURN,
    'if': IF,
    'else': ELSE,
    'fn': FUNCTION,
    'true': TRUE,
    'false': FALSE,
    'end': CLOSEBLOCK,
    'and': AND,
    'or': OR,
}


@dataclass(frozen=True)
class Token:
    type: str
    literal: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.type}({self.literal!r})"


def lookup_ident(ident: str) -> str:
    """Return the keyword kind for `ident`, or IDENT if it is not reserved."""
    return KEYWORDS.get(ident, IDENT)
