"""Scanner for the Pop language.

The lexer walks the source text left to right with a live `Position`,
producing a list of `Token` objects that always ends in an `EOF` token.
On the first character it cannot classify it stops and returns the
diagnostic alone; callers never see a partial token list.

Only space and tab are skipped. A newline is not whitespace in Pop and is
reported as an illegal character like any other unknown input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .errors import Error, ExpectedCharError, IllegalCharError
from .position import Position

###############################################################################
# Tokens
###############################################################################

TT_INT = 'INT'
TT_FLOAT = 'FLOAT'
TT_IDENTIFIER = 'IDENTIFIER'
TT_KEYWORD = 'KEYWORD'
TT_PLUS = 'PLUS'
TT_MINUS = 'MINUS'
TT_MUL = 'MUL'
TT_DIV = 'DIV'
TT_POW = 'POW'
TT_EQ = 'EQ'
TT_EE = 'EE'
TT_NE = 'NE'
TT_LT = 'LT'
TT_GT = 'GT'
TT_LTE = 'LTE'
TT_GTE = 'GTE'
TT_LPAREN = 'LPAREN'
TT_RPAREN = 'RPAREN'
TT_EOF = 'EOF'

KEYWORDS = (
    'VAR',
    'AND',
    'NOT',
    'OR',
    'IF',
    'DO',
    'ELIF',
    'ELSE',
    'FOR',
    'UPTO',
    'STEP',
    'WHILE',
)

DIGITS = '0123456789'
LETTERS = 'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ'
LETTERS_DIGITS = LETTERS + DIGITS
WHITESPACE = ' \t'

SINGLE_CHAR_TOKENS = {
    '+': TT_PLUS,
    '-': TT_MINUS,
    '*': TT_MUL,
    '/': TT_DIV,
    '^': TT_POW,
    '(': TT_LPAREN,
    ')': TT_RPAREN,
}


@dataclass
class Token:
    type: str
    value: Any = None
    pos_start: Optional[Position] = None
    pos_end: Optional[Position] = None

    def __post_init__(self):
        if self.pos_start is not None:
            self.pos_start = self.pos_start.copy()
            if self.pos_end is None:
                self.pos_end = self.pos_start.copy().advance()
        if self.pos_end is not None:
            self.pos_end = self.pos_end.copy()

    def matches(self, type_: str, value: Any) -> bool:
        return self.type == type_ and self.value == value

    def __str__(self) -> str:
        if self.value is not None:
            return f'{self.type}:{self.value}'
        return self.type


###############################################################################
# Lexer
###############################################################################


class Lexer:
    def __init__(self, fn: str, text: str):
        self.fn = fn
        self.text = text
        self.pos = Position(-1, 0, -1, fn, text)
        self.current_char: Optional[str] = None
        self.advance()

    def advance(self):
        self.pos.advance(self.current_char)
        self.current_char = self.text[self.pos.idx] if self.pos.idx < len(self.text) else None

    def make_tokens(self) -> Tuple[List[Token], Optional[Error]]:
        tokens: List[Token] = []

        while self.current_char is not None:
            if self.current_char in WHITESPACE:
                self.advance()
            elif self.current_char in DIGITS:
                tokens.append(self.make_number())
            elif self.current_char in LETTERS:
                tokens.append(self.make_identifier())
            elif self.current_char in SINGLE_CHAR_TOKENS:
                tokens.append(Token(SINGLE_CHAR_TOKENS[self.current_char], pos_start=self.pos))
                self.advance()
            elif self.current_char == '=':
                tokens.append(self.make_equals())
            elif self.current_char == '!':
                token, error = self.make_not_equals()
                if error:
                    return [], error
                tokens.append(token)
            elif self.current_char == '<':
                tokens.append(self.make_comparison(TT_LT, TT_LTE))
            elif self.current_char == '>':
                tokens.append(self.make_comparison(TT_GT, TT_GTE))
            else:
                pos_start = self.pos.copy()
                char = self.current_char
                self.advance()
                return [], IllegalCharError(pos_start, self.pos, f"'{char}'")

        tokens.append(Token(TT_EOF, pos_start=self.pos))
        return tokens, None

    def make_number(self) -> Token:
        num_str = ''
        dot_count = 0
        pos_start = self.pos.copy()

        while self.current_char is not None and self.current_char in DIGITS + '.':
            if self.current_char == '.':
                # a second dot ends the literal and is left for the next scan step
                if dot_count == 1:
                    break
                dot_count += 1
            num_str += self.current_char
            self.advance()

        if dot_count == 0:
            return Token(TT_INT, int(num_str), pos_start, self.pos)
        return Token(TT_FLOAT, float(num_str), pos_start, self.pos)

    def make_identifier(self) -> Token:
        id_str = ''
        pos_start = self.pos.copy()

        while self.current_char is not None and self.current_char in LETTERS_DIGITS + '_':
            id_str += self.current_char
            self.advance()

        tok_type = TT_KEYWORD if id_str in KEYWORDS else TT_IDENTIFIER
        return Token(tok_type, id_str, pos_start, self.pos)

    def make_equals(self) -> Token:
        pos_start = self.pos.copy()
        self.advance()

        if self.current_char == '=':
            self.advance()
            return Token(TT_EE, pos_start=pos_start, pos_end=self.pos)
        return Token(TT_EQ, pos_start=pos_start, pos_end=self.pos)

    def make_not_equals(self) -> Tuple[Optional[Token], Optional[Error]]:
        pos_start = self.pos.copy()
        self.advance()

        if self.current_char == '=':
            self.advance()
            return Token(TT_NE, pos_start=pos_start, pos_end=self.pos), None

        return None, ExpectedCharError(pos_start, self.pos, "'=' (after '!')")

    def make_comparison(self, single_char_tok: str, equal_char_tok: str) -> Token:
        pos_start = self.pos.copy()
        self.advance()

        if self.current_char == '=':
            self.advance()
            return Token(equal_char_tok, pos_start=pos_start, pos_end=self.pos)
        return Token(single_char_tok, pos_start=pos_start, pos_end=self.pos)


def scan(fn: str, text: str) -> Tuple[List[Token], Optional[Error]]:
    """Tokenize `text`, returning the token list or the first lexical error."""
    return Lexer(fn, text).make_tokens()
