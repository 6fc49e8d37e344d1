"""Scanner for Lox source text.

`scan` walks the source once, character by character, and produces a list
of tokens terminated by a single EOF token. Unknown characters are reported
and skipped so that one pass can surface several of them; an unterminated
string stops the scan immediately.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .errors import Diagnostics
from .tokens import EQUAL_SUFFIXED, KEYWORDS, SINGLE_CHAR_TOKENS, Token, TokenType


def is_alpha(c: str) -> bool:
    return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def scan(source: str, diagnostics: Optional[Diagnostics] = None) -> Tuple[List[Token], Diagnostics]:
    """Convert source text into tokens.

    Returns the token list together with the diagnostics collected along the
    way. When `diagnostics.fatal` is set the list is incomplete and carries
    no EOF token.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()
    tokens: List[Token] = []
    i = 0
    line = 1
    length = len(source)

    def peek(offset: int = 0) -> str:
        j = i + offset
        return source[j] if j < length else ''

    def add(token_type: TokenType, start: int, literal=None):
        tokens.append(Token(token_type, source[start:i], literal, line))

    while i < length:
        start = i
        c = source[i]
        i += 1
        if c in (' ', '\r', '\t'):
            continue
        if c == '\n':
            line += 1
            continue
        if c in SINGLE_CHAR_TOKENS:
            add(SINGLE_CHAR_TOKENS[c], start)
            continue
        if c in EQUAL_SUFFIXED:
            single, double = EQUAL_SUFFIXED[c]
            if peek() == '=':
                i += 1
                add(double, start)
            else:
                add(single, start)
            continue
        if c == '/':
            if peek() == '/':
                # comment runs to the end of the line
                while i < length and source[i] != '\n':
                    i += 1
            else:
                add(TokenType.SLASH, start)
            continue
        if c == '"':
            while i < length and source[i] != '"':
                if source[i] == '\n':
                    line += 1
                i += 1
            if i >= length:
                diagnostics.error(line, 'Unterminated string.')
                diagnostics.fatal = True
                return tokens, diagnostics
            i += 1  # closing quote
            add(TokenType.STRING, start, source[start + 1:i - 1])
            continue
        if is_digit(c):
            while is_digit(peek()):
                i += 1
            # a '.' only belongs to the number when a digit follows it
            if peek() == '.' and is_digit(peek(1)):
                i += 1
                while is_digit(peek()):
                    i += 1
            add(TokenType.NUMBER, start, float(source[start:i]))
            continue
        if is_alpha(c):
            while is_alpha(peek()):
                i += 1
            text = source[start:i]
            token_type = KEYWORDS.get(text, TokenType.IDENTIFIER)
            add(token_type, start, text if token_type == TokenType.IDENTIFIER else None)
            continue
        diagnostics.error(line, 'Unexpected character.')

    tokens.append(Token(TokenType.EOF, '', None, line))
    return tokens, diagnostics
