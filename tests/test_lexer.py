from treelox.lexer import scan
from treelox.tokens import TokenType


def types_of(tokens):
    return [t.type for t in tokens]


def test_scan_arithmetic():
    tokens, diagnostics = scan('1 + 2.5 * (3)')
    assert not diagnostics.has_errors
    assert types_of(tokens) == [
        TokenType.NUMBER, TokenType.PLUS, TokenType.NUMBER, TokenType.STAR,
        TokenType.LEFT_PAREN, TokenType.NUMBER, TokenType.RIGHT_PAREN, TokenType.EOF,
    ]
    assert tokens[0].literal == 1.0
    assert tokens[2].literal == 2.5


def test_one_and_two_char_operators():
    tokens, _ = scan('!= == <= >= ! = < > /')
    assert types_of(tokens)[:-1] == [
        TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL, TokenType.LESS_EQUAL,
        TokenType.GREATER_EQUAL, TokenType.BANG, TokenType.EQUAL,
        TokenType.LESS, TokenType.GREATER, TokenType.SLASH,
    ]


def test_comments_and_line_numbers():
    tokens, diagnostics = scan('// a comment\nvar x;\n\nprint x;')
    assert not diagnostics.has_errors
    assert tokens[0].type == TokenType.VAR
    assert tokens[0].line == 2
    assert tokens[3].type == TokenType.PRINT
    assert tokens[3].line == 4
    assert tokens[-1].type == TokenType.EOF
    assert tokens[-1].line == 4


def test_multiline_string_tracks_lines():
    tokens, _ = scan('"one\ntwo" x')
    assert tokens[0].type == TokenType.STRING
    assert tokens[0].literal == 'one\ntwo'
    assert tokens[0].line == 2
    assert tokens[1].line == 2


def test_trailing_dot_is_not_part_of_number():
    tokens, _ = scan('123.')
    assert types_of(tokens) == [TokenType.NUMBER, TokenType.DOT, TokenType.EOF]
    assert tokens[0].literal == 123.0


def test_keywords_and_identifiers():
    tokens, _ = scan('and class orchid _under fun')
    assert types_of(tokens) == [
        TokenType.AND, TokenType.CLASS, TokenType.IDENTIFIER,
        TokenType.IDENTIFIER, TokenType.FUN, TokenType.EOF,
    ]
    assert tokens[2].literal == 'orchid'
    assert tokens[3].lexeme == '_under'


def test_identifiers_stop_at_digits():
    tokens, _ = scan('abc1')
    assert types_of(tokens) == [TokenType.IDENTIFIER, TokenType.NUMBER, TokenType.EOF]
    assert tokens[0].literal == 'abc'


def test_unexpected_characters_are_not_fatal():
    tokens, diagnostics = scan('@ 1 #\nprint')
    assert len(diagnostics) == 2
    assert not diagnostics.fatal
    assert [str(d) for d in diagnostics] == [
        '[line 1] Error: Unexpected character.',
        '[line 1] Error: Unexpected character.',
    ]
    assert types_of(tokens) == [TokenType.NUMBER, TokenType.PRINT, TokenType.EOF]


def test_unterminated_string_aborts_scan():
    tokens, diagnostics = scan('"unterminated')
    assert len(diagnostics) == 1
    assert diagnostics.fatal
    assert str(diagnostics.entries[0]) == '[line 1] Error: Unterminated string.'
    assert tokens == []


def test_unterminated_string_keeps_earlier_tokens():
    tokens, diagnostics = scan('print "ok"; "oops')
    assert diagnostics.fatal
    assert types_of(tokens) == [TokenType.PRINT, TokenType.STRING, TokenType.SEMICOLON]
    assert TokenType.EOF not in types_of(tokens)
