"""Lexer tests: keywords, operators, layout and literals."""

from tracelang.lexer import Lexer
from tracelang.tracelang_token import (
    ASSIGN, COMMA, DECLARE, EOF, FLOAT, IDENT, ILLEGAL, INT, LPAREN, LTE, NEWLINE,
    NOT_EQ, RPAREN, STRING
)


def _types(source):
    return [tok.type for tok in Lexer(source).tokens()]


def test_declaration_tokens():
    assert _types("declare int x = 5") == [DECLARE, IDENT, IDENT, ASSIGN, INT, EOF]


def test_two_char_operators():
    assert _types("a <= b != c") == [IDENT, LTE, IDENT, NOT_EQ, IDENT, EOF]


def test_newlines_inside_parentheses_are_ignored():
    assert _types("f(1,\n2)\n") == [IDENT, LPAREN, INT, COMMA, INT, RPAREN, NEWLINE, EOF]


def test_comments_keep_the_line_break():
    assert _types("x # note\n// whole line\ny") == [IDENT, NEWLINE, NEWLINE, IDENT, EOF]


def test_string_escapes_and_span():
    source = '"a\\nb"'
    token = Lexer(source).next_token()
    assert token.type == STRING
    assert token.literal == "a\nb"
    assert token.end == len(source)


def test_numbers():
    tokens = Lexer("3.25 7").tokens()
    assert (tokens[0].type, tokens[0].literal) == (FLOAT, "3.25")
    assert (tokens[1].type, tokens[1].literal) == (INT, "7")


def test_unterminated_string_is_reported():
    lexer = Lexer('"open')
    token = lexer.next_token()
    assert token.type == ILLEGAL
    assert lexer.errors and "Unterminated" in lexer.errors[0]


def test_unexpected_character_is_reported():
    lexer = Lexer("x @ y")
    assert ILLEGAL in [tok.type for tok in lexer.tokens()]
    assert "'@'" in lexer.errors[0]


def test_line_and_column_tracking():
    tokens = Lexer("x\n  y").tokens()
    y = tokens[2]
    assert y.literal == "y"
    assert (y.line, y.column) == (2, 3)
