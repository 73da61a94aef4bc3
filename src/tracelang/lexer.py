# src/tracelang/lexer.py
from .tracelang_token import *

_TWO_CHAR_OPERATORS = {
    "==": EQ,
    "!=": NOT_EQ,
    "<=": LTE,
    ">=": GTE,
}

_ONE_CHAR_OPERATORS = {
    "=": ASSIGN,
    "+": PLUS,
    "-": MINUS,
    "*": STAR,
    "/": SLASH,
    "%": MOD,
    "<": LT,
    ">": GT,
    ",": COMMA,
    ";": SEMICOLON,
    "(": LPAREN,
    ")": RPAREN,
    "{": LBRACE,
    "}": RBRACE,
    "[": LBRACKET,
    "]": RBRACKET,
}

_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


class Lexer:
    def __init__(self, source_code, filename="<stdin>"):
        self.input = source_code
        self.filename = filename
        self.position = 0
        self.read_position = 0
        self.ch = ""
        self.line = 1
        self.column = 0
        self.errors = []
        # newlines inside () and [] are plain whitespace
        self.nesting = 0
        self.read_char()

    def read_char(self):
        if self.ch == "\n":
            self.line += 1
            self.column = 0
        if self.read_position >= len(self.input):
            self.ch = ""
        else:
            self.ch = self.input[self.read_position]
        self.column += 1
        self.position = self.read_position
        self.read_position += 1

    def peek_char(self):
        if self.read_position >= len(self.input):
            return ""
        return self.input[self.read_position]

    def tokens(self):
        """All tokens up to and including EOF."""
        result = []
        while True:
            tok = self.next_token()
            result.append(tok)
            if tok.type == EOF:
                return result

    def next_token(self):
        self.skip_whitespace()

        # comments run to end of line; the newline itself is still a token
        if self.ch == "#" or (self.ch == "/" and self.peek_char() == "/"):
            while self.ch not in ("\n", ""):
                self.read_char()

        line, column, pos = self.line, self.column, self.position

        if self.ch == "":
            return Token(EOF, "", line, column, pos)

        if self.ch == "\n" and self.nesting > 0:
            self.read_char()
            return self.next_token()

        if self.ch == "\n":
            self.read_char()
            return Token(NEWLINE, "\n", line, column, pos)

        pair = self.ch + self.peek_char()
        if pair in _TWO_CHAR_OPERATORS:
            self.read_char()
            self.read_char()
            return Token(_TWO_CHAR_OPERATORS[pair], pair, line, column, pos)

        if self.ch in _ONE_CHAR_OPERATORS:
            ch = self.ch
            self.read_char()
            if ch in "([":
                self.nesting += 1
            elif ch in ")]" and self.nesting > 0:
                self.nesting -= 1
            return Token(_ONE_CHAR_OPERATORS[ch], ch, line, column, pos)

        if self.ch == '"':
            return self.read_string(line, column, pos)

        if self.ch.isdigit():
            literal, is_float = self.read_number()
            return Token(FLOAT if is_float else INT, literal, line, column, pos)

        if self.ch.isalpha() or self.ch == "_":
            literal = self.read_identifier()
            return Token(KEYWORDS.get(literal, IDENT), literal, line, column, pos)

        ch = self.ch
        self.read_char()
        self.errors.append(f"Line {line}:{column} - Unexpected character '{ch}'")
        return Token(ILLEGAL, ch, line, column, pos)

    def skip_whitespace(self):
        while self.ch in (" ", "\t", "\r"):
            self.read_char()

    def read_identifier(self):
        start = self.position
        while self.ch.isalnum() or self.ch == "_":
            self.read_char()
        return self.input[start:self.position]

    def read_number(self):
        start = self.position
        is_float = False
        while self.ch.isdigit():
            self.read_char()
        if self.ch == "." and self.peek_char().isdigit():
            is_float = True
            self.read_char()
            while self.ch.isdigit():
                self.read_char()
        return self.input[start:self.position], is_float

    def read_string(self, line, column, pos):
        self.read_char()  # opening quote
        chars = []
        while self.ch not in ('"', ""):
            if self.ch == "\\":
                self.read_char()
                chars.append(_ESCAPES.get(self.ch, self.ch))
            elif self.ch == "\n":
                break
            else:
                chars.append(self.ch)
            self.read_char()
        if self.ch != '"':
            self.errors.append(f"Line {line}:{column} - Unterminated string literal")
            return Token(ILLEGAL, "".join(chars), line, column, pos)
        self.read_char()  # closing quote
        return Token(STRING, "".join(chars), line, column, pos, end=self.position)
