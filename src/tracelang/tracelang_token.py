# src/tracelang/tracelang_token.py

ILLEGAL = "ILLEGAL"
EOF = "EOF"
NEWLINE = "NEWLINE"

IDENT = "IDENT"
INT = "INT"
FLOAT = "FLOAT"
STRING = "STRING"

ASSIGN = "="
PLUS = "+"
MINUS = "-"
STAR = "*"
SLASH = "/"
MOD = "%"
EQ = "=="
NOT_EQ = "!="
LT = "<"
GT = ">"
LTE = "<="
GTE = ">="

COMMA = ","
SEMICOLON = ";"
LPAREN = "("
RPAREN = ")"
LBRACE = "{"
RBRACE = "}"
LBRACKET = "["
RBRACKET = "]"

# Keywords
DECLARE = "DECLARE"
OVERWRITE = "OVERWRITE"
SAFE = "SAFE"
IF = "IF"
ELSE = "ELSE"
WHILE = "WHILE"
FOR = "FOR"
FUNC = "FUNC"
RETURN = "RETURN"
BREAK = "BREAK"
CONTINUE = "CONTINUE"
TRACE = "TRACE"
TRUE = "TRUE"
FALSE = "FALSE"
NONE = "NONE"
AND = "AND"
OR = "OR"
NOT = "NOT"

KEYWORDS = {
    "declare": DECLARE,
    "overwrite": OVERWRITE,
    "safe": SAFE,
    "if": IF,
    "else": ELSE,
    "while": WHILE,
    "for": FOR,
    "func": FUNC,
    "return": RETURN,
    "break": BREAK,
    "continue": CONTINUE,
    "trace": TRACE,
    "true": TRUE,
    "false": FALSE,
    "none": NONE,
    "and": AND,
    "or": OR,
    "not": NOT,
}


class Token:
    def __init__(self, type, literal, line=1, column=1, pos=0, end=None):
        self.type = type
        self.literal = literal
        self.line = line
        self.column = column
        self.pos = pos
        self.end = end if end is not None else pos + len(literal)

    def __repr__(self):
        return f"Token({self.type}, {self.literal!r}, line={self.line})"
