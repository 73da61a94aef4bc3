# src/tracelang/tracelang_ast.py
# Expression nodes. Statements are the executable instruction classes in
# evaluator/statements.py.

class Node:
    def __repr__(self):
        return f"{self.__class__.__name__}()"

    def __str__(self):
        return self.__repr__()


class Literal(Node):
    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"Literal({self.value!r})"


class ListLiteral(Node):
    def __init__(self, elements):
        self.elements = elements

    def __repr__(self):
        return f"ListLiteral(elements={self.elements})"


class Identifier(Node):
    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"Identifier({self.value})"


class IndexExpression(Node):
    def __init__(self, left, index):
        self.left = left
        self.index = index

    def __repr__(self):
        return f"IndexExpression(left={self.left}, index={self.index})"


class PrefixExpression(Node):
    def __init__(self, operator, right):
        self.operator = operator
        self.right = right

    def __repr__(self):
        return f"PrefixExpression({self.operator}, {self.right})"


class InfixExpression(Node):
    def __init__(self, left, operator, right):
        self.left = left
        self.operator = operator
        self.right = right

    def __repr__(self):
        return f"InfixExpression({self.left} {self.operator} {self.right})"


class CallExpression(Node):
    def __init__(self, function, arguments, argument_texts=None):
        self.function = function  # name string
        self.arguments = arguments
        self.argument_texts = argument_texts or [str(arg) for arg in arguments]

    def __repr__(self):
        return f"CallExpression({self.function}, arguments={len(self.arguments)})"


class Program(Node):
    def __init__(self):
        self.statements = []

    def __repr__(self):
        return f"Program(statements={len(self.statements)})"
