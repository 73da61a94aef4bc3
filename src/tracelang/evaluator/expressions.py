# src/tracelang/evaluator/expressions.py
import logging

from ..tracelang_ast import (
    Literal, ListLiteral, Identifier, IndexExpression,
    PrefixExpression, InfixExpression, CallExpression
)
from ..object import (
    BooleanVar, FloatVar, IntegerVar, ListVar, NoneVar, StringVar, NUMERIC, from_raw_value
)
from ..errors import EvaluationError, TypeMismatchError

logger = logging.getLogger(__name__)


class Expression:
    """A parsed expression together with the source text it came from.

    Instructions hold Expressions and never look at expression syntax
    themselves: they only ``evaluate`` them or resolve them as assignment
    targets with ``parse_location``.
    """

    def __init__(self, expr, node=None):
        if node is None:
            from ..parser.parser import parse_expression_node
            node = parse_expression_node(expr)
        self.expr = expr
        self.node = node

    @classmethod
    def coerce(cls, value):
        return value if isinstance(value, Expression) else cls(value)

    @classmethod
    def literal(cls, raw, text=None):
        return cls(text if text is not None else repr(raw), Literal(raw))

    def evaluate(self, interp):
        return interp.evaluator.eval_node(self.node)

    def parse_location(self, interp):
        """Resolve this expression as an assignable variable."""
        return interp.evaluator.eval_location(self.node, self.expr)

    def __repr__(self):
        return f"Expression({self.expr!r})"


class ExpressionEvaluator:
    """Evaluates expression nodes against an interpreter's scopes and registry."""

    def __init__(self, interp):
        self.interp = interp

    def eval_node(self, node):
        node_type = type(node)

        if node_type == Literal:
            return from_raw_value(node.value)

        elif node_type == Identifier:
            return self.interp.scopes.variable_from_name(node.value)

        elif node_type == ListLiteral:
            return ListVar([self.eval_operand(el).copy() for el in node.elements])

        elif node_type == IndexExpression:
            return self.eval_index_expression(node)

        elif node_type == PrefixExpression:
            return self.eval_prefix_expression(node)

        elif node_type == InfixExpression:
            return self.eval_infix_expression(node)

        elif node_type == CallExpression:
            return self.eval_call_expression(node)

        raise EvaluationError(f"cannot evaluate node {node!r}")

    def eval_operand(self, node):
        """Evaluate a node whose value is going to be read."""
        value = self.eval_node(node)
        value.assert_assignment()
        return value

    def eval_location(self, node, text=None):
        if isinstance(node, Identifier):
            return self.interp.scopes.variable_from_name(node.value)
        if isinstance(node, IndexExpression):
            container = self.eval_operand(node.left)
            if not isinstance(container, ListVar):
                raise EvaluationError(f"cannot assign into {container.type()} element")
            return self._element(container, self.eval_operand(node.index))
        raise EvaluationError(f"'{text or node}' is not an assignable location")

    def eval_index_expression(self, node):
        container = self.eval_operand(node.left)
        index = self.eval_operand(node.index)
        if isinstance(container, ListVar):
            return self._element(container, index)
        if isinstance(container, StringVar):
            position = self._position(index, len(container.value))
            return StringVar(container.value[position])
        raise TypeMismatchError(f"{container.type()} value is not indexable")

    def _element(self, container, index):
        return container.elements[self._position(index, len(container.elements))]

    @staticmethod
    def _position(index, length):
        if not isinstance(index, IntegerVar):
            raise TypeMismatchError(f"index must be int, got {index.type()}")
        if not 0 <= index.value < length:
            raise EvaluationError(f"index {index.value} out of range for length {length}")
        return index.value

    def eval_call_expression(self, node):
        args = [self.eval_operand(arg) for arg in node.arguments]
        logger.debug("call %s(%s)", node.function, ", ".join(a.inspect() for a in args))
        result = self.interp.functions.call_function_by_name(self.interp, node.function, args)
        return result if result is not None else NoneVar()

    def eval_prefix_expression(self, node):
        right = self.eval_operand(node.right)
        if node.operator == "-":
            if right.family != NUMERIC:
                raise TypeMismatchError(f"unary '-' not supported for {right.type()}")
            return from_raw_value(-right.value)
        if node.operator == "not":
            return BooleanVar(not self._boolean(right, "not"))
        raise EvaluationError(f"unknown prefix operator '{node.operator}'")

    @staticmethod
    def _boolean(value, operator):
        if not isinstance(value, BooleanVar):
            raise TypeMismatchError(f"'{operator}' expects bool, got {value.type()}")
        return value.value

    def eval_infix_expression(self, node):
        operator = node.operator

        # short-circuit: the right side is only evaluated when needed
        if operator in ("and", "or"):
            left = self._boolean(self.eval_operand(node.left), operator)
            if operator == "and" and not left:
                return BooleanVar(False)
            if operator == "or" and left:
                return BooleanVar(True)
            return BooleanVar(self._boolean(self.eval_operand(node.right), operator))

        left = self.eval_operand(node.left)
        right = self.eval_operand(node.right)

        if operator == "==":
            return BooleanVar(left.family == right.family and left.get_raw_value() == right.get_raw_value())
        if operator == "!=":
            return BooleanVar(not (left.family == right.family and left.get_raw_value() == right.get_raw_value()))

        if left.family == NUMERIC and right.family == NUMERIC:
            if isinstance(left, IntegerVar) and isinstance(right, IntegerVar):
                return self.eval_integer_infix(operator, left.value, right.value)
            return self.eval_float_infix(operator, float(left.value), float(right.value))

        if isinstance(left, StringVar) and isinstance(right, StringVar):
            return self.eval_string_infix(operator, left.value, right.value)

        if isinstance(left, ListVar) and isinstance(right, ListVar) and operator == "+":
            return ListVar([el.copy() for el in left.elements + right.elements])

        raise TypeMismatchError(
            f"operator '{operator}' not supported between {left.type()} and {right.type()}"
        )

    def eval_integer_infix(self, operator, left_val, right_val):
        if operator == "+":
            return IntegerVar(left_val + right_val)
        elif operator == "-":
            return IntegerVar(left_val - right_val)
        elif operator == "*":
            return IntegerVar(left_val * right_val)
        elif operator == "/":
            if right_val == 0:
                raise EvaluationError("Division by zero")
            return IntegerVar(left_val // right_val)
        elif operator == "%":
            if right_val == 0:
                raise EvaluationError("Modulo by zero")
            return IntegerVar(left_val % right_val)
        return self._compare(operator, left_val, right_val)

    def eval_float_infix(self, operator, left_val, right_val):
        if operator == "+":
            return FloatVar(left_val + right_val)
        elif operator == "-":
            return FloatVar(left_val - right_val)
        elif operator == "*":
            return FloatVar(left_val * right_val)
        elif operator == "/":
            if right_val == 0:
                raise EvaluationError("Division by zero")
            return FloatVar(left_val / right_val)
        elif operator == "%":
            if right_val == 0:
                raise EvaluationError("Modulo by zero")
            return FloatVar(left_val % right_val)
        return self._compare(operator, left_val, right_val)

    def eval_string_infix(self, operator, left_val, right_val):
        if operator == "+":
            return StringVar(left_val + right_val)
        return self._compare(operator, left_val, right_val)

    @staticmethod
    def _compare(operator, left_val, right_val):
        if operator == "<":
            return BooleanVar(left_val < right_val)
        elif operator == ">":
            return BooleanVar(left_val > right_val)
        elif operator == "<=":
            return BooleanVar(left_val <= right_val)
        elif operator == ">=":
            return BooleanVar(left_val >= right_val)
        raise TypeMismatchError(f"unsupported operator '{operator}'")
