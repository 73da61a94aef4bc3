# src/tracelang/parser/parser.py
from ..tracelang_token import *
from ..lexer import Lexer
from ..tracelang_ast import *
from ..environment import Environment
from ..errors import ScriptError, TraceLangSyntaxError
from ..evaluator.expressions import Expression
from ..evaluator.functions import UserFunction
from ..evaluator.statements import (
    Assignment, Break, Continue, Declaration, ForLoop, FunctionDef, IfCondition,
    OverwriteMode, Return, Tracing, VoidFunctionCall, WhileLoop
)

# Precedence constants
LOWEST, OR_PREC, AND_PREC, EQUALS, LESSGREATER, SUM, PRODUCT, PREFIX, CALL = range(1, 10)

precedences = {
    OR: OR_PREC,
    AND: AND_PREC,
    EQ: EQUALS, NOT_EQ: EQUALS,
    LT: LESSGREATER, GT: LESSGREATER, LTE: LESSGREATER, GTE: LESSGREATER,
    PLUS: SUM, MINUS: SUM,
    SLASH: PRODUCT, STAR: PRODUCT, MOD: PRODUCT,
    LPAREN: CALL,
    LBRACKET: CALL,
}

_STATEMENT_END = (NEWLINE, SEMICOLON, EOF)

_DECLARATION_MODES = {
    DECLARE: OverwriteMode.NEW,
    OVERWRITE: OverwriteMode.FORCE,
    SAFE: OverwriteMode.SAFE,
}


class Parser:
    def __init__(self, lexer):
        self.lexer = lexer
        self.source = lexer.input
        self.errors = []
        self.cur_token = None
        self.peek_token = None

        self.prefix_parse_fns = {
            IDENT: self.parse_identifier,
            INT: self.parse_integer_literal,
            FLOAT: self.parse_float_literal,
            STRING: self.parse_string_literal,
            TRUE: self.parse_boolean,
            FALSE: self.parse_boolean,
            NONE: self.parse_none,
            MINUS: self.parse_prefix_expression,
            NOT: self.parse_prefix_expression,
            LPAREN: self.parse_grouped_expression,
            LBRACKET: self.parse_list_literal,
        }
        self.infix_parse_fns = {
            PLUS: self.parse_infix_expression,
            MINUS: self.parse_infix_expression,
            SLASH: self.parse_infix_expression,
            STAR: self.parse_infix_expression,
            MOD: self.parse_infix_expression,
            EQ: self.parse_infix_expression,
            NOT_EQ: self.parse_infix_expression,
            LT: self.parse_infix_expression,
            GT: self.parse_infix_expression,
            LTE: self.parse_infix_expression,
            GTE: self.parse_infix_expression,
            AND: self.parse_infix_expression,
            OR: self.parse_infix_expression,
            LPAREN: self.parse_call_expression,
            LBRACKET: self.parse_index_expression,
        }
        self.statement_parse_fns = {
            DECLARE: self.parse_declaration,
            OVERWRITE: self.parse_declaration,
            SAFE: self.parse_declaration,
            IF: self.parse_if_statement,
            WHILE: self.parse_while_statement,
            FOR: self.parse_for_statement,
            FUNC: self.parse_function_definition,
            RETURN: self.parse_return_statement,
            BREAK: self.parse_break_statement,
            CONTINUE: self.parse_continue_statement,
            TRACE: self.parse_trace_statement,
        }
        self.next_token()
        self.next_token()

    # ---- Token helpers ------------------------------------------------------

    def next_token(self):
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def cur_token_is(self, t):
        return self.cur_token.type == t

    def peek_token_is(self, t):
        return self.peek_token.type == t

    def expect_peek(self, t):
        if self.peek_token_is(t):
            self.next_token()
            return True
        self.peek_error(t)
        return False

    def peek_error(self, t):
        self._error(f"Expected '{t}', got '{self._describe(self.peek_token)}'", self.peek_token)

    def peek_precedence(self):
        return precedences.get(self.peek_token.type, LOWEST)

    def cur_precedence(self):
        return precedences.get(self.cur_token.type, LOWEST)

    def _error(self, message, token=None):
        token = token or self.cur_token
        self.errors.append(f"Line {token.line}:{token.column} - {message}")

    @staticmethod
    def _describe(token):
        return token.literal.strip() or token.type

    def _build(self, cls, *args):
        """Construct an instruction, turning construction faults into parse errors."""
        try:
            return cls(*args)
        except ScriptError as exc:
            self._error(exc.message)
            return None

    # ---- Statements ---------------------------------------------------------

    def parse_program(self):
        program = Program()
        self.parse_statements(program.statements, EOF)
        return program

    def parse_statements(self, into, terminator):
        self.skip_separators()
        while not self.cur_token_is(terminator):
            if self.cur_token_is(EOF):
                self._error("Unterminated block: expected '}'")
                return False
            stmt = self.parse_statement()
            if stmt is None:
                self.synchronize()
                if self.cur_token_is(RBRACE) and terminator != RBRACE:
                    self.next_token()
            else:
                into.append(stmt)
                self.next_token()
                if self.cur_token.type not in _STATEMENT_END and not self.cur_token_is(terminator):
                    self._error(f"Unexpected '{self._describe(self.cur_token)}' after statement")
                    self.synchronize()
            self.skip_separators()
        return True

    def skip_separators(self):
        while self.cur_token.type in (NEWLINE, SEMICOLON):
            self.next_token()

    def synchronize(self):
        while self.cur_token.type not in (NEWLINE, SEMICOLON, EOF, RBRACE):
            self.next_token()

    def parse_statement(self):
        parse_fn = self.statement_parse_fns.get(self.cur_token.type)
        if parse_fn is not None:
            return parse_fn()
        return self.parse_expression_statement()

    def parse_block(self):
        """Parse ``{ ... }``; starts on the LBRACE and ends on the RBRACE."""
        instructions = []
        self.next_token()
        self.parse_statements(instructions, RBRACE)
        return instructions

    def parse_declaration(self):
        line = self.cur_token.line
        mode = _DECLARATION_MODES[self.cur_token.type]
        if not self.expect_peek(IDENT):
            return None

        var_type = "auto"
        if self.cur_token.literal in Environment.known_types() and self.peek_token_is(IDENT):
            var_type = self.cur_token.literal
            self.next_token()
        name = self.cur_token.literal

        if self.peek_token_is(ASSIGN):
            self.next_token()
            self.next_token()
            value = self.parse_wrapped_expression()
            if value is None:
                return None
            return self._build(Declaration, line, name, value, var_type, True, mode)

        if var_type == "auto":
            self._error(f"Declaration of '{name}' needs a type or an initial value")
            return None
        # typed declaration without a value: the type's default, not yet assigned
        default_value = Environment.default_value(var_type)
        value = Expression.literal(default_value.get_raw_value(), f"<default {var_type}>")
        return self._build(Declaration, line, name, value, var_type, False, mode)

    def parse_if_statement(self):
        line = self.cur_token.line
        self.next_token()
        condition = self.parse_wrapped_expression()
        if condition is None or not self.expect_peek(LBRACE):
            return None
        consequence = self.parse_block()

        alternative = []
        if self.peek_token_is(ELSE):
            self.next_token()
            if self.peek_token_is(IF):
                self.next_token()
                nested = self.parse_if_statement()
                if nested is None:
                    return None
                alternative = [nested]
            elif self.expect_peek(LBRACE):
                alternative = self.parse_block()
            else:
                return None
        return IfCondition(line, condition, consequence, alternative)

    def parse_while_statement(self):
        line = self.cur_token.line
        self.next_token()
        condition = self.parse_wrapped_expression()
        if condition is None or not self.expect_peek(LBRACE):
            return None
        return WhileLoop(line, condition, self.parse_block())

    def parse_for_statement(self):
        line = self.cur_token.line
        if not self.expect_peek(LPAREN):
            return None
        self.next_token()
        start = self.parse_statement()
        if start is None or not self.expect_peek(SEMICOLON):
            return None
        self.next_token()
        condition = self.parse_wrapped_expression()
        if condition is None or not self.expect_peek(SEMICOLON):
            return None
        self.next_token()
        step = self.parse_statement()
        if step is None or not self.expect_peek(RPAREN) or not self.expect_peek(LBRACE):
            return None
        return ForLoop(line, start, condition, step, self.parse_block())

    def parse_function_definition(self):
        line = self.cur_token.line
        if not self.expect_peek(IDENT):
            return None
        name = self.cur_token.literal
        if not self.expect_peek(LPAREN):
            return None

        params = []
        if self.peek_token_is(RPAREN):
            self.next_token()
        else:
            if not self.expect_peek(IDENT):
                return None
            params.append(self.cur_token.literal)
            while self.peek_token_is(COMMA):
                self.next_token()
                if not self.expect_peek(IDENT):
                    return None
                params.append(self.cur_token.literal)
            if not self.expect_peek(RPAREN):
                return None

        if not self.expect_peek(LBRACE):
            return None
        body = self.parse_block()
        func = self._build(UserFunction, name, params, body)
        if func is None:
            return None
        return FunctionDef(line, func)

    def parse_return_statement(self):
        line = self.cur_token.line
        if self.peek_token.type in _STATEMENT_END or self.peek_token_is(RBRACE):
            return Return(line)
        self.next_token()
        value = self.parse_wrapped_expression()
        if value is None:
            return None
        return Return(line, value)

    def parse_break_statement(self):
        return Break(self.cur_token.line)

    def parse_continue_statement(self):
        return Continue(self.cur_token.line)

    def parse_trace_statement(self):
        line = self.cur_token.line
        targets = []
        self.next_token()
        target = self.parse_wrapped_expression()
        if target is None:
            return None
        targets.append(target)
        while self.peek_token_is(COMMA):
            self.next_token()
            self.next_token()
            target = self.parse_wrapped_expression()
            if target is None:
                return None
            targets.append(target)
        return Tracing(line, targets)

    def parse_expression_statement(self):
        line = self.cur_token.line
        target = self.parse_wrapped_expression()
        if target is None:
            return None

        if self.peek_token_is(ASSIGN):
            if not isinstance(target.node, (Identifier, IndexExpression)):
                self._error(f"Cannot assign to '{target.expr}'")
                return None
            self.next_token()
            self.next_token()
            value = self.parse_wrapped_expression()
            if value is None:
                return None
            return self._build(Assignment, line, target, value)

        if isinstance(target.node, CallExpression):
            call = target.node
            args = [Expression(text, arg) for text, arg in zip(call.argument_texts, call.arguments)]
            return self._build(VoidFunctionCall, line, call.function, *args)

        self._error(f"Expression '{target.expr}' is not a statement")
        return None

    # ---- Expressions --------------------------------------------------------

    def parse_wrapped_expression(self):
        start = self.cur_token
        node = self.parse_expression(LOWEST)
        if node is None:
            return None
        return Expression(self.source[start.pos:self.cur_token.end], node)

    def parse_expression(self, precedence):
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self._error(f"Unexpected token '{self._describe(self.cur_token)}'")
            return None

        left_exp = prefix()
        if left_exp is None:
            return None

        while precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left_exp
            self.next_token()
            left_exp = infix(left_exp)
            if left_exp is None:
                return None

        return left_exp

    def parse_identifier(self):
        return Identifier(self.cur_token.literal)

    def parse_integer_literal(self):
        return Literal(int(self.cur_token.literal))

    def parse_float_literal(self):
        return Literal(float(self.cur_token.literal))

    def parse_string_literal(self):
        return Literal(self.cur_token.literal)

    def parse_boolean(self):
        return Literal(self.cur_token_is(TRUE))

    def parse_none(self):
        return Literal(None)

    def parse_prefix_expression(self):
        operator = self.cur_token.literal
        self.next_token()
        # 'not' binds looser than comparisons: not a == b is not (a == b)
        right = self.parse_expression(PREFIX if operator == "-" else AND_PREC)
        if right is None:
            return None
        return PrefixExpression(operator, right)

    def parse_infix_expression(self, left):
        operator = self.cur_token.literal
        precedence = self.cur_precedence()
        self.next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(left, operator, right)

    def parse_grouped_expression(self):
        self.next_token()
        exp = self.parse_expression(LOWEST)
        if exp is None or not self.expect_peek(RPAREN):
            return None
        return exp

    def parse_list_literal(self):
        elements, _ = self.parse_expression_list(RBRACKET)
        if elements is None:
            return None
        return ListLiteral(elements)

    def parse_call_expression(self, function):
        if not isinstance(function, Identifier):
            self._error("Only named functions can be called")
            return None
        arguments, texts = self.parse_expression_list(RPAREN)
        if arguments is None:
            return None
        return CallExpression(function.value, arguments, texts)

    def parse_index_expression(self, left):
        self.next_token()
        index = self.parse_expression(LOWEST)
        if index is None or not self.expect_peek(RBRACKET):
            return None
        return IndexExpression(left, index)

    def parse_expression_list(self, end):
        items, texts = [], []
        if self.peek_token_is(end):
            self.next_token()
            return items, texts

        self.next_token()
        while True:
            start = self.cur_token
            item = self.parse_expression(LOWEST)
            if item is None:
                return None, None
            items.append(item)
            texts.append(self.source[start.pos:self.cur_token.end])
            if not self.peek_token_is(COMMA):
                break
            self.next_token()
            self.next_token()

        if not self.expect_peek(end):
            return None, None
        return items, texts


def parse_program(source, filename="<string>"):
    """Parse a whole script, raising TraceLangSyntaxError on any error."""
    lexer = Lexer(source, filename)
    parser = Parser(lexer)
    program = parser.parse_program()
    errors = lexer.errors + parser.errors
    if errors:
        raise TraceLangSyntaxError(errors)
    return program


def parse_expression_node(text):
    lexer = Lexer(text)
    parser = Parser(lexer)
    node = parser.parse_expression(LOWEST)
    if node is not None and parser.peek_token.type not in (EOF, NEWLINE):
        parser._error(f"Unexpected '{parser._describe(parser.peek_token)}' in expression")
    errors = lexer.errors + parser.errors
    if errors or node is None:
        raise TraceLangSyntaxError(errors or [f"empty expression {text!r}"])
    return node
