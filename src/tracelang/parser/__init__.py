# src/tracelang/parser/__init__.py
from .parser import Parser, parse_expression_node, parse_program

__all__ = ['Parser', 'parse_program', 'parse_expression_node']
