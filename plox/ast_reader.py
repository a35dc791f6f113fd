"""Read `AstPrinter` dumps back into AST nodes.

A dump is a sequence of s-expressions, one per top-level statement, as
written by ``plox --emit-ast``. Reading happens in two stages:

1. **Parsing**: a Lark grammar for generic s-expressions turns the text
   into nested lists of atoms. Symbols stay Lark tokens (which remember
   their line), numbers become floats and quoted strings are unescaped.

2. **Building**: `AstBuilder` walks the nested lists and rebuilds the
   statement and expression dataclasses, synthesizing the tokens the
   interpreter needs for error locations.

The `read_program` function is the public entry point.
"""

from __future__ import annotations

import json
from typing import Any, List

from lark import Lark, Token as LarkToken, Transformer, v_args
from lark.exceptions import UnexpectedInput

from .ast import (
    Expr, Stmt, Literal, Grouping, UnaryOp, BinaryOp, Logical, Variable,
    Assign, Call, Get, Set, This, ExprStmt, PrintStmt, VarDecl, Block,
    IfStmt, WhileStmt, FuncDecl, ReturnStmt, ClassDecl,
)
from .tokens import Token, TokenType


SEXPR_GRAMMAR = r"""
    ?start: program
    program: sexpr*

    ?sexpr: sexpr_list
          | NUMBER
          | STRING
          | SYMBOL

    sexpr_list: "(" sexpr* ")"

    NUMBER: /\d+(\.\d+)?([eE][-+]?\d+)?/
    STRING: /"(\\.|[^"\\])*"/
    SYMBOL: /[^\s()"\d][^\s()"]*/

    %import common.WS
    %ignore WS
"""


SEXPR_PARSER = Lark(
    SEXPR_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
)


UNARY_OPERATORS = {
    '-': TokenType.MINUS,
    '!': TokenType.BANG,
}

BINARY_OPERATORS = {
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '/': TokenType.SLASH,
    '==': TokenType.EQUAL_EQUAL,
    '!=': TokenType.BANG_EQUAL,
    '<': TokenType.LESS,
    '<=': TokenType.LESS_EQUAL,
    '>': TokenType.GREATER,
    '>=': TokenType.GREATER_EQUAL,
}

LOGICAL_OPERATORS = {
    'and': TokenType.AND,
    'or': TokenType.OR,
}


class AstReadError(Exception):
    def __init__(self, line: int, message: str):
        super().__init__(message)
        self.line = line
        self.message = message


class SList(list):
    """A parenthesized list, remembering the line it started on."""
    def __init__(self, items: List[Any], line: int):
        super().__init__(items)
        self.line = line


class SexprTransformer(Transformer):
    """Turns the raw parse tree into nested `SList`s of atoms."""

    def program(self, items):
        return list(items)

    @v_args(meta=True)
    def sexpr_list(self, meta, items):
        return SList(items, getattr(meta, 'line', 1))

    def NUMBER(self, token):
        return float(token)

    def STRING(self, token):
        return json.loads(token)


def is_symbol(item: Any) -> bool:
    return isinstance(item, LarkToken)


class AstBuilder:
    def build_program(self, items: List[Any]) -> List[Stmt]:
        return [self.build_stmt(item) for item in items]

    def build_stmt(self, item: Any) -> Stmt:
        if not isinstance(item, SList) or not item or not is_symbol(item[0]):
            raise AstReadError(self.line_of(item), f"expected a statement form, got {item!r}")
        head, args, line = str(item[0]), item[1:], item.line
        if head == 'expr':
            self.expect_args(item, 1)
            return ExprStmt(self.build_expr(args[0]))
        if head == 'print':
            self.expect_args(item, 1)
            return PrintStmt(self.build_expr(args[0]))
        if head == 'var':
            self.expect_args(item, 1, 2)
            initializer = self.build_expr(args[1]) if len(args) == 2 else None
            return VarDecl(self.identifier(args[0], line), initializer)
        if head == 'block':
            return Block([self.build_stmt(arg) for arg in args])
        if head == 'if':
            self.expect_args(item, 2, 3)
            else_branch = self.build_stmt(args[2]) if len(args) == 3 else None
            return IfStmt(self.build_expr(args[0]), self.build_stmt(args[1]), else_branch)
        if head == 'while':
            self.expect_args(item, 2)
            return WhileStmt(self.build_expr(args[0]), self.build_stmt(args[1]))
        if head == 'fun':
            return self.build_function(item)
        if head == 'return':
            self.expect_args(item, 0, 1)
            value = self.build_expr(args[0]) if args else None
            return ReturnStmt(Token(TokenType.RETURN, 'return', None, line), value)
        if head == 'class':
            self.expect_args(item, 1, None)
            methods = [self.build_function(arg) for arg in args[1:]]
            return ClassDecl(self.identifier(args[0], line), methods)
        raise AstReadError(line, f"unknown statement form '{head}'")

    def build_function(self, item: Any) -> FuncDecl:
        if not isinstance(item, SList) or not item or str(item[0]) != 'fun':
            raise AstReadError(self.line_of(item), f"expected a function form, got {item!r}")
        self.expect_args(item, 2, None)
        line = item.line
        name, params = item[1], item[2]
        if not isinstance(params, SList):
            raise AstReadError(line, 'expected a parameter list')
        return FuncDecl(
            self.identifier(name, line),
            [self.identifier(param, line) for param in params],
            [self.build_stmt(stmt) for stmt in item[3:]],
        )

    def build_expr(self, item: Any) -> Expr:
        if isinstance(item, float):
            return Literal(item)
        if is_symbol(item):
            return self.build_symbol(item)
        if isinstance(item, str):
            return Literal(item)
        if not isinstance(item, SList) or not item or not is_symbol(item[0]):
            raise AstReadError(self.line_of(item), f"expected an expression, got {item!r}")
        head, args, line = str(item[0]), item[1:], item.line
        if head == 'group':
            self.expect_args(item, 1)
            return Grouping(self.build_expr(args[0]))
        if head in UNARY_OPERATORS and len(args) == 1:
            operator = Token(UNARY_OPERATORS[head], head, None, line)
            return UnaryOp(operator, self.build_expr(args[0]))
        if head in BINARY_OPERATORS:
            self.expect_args(item, 2)
            operator = Token(BINARY_OPERATORS[head], head, None, line)
            return BinaryOp(self.build_expr(args[0]), operator, self.build_expr(args[1]))
        if head in LOGICAL_OPERATORS:
            self.expect_args(item, 2)
            operator = Token(LOGICAL_OPERATORS[head], head, None, line)
            return Logical(self.build_expr(args[0]), operator, self.build_expr(args[1]))
        if head == '=':
            self.expect_args(item, 2)
            return Assign(self.identifier(args[0], line), self.build_expr(args[1]))
        if head == 'call':
            self.expect_args(item, 1, None)
            paren = Token(TokenType.RIGHT_PAREN, ')', None, line)
            return Call(self.build_expr(args[0]), paren, [self.build_expr(arg) for arg in args[1:]])
        if head == 'get':
            self.expect_args(item, 2)
            return Get(self.build_expr(args[0]), self.identifier(args[1], line))
        if head == 'set':
            self.expect_args(item, 3)
            return Set(self.build_expr(args[0]), self.identifier(args[1], line), self.build_expr(args[2]))
        raise AstReadError(line, f"unknown expression form '{head}'")

    def build_symbol(self, symbol: LarkToken) -> Expr:
        name = str(symbol)
        if name == 'nil':
            return Literal(None)
        if name == 'true':
            return Literal(True)
        if name == 'false':
            return Literal(False)
        if name == 'this':
            return This(Token(TokenType.THIS, 'this', None, symbol.line))
        return Variable(self.identifier(symbol, symbol.line))

    def identifier(self, item: Any, line: int) -> Token:
        if not is_symbol(item):
            raise AstReadError(line, f"expected a name, got {item!r}")
        return Token(TokenType.IDENTIFIER, str(item), None, item.line or line)

    def expect_args(self, item: SList, low: int, high: Any = -1):
        # high=-1 means exactly `low`, None means no upper bound
        count = len(item) - 1
        if high == -1:
            high = low
        if count < low or (high is not None and count > high):
            raise AstReadError(item.line, f"wrong number of operands for '{item[0]}'")

    def line_of(self, item: Any) -> int:
        return getattr(item, 'line', None) or 1


def read_sexprs(text: str) -> List[Any]:
    try:
        tree = SEXPR_PARSER.parse(text)
    except UnexpectedInput as e:
        line = getattr(e, 'line', None)
        if not isinstance(line, int) or line < 1:
            # unexpected end of input carries no position
            line = text.count('\n') + 1
            raise AstReadError(line, 'unexpected end of AST dump')
        raise AstReadError(line, f"malformed AST dump near column {e.column}")
    return SexprTransformer().transform(tree)


def read_program(text: str) -> List[Stmt]:
    """Parse an AST dump into top-level statements."""
    return AstBuilder().build_program(read_sexprs(text))


def read_expr(text: str) -> Expr:
    """Parse a single printed expression."""
    items = read_sexprs(text)
    if len(items) != 1:
        raise AstReadError(1, f"expected one expression, got {len(items)}")
    return AstBuilder().build_expr(items[0])
