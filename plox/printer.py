"""Display forms for parsed programs.

`AstPrinter` renders any expression or statement as a fully
parenthesized prefix form, e.g. ``(* (- 123) (group 45.67))``. Strings
are quoted with JSON escaping so the output can be read back by
`plox.ast_reader`. `RpnPrinter` renders expressions in reverse Polish
notation and is only meant for eyeballing arithmetic.
"""

from __future__ import annotations

import json
from typing import Any, List, Union

from .ast import (
    Expr, Stmt, Literal, Grouping, UnaryOp, BinaryOp, Logical, Variable,
    Assign, Call, Get, Set, This, ExprStmt, PrintStmt, VarDecl, Block,
    IfStmt, WhileStmt, FuncDecl, ReturnStmt, ClassDecl,
)
from .types import format_number


def literal_to_str(value: Any) -> str:
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return format_number(value)
    return json.dumps(value, ensure_ascii=False)


class AstPrinter:
    def print(self, node: Union[Expr, Stmt]) -> str:
        if isinstance(node, Stmt):
            return self.print_stmt(node)
        return self.print_expr(node)

    def print_program(self, statements: List[Stmt]) -> str:
        return '\n'.join(self.print_stmt(stmt) for stmt in statements)

    def print_expr(self, expr: Expr) -> str:
        if isinstance(expr, Literal):
            return literal_to_str(expr.value)
        if isinstance(expr, Grouping):
            return self.parenthesize('group', expr.expression)
        if isinstance(expr, UnaryOp):
            return self.parenthesize(expr.operator.lexeme, expr.operand)
        if isinstance(expr, (BinaryOp, Logical)):
            return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)
        if isinstance(expr, Variable):
            return expr.name.lexeme
        if isinstance(expr, Assign):
            return self.parenthesize('=', expr.name.lexeme, expr.value)
        if isinstance(expr, Call):
            return self.parenthesize('call', expr.callee, *expr.arguments)
        if isinstance(expr, Get):
            return self.parenthesize('get', expr.object, expr.name.lexeme)
        if isinstance(expr, Set):
            return self.parenthesize('set', expr.object, expr.name.lexeme, expr.value)
        if isinstance(expr, This):
            return 'this'
        raise NotImplementedError(f"print: unexpected node type {type(expr)}")

    def print_stmt(self, stmt: Stmt) -> str:
        if isinstance(stmt, ExprStmt):
            return self.parenthesize('expr', stmt.expression)
        if isinstance(stmt, PrintStmt):
            return self.parenthesize('print', stmt.expression)
        if isinstance(stmt, VarDecl):
            if stmt.initializer is None:
                return self.parenthesize('var', stmt.name.lexeme)
            return self.parenthesize('var', stmt.name.lexeme, stmt.initializer)
        if isinstance(stmt, Block):
            return self.parenthesize('block', *stmt.statements)
        if isinstance(stmt, IfStmt):
            if stmt.else_branch is None:
                return self.parenthesize('if', stmt.condition, stmt.then_branch)
            return self.parenthesize('if', stmt.condition, stmt.then_branch, stmt.else_branch)
        if isinstance(stmt, WhileStmt):
            return self.parenthesize('while', stmt.condition, stmt.body)
        if isinstance(stmt, FuncDecl):
            return self.print_function(stmt)
        if isinstance(stmt, ReturnStmt):
            if stmt.value is None:
                return '(return)'
            return self.parenthesize('return', stmt.value)
        if isinstance(stmt, ClassDecl):
            methods = ' '.join(self.print_function(method) for method in stmt.methods)
            return f"(class {stmt.name.lexeme}{' ' + methods if methods else ''})"
        raise NotImplementedError(f"print: unexpected node type {type(stmt)}")

    def print_function(self, stmt: FuncDecl) -> str:
        params = ' '.join(param.lexeme for param in stmt.params)
        return self.parenthesize('fun', stmt.name.lexeme, f"({params})", *stmt.body)

    def parenthesize(self, name: str, *parts: Union[Expr, Stmt, str]) -> str:
        pieces = [name]
        for part in parts:
            # str parts are names and already-rendered fragments
            pieces.append(part if isinstance(part, str) else self.print(part))
        return '(' + ' '.join(pieces) + ')'


class RpnPrinter:
    """Reverse Polish rendering: ``(1 + 2) * 3`` becomes ``1 2 + 3 *``."""

    def print(self, expr: Expr) -> str:
        if isinstance(expr, Literal):
            return literal_to_str(expr.value)
        if isinstance(expr, Grouping):
            return self.print(expr.expression)
        if isinstance(expr, UnaryOp):
            # '-' alone would be ambiguous with subtraction
            op = '~' if expr.operator.lexeme == '-' else expr.operator.lexeme
            return f"{self.print(expr.operand)} {op}"
        if isinstance(expr, (BinaryOp, Logical)):
            return f"{self.print(expr.left)} {self.print(expr.right)} {expr.operator.lexeme}"
        if isinstance(expr, Variable):
            return expr.name.lexeme
        if isinstance(expr, Assign):
            return f"{expr.name.lexeme} {self.print(expr.value)} ="
        if isinstance(expr, Call):
            args = ''.join(f"{self.print(arg)} " for arg in expr.arguments)
            return f"{self.print(expr.callee)} {args}call/{len(expr.arguments)}"
        if isinstance(expr, Get):
            return f"{self.print(expr.object)} .{expr.name.lexeme}"
        if isinstance(expr, Set):
            return f"{self.print(expr.object)} {self.print(expr.value)} .{expr.name.lexeme}="
        if isinstance(expr, This):
            return 'this'
        raise NotImplementedError(f"print: unexpected node type {type(expr)}")
