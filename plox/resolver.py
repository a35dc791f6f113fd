"""Static scope resolution.

The resolver walks the program once before it runs and tells the
interpreter, for every local variable reference, how many frames lie
between the use and the declaration. References it cannot find in any
enclosing local scope are left unresolved and looked up in the globals
at run time. Mistakes are reported and the walk carries on.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING, Dict, List

from .ast import (
    Expr, Stmt, Literal, Grouping, UnaryOp, BinaryOp, Logical, Variable,
    Assign, Call, Get, Set, This, ExprStmt, PrintStmt, VarDecl, Block,
    IfStmt, WhileStmt, FuncDecl, ReturnStmt, ClassDecl,
)
from .errors import ErrorReporter
from .tokens import Token

if TYPE_CHECKING:
    from .interpreter import Interpreter


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()


class Resolver:
    def __init__(self, interpreter: 'Interpreter', reporter: ErrorReporter):
        self.interpreter = interpreter
        self.reporter = reporter
        # innermost scope last; name -> fully initialized
        self.scopes: List[Dict[str, bool]] = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, statements: List[Stmt]):
        for stmt in statements:
            self.resolve_stmt(stmt)

    def resolve_stmt(self, stmt: Stmt):
        if isinstance(stmt, Block):
            self.begin_scope()
            self.resolve(stmt.statements)
            self.end_scope()
        elif isinstance(stmt, VarDecl):
            self.declare(stmt.name)
            if stmt.initializer is not None:
                self.resolve_expr(stmt.initializer)
            self.define(stmt.name)
        elif isinstance(stmt, FuncDecl):
            self.declare(stmt.name)
            self.define(stmt.name)
            self.resolve_function(stmt, FunctionType.FUNCTION)
        elif isinstance(stmt, ClassDecl):
            self.resolve_class(stmt)
        elif isinstance(stmt, (ExprStmt, PrintStmt)):
            self.resolve_expr(stmt.expression)
        elif isinstance(stmt, IfStmt):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_stmt(stmt.else_branch)
        elif isinstance(stmt, WhileStmt):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.body)
        elif isinstance(stmt, ReturnStmt):
            if self.current_function == FunctionType.NONE:
                self.reporter.token_error(stmt.keyword, 'Cannot return from top-level code.')
            if stmt.value is not None:
                self.resolve_expr(stmt.value)
        else:
            raise NotImplementedError(f"resolve: unexpected statement type {type(stmt)}")

    def resolve_expr(self, expr: Expr):
        if isinstance(expr, Variable):
            scope = self.scopes[-1] if self.scopes else None
            if scope is not None and scope.get(expr.name.lexeme) is False:
                self.reporter.token_error(expr.name, 'Cannot read local variable in its own initializer.')
            self.resolve_local(expr, expr.name)
        elif isinstance(expr, Assign):
            self.resolve_expr(expr.value)
            self.resolve_local(expr, expr.name)
        elif isinstance(expr, (BinaryOp, Logical)):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)
        elif isinstance(expr, UnaryOp):
            self.resolve_expr(expr.operand)
        elif isinstance(expr, Grouping):
            self.resolve_expr(expr.expression)
        elif isinstance(expr, Call):
            self.resolve_expr(expr.callee)
            for argument in expr.arguments:
                self.resolve_expr(argument)
        elif isinstance(expr, Get):
            self.resolve_expr(expr.object)
        elif isinstance(expr, Set):
            self.resolve_expr(expr.value)
            self.resolve_expr(expr.object)
        elif isinstance(expr, This):
            if self.current_class == ClassType.NONE:
                self.reporter.token_error(expr.keyword, "Cannot use 'this' outside of a class.")
                return
            self.resolve_local(expr, expr.keyword)
        elif isinstance(expr, Literal):
            pass
        else:
            raise NotImplementedError(f"resolve: unexpected expression type {type(expr)}")

    def resolve_class(self, stmt: ClassDecl):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS
        self.declare(stmt.name)
        self.define(stmt.name)

        self.begin_scope()
        self.scopes[-1]['this'] = True
        for method in stmt.methods:
            self.resolve_function(method, FunctionType.METHOD)
        self.end_scope()

        self.current_class = enclosing_class

    def resolve_function(self, function: FuncDecl, function_type: FunctionType):
        enclosing_function = self.current_function
        self.current_function = function_type

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    def resolve_local(self, expr: Expr, name: Token):
        for i in range(len(self.scopes) - 1, -1, -1):
            if name.lexeme in self.scopes[i]:
                self.interpreter.resolve(expr, len(self.scopes) - 1 - i)
                return
        # not found locally: global

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name: Token):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.reporter.token_error(name, 'Variable with this name already declared in this scope.')
        scope[name.lexeme] = False

    def define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

