"""Tree-walking evaluator for the Lox language.

The interpreter executes resolved statement lists against a chain of
`Environment` frames. Local variable accesses use the distances recorded
by the resolver; anything the resolver left alone is looked up in the
globals. `execute` returns None for normal completion or a
`ReturnSignal` carrying a function's return value, and every statement
that contains other statements passes that signal upward untouched.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, TextIO

from .ast import (
    Expr, Stmt, Literal, Grouping, UnaryOp, BinaryOp, Logical, Variable,
    Assign, Call, Get, Set, This, ExprStmt, PrintStmt, VarDecl, Block,
    IfStmt, WhileStmt, FuncDecl, ReturnStmt, ClassDecl,
)
from .builtin_function import populate_globals
from .environment import Environment
from .errors import ErrorReporter, LoxRuntimeError, ReturnSignal
from .tokens import Token, TokenType
from .types import (
    LoxCallable, LoxClass, LoxFunction, LoxInstance,
    is_equal, is_truthy, stringify, type_name,
)


ARITHMETIC_OPS = {
    TokenType.MINUS: lambda a, b: a - b,
    TokenType.STAR: lambda a, b: a * b,
    TokenType.GREATER: lambda a, b: a > b,
    TokenType.GREATER_EQUAL: lambda a, b: a >= b,
    TokenType.LESS: lambda a, b: a < b,
    TokenType.LESS_EQUAL: lambda a, b: a <= b,
}


def divide(a: float, b: float) -> float:
    # IEEE-754 semantics instead of ZeroDivisionError
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


class Interpreter:
    """Core interpreter that executes Lox statements."""
    def __init__(self, reporter: Optional[ErrorReporter] = None, debug_level: int = 0,
                 debug_file: str = 'debug.txt', output: Optional[TextIO] = None):
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.globals = populate_globals(Environment())
        self.environment = self.globals
        # expression node_id -> scope distance
        self.locals: Dict[int, int] = {}
        self.output = output
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def interpret(self, statements: List[Stmt], repl: bool = False):
        """Run a resolved program, reporting the first runtime error.

        With `repl` set, bare expression statements echo their value.
        """
        try:
            for stmt in statements:
                if self.debug_level >= 1:
                    self.debug(f"execute {type(stmt).__name__}")
                if repl and isinstance(stmt, ExprStmt):
                    self.write(stringify(self.evaluate(stmt.expression)))
                    continue
                self.execute(stmt)
        except LoxRuntimeError as e:
            if self.debug_level >= 1:
                self.debug(f"runtime error: {e.message}")
            self.reporter.runtime_error(e)
        except RecursionError:
            if self.debug_level >= 1:
                self.debug("runtime error: stack overflow")
            self.reporter.fatal("Stack overflow.")

    def resolve(self, expr: Expr, depth: int):
        self.locals[expr.node_id] = depth
        if self.debug_level >= 3:
            self.debug(f"resolve {type(expr).__name__}#{expr.node_id} at distance {depth}")

    def write(self, text: str):
        if self.output is not None:
            self.output.write(text + '\n')
        else:
            print(text)

    # Statements
    def execute(self, stmt: Stmt) -> Optional[ReturnSignal]:
        if isinstance(stmt, ExprStmt):
            self.evaluate(stmt.expression)
            return None
        if isinstance(stmt, PrintStmt):
            value = self.evaluate(stmt.expression)
            self.write(stringify(value))
            return None
        if isinstance(stmt, VarDecl):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)
            if self.debug_level >= 2:
                self.debug(f"declare {stmt.name.lexeme}: {type_name(value)} = {stringify(value)}")
            return None
        if isinstance(stmt, Block):
            return self.execute_block(stmt.statements, Environment(self.environment))
        if isinstance(stmt, IfStmt):
            cond = self.evaluate(stmt.condition)
            truthy = is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {stringify(cond)} -> {truthy}")
            if truthy:
                return self.execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch)
            return None
        if isinstance(stmt, WhileStmt):
            while is_truthy(self.evaluate(stmt.condition)):
                res = self.execute(stmt.body)
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(stmt, FuncDecl):
            function = LoxFunction(stmt, self.environment)
            self.environment.define(stmt.name.lexeme, function)
            if self.debug_level >= 2:
                self.debug(f"define function {stmt.name.lexeme}")
            return None
        if isinstance(stmt, ReturnStmt):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return ReturnSignal(value)
        if isinstance(stmt, ClassDecl):
            # bind the name first so methods can refer to their own class
            self.environment.define(stmt.name.lexeme, None)
            methods = {
                method.name.lexeme: LoxFunction(method, self.environment)
                for method in stmt.methods
            }
            klass = LoxClass(stmt.name.lexeme, methods)
            self.environment.assign(stmt.name, klass)
            if self.debug_level >= 2:
                self.debug(f"define class {klass.name} with methods {sorted(methods)}")
            return None
        raise NotImplementedError(f"execute: unexpected node type {type(stmt)}")

    def execute_block(self, statements: List[Stmt], environment: Environment) -> Optional[ReturnSignal]:
        previous = self.environment
        self.environment = environment
        try:
            for stmt in statements:
                res = self.execute(stmt)
                if isinstance(res, ReturnSignal):
                    return res
            return None
        finally:
            self.environment = previous

    # Expressions
    def evaluate(self, expr: Expr) -> Any:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Grouping):
            return self.evaluate(expr.expression)
        if isinstance(expr, Variable):
            return self.look_up_variable(expr.name, expr)
        if isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            distance = self.locals.get(expr.node_id)
            if distance is not None:
                self.environment.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value
        if isinstance(expr, Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type == TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)
        if isinstance(expr, UnaryOp):
            return self.evaluate_unary(expr)
        if isinstance(expr, BinaryOp):
            return self.evaluate_binary(expr)
        if isinstance(expr, Call):
            return self.evaluate_call(expr)
        if isinstance(expr, Get):
            obj = self.evaluate(expr.object)
            if isinstance(obj, LoxInstance):
                return obj.get(expr.name)
            raise LoxRuntimeError(expr.name, 'Only instances have properties.')
        if isinstance(expr, Set):
            obj = self.evaluate(expr.object)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(expr.name, 'Only instances have fields.')
            value = self.evaluate(expr.value)
            obj.set(expr.name, value)
            return value
        if isinstance(expr, This):
            return self.look_up_variable(expr.keyword, expr)
        raise NotImplementedError(f"evaluate: unexpected node type {type(expr)}")

    def look_up_variable(self, name: Token, expr: Expr) -> Any:
        distance = self.locals.get(expr.node_id)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def evaluate_unary(self, expr: UnaryOp) -> Any:
        operand = self.evaluate(expr.operand)
        op = expr.operator
        if op.type == TokenType.BANG:
            return not is_truthy(operand)
        if op.type == TokenType.MINUS:
            if not isinstance(operand, float):
                raise LoxRuntimeError(op, f"Operand of '{op.lexeme}' must be a number.")
            return -operand
        raise LoxRuntimeError(op, f"Invalid unary operator '{op.lexeme}'.")

    def evaluate_binary(self, expr: BinaryOp) -> Any:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        op = expr.operator
        if op.type == TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if op.type == TokenType.BANG_EQUAL:
            return not is_equal(left, right)
        if op.type == TokenType.PLUS:
            if isinstance(left, float):
                if not isinstance(right, float):
                    raise LoxRuntimeError(op, "Right operand of '+' must be a number.")
                return left + right
            if isinstance(left, str):
                if not isinstance(right, str):
                    raise LoxRuntimeError(op, "Right operand of '+' must be a string.")
                return left + right
            raise LoxRuntimeError(op, "Left operand of '+' must be a number or a string.")
        if op.type == TokenType.SLASH:
            self.check_number_operands(op, left, right)
            return divide(left, right)
        if op.type in ARITHMETIC_OPS:
            self.check_number_operands(op, left, right)
            return ARITHMETIC_OPS[op.type](left, right)
        raise LoxRuntimeError(op, f"Invalid binary operator '{op.lexeme}'.")

    def check_number_operands(self, op: Token, left: Any, right: Any):
        if not isinstance(left, float):
            raise LoxRuntimeError(op, f"Left operand of '{op.lexeme}' must be a number.")
        if not isinstance(right, float):
            raise LoxRuntimeError(op, f"Right operand of '{op.lexeme}' must be a number.")

    def evaluate_call(self, expr: Call) -> Any:
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, 'Can only call functions and classes.')
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                expr.paren,
                f"Expected {callee.arity()} arguments but got {len(arguments)}.",
            )
        if self.debug_level >= 2:
            self.debug(f"call {callee!r} with {len(arguments)} argument(s)")
        return callee.call(self, arguments)
