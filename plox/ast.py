"""Abstract Syntax Tree (AST) definitions for the Lox language.

Expressions and statements are plain dataclasses. Each expression gets a
process-unique `node_id` when it is built; the resolver keys scope
distances by that id, so equal-looking expressions at different places
in a program stay distinct. The id takes no part in equality, which lets
trees be compared structurally.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .tokens import Token


_node_ids = itertools.count(1)


def _next_node_id() -> int:
    return next(_node_ids)


@dataclass
class Expr:
    """Base class for all expression nodes."""
    node_id: int = field(default_factory=_next_node_id, compare=False, repr=False, kw_only=True)


@dataclass
class Literal(Expr):
    value: Any


@dataclass
class Grouping(Expr):
    expression: Expr


@dataclass
class UnaryOp(Expr):
    operator: Token
    operand: Expr


@dataclass
class BinaryOp(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass
class Logical(Expr):
    left: Expr
    operator: Token  # 'and' / 'or'
    right: Expr


@dataclass
class Variable(Expr):
    name: Token


@dataclass
class Assign(Expr):
    name: Token
    value: Expr


@dataclass
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, locates arity errors
    arguments: List[Expr]


@dataclass
class Get(Expr):
    object: Expr
    name: Token


@dataclass
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass
class This(Expr):
    keyword: Token


@dataclass
class Stmt:
    """Base class for all statement nodes."""
    pass


@dataclass
class ExprStmt(Stmt):
    expression: Expr


@dataclass
class PrintStmt(Stmt):
    expression: Expr


@dataclass
class VarDecl(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass
class Block(Stmt):
    statements: List[Stmt]


@dataclass
class IfStmt(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass
class WhileStmt(Stmt):
    condition: Expr
    body: Stmt


@dataclass
class FuncDecl(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]


@dataclass
class ReturnStmt(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass
class ClassDecl(Stmt):
    name: Token
    methods: List[FuncDecl]
