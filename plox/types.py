"""Runtime value model for the Lox interpreter.

Lox values map onto Python objects as follows: `nil` is None, booleans
are bool, every number is a float and strings are str. Functions,
classes and instances are the classes defined here. The helpers at the
bottom implement truthiness, equality and the display form used by
`print`.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .ast import FuncDecl
from .environment import Environment
from .errors import LoxRuntimeError, ReturnSignal
from .tokens import Token

if TYPE_CHECKING:
    from .interpreter import Interpreter


class LoxCallable(ABC):
    """Anything that can appear on the left of a call expression."""

    @abstractmethod
    def arity(self) -> int:
        ...

    @abstractmethod
    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        ...


class LoxFunction(LoxCallable):
    """A user-defined function paired with the frame it was declared in."""
    def __init__(self, declaration: FuncDecl, closure: Environment):
        self.declaration = declaration
        self.closure = closure

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)
        result = interpreter.execute_block(self.declaration.body, environment)
        if isinstance(result, ReturnSignal):
            return result.value
        return None

    def bind(self, instance: 'LoxInstance') -> 'LoxFunction':
        environment = Environment(self.closure)
        environment.define('this', instance)
        return LoxFunction(self.declaration, environment)

    def __str__(self) -> str:
        return f"<fn {self.declaration.name.lexeme}>"

    __repr__ = __str__


class LoxClass(LoxCallable):
    """A class value. Calling it constructs a fresh, field-less instance."""
    def __init__(self, name: str, methods: Dict[str, LoxFunction]):
        self.name = name
        self.methods = methods

    def find_method(self, name: str) -> Optional[LoxFunction]:
        return self.methods.get(name)

    def arity(self) -> int:
        return 0

    def call(self, interpreter: 'Interpreter', arguments: List[Any]) -> Any:
        return LoxInstance(self)

    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


class LoxInstance:
    def __init__(self, klass: LoxClass):
        self.klass = klass
        self.fields: Dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any):
        self.fields[name.lexeme] = value

    def __str__(self) -> str:
        return f"{self.klass.name} instance"

    __repr__ = __str__


def is_truthy(value: Any) -> bool:
    """`nil` and `false` are falsey, everything else is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Any, b: Any) -> bool:
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    # True == 1.0 in Python, but not in Lox
    if type(a) is not type(b):
        return False
    return a == b


def format_number(value: float) -> str:
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value == 0 and math.copysign(1.0, value) < 0:
        return '-0'
    if value.is_integer():
        return str(int(value))
    return repr(value)


def stringify(value: Any) -> str:
    """Display form used by `print` and the REPL."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def type_name(value: Any) -> str:
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, float):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, LoxClass):
        return 'class'
    if isinstance(value, LoxCallable):
        return 'function'
    if isinstance(value, LoxInstance):
        return 'instance'
    return type(value).__name__
