import time
from dataclasses import dataclass
from typing import Any, Callable, List

from plox.environment import Environment
from plox.types import LoxCallable


@dataclass
class NativeFunction(LoxCallable):
    name: str
    native_arity: int
    fn: Callable[[List[Any]], Any]

    def arity(self) -> int:
        return self.native_arity

    def call(self, interpreter, arguments: List[Any]) -> Any:
        return self.fn(arguments)

    def __str__(self) -> str:
        return '<native fn>'

    def __repr__(self) -> str:
        return f"<native {self.name}>"


def std_clock(args: List[Any]) -> float:
    return time.time()


def populate_globals(env: Environment) -> Environment:
    """Install the native functions into the global frame."""
    env.define('clock', NativeFunction('clock', 0, std_clock))
    return env
