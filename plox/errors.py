import sys
from typing import Any, List, TextIO, Optional

from plox.tokens import Token, TokenType


class ParseError(Exception):
    """Raised inside the parser to unwind to the nearest statement boundary."""


class LoxRuntimeError(Exception):
    """Exception type used to propagate Lox runtime errors."""
    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message


class ReturnSignal:
    """Control outcome produced by a `return` statement.

    Statement execution hands this back up to the enclosing call instead
    of raising, so every executor checks for it explicitly.
    """
    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"


class SourceFileError(Exception):
    """A script or dump that exists but cannot be read as UTF-8 text."""
    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot read {path}: {reason}")
        self.path = path


class ErrorReporter:
    """Collects and prints static and runtime diagnostics for one session."""
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream
        self.had_error = False
        self.had_runtime_error = False
        self.messages: List[str] = []

    def _write(self, text: str):
        self.messages.append(text)
        print(text, file=self.stream if self.stream is not None else sys.stderr)

    def report(self, line: int, where: str, message: str):
        self._write(f"[line {line}] Error{where}: {message}")
        self.had_error = True

    def error(self, line: int, message: str):
        self.report(line, '', message)

    def token_error(self, token: Token, message: str):
        if token.type == TokenType.EOF:
            self.report(token.line, ' at end', message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def runtime_error(self, error: LoxRuntimeError):
        self._write(f"{error.message}\n[line {error.token.line}]")
        self.had_runtime_error = True

    def fatal(self, message: str):
        """A runtime failure with no source location."""
        self._write(message)
        self.had_runtime_error = True

    def reset(self):
        self.had_error = False
        self.had_runtime_error = False
