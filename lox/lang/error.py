"""Error handling for the Lox interpreter.

Three kinds of problems can show up while running a program:

- static diagnostics (lexical, syntax and resolution errors), collected as Diagnostic records. They never stop the
  stage that found them and they keep the evaluator from ever starting;
- a LoxRuntimeError, raised by the evaluator. It unwinds the current top-level statement and ends the run;
- a LoxException, used for everything around the language itself (unreadable files, bad command-line use). Only
  LoxExceptions and LoxRuntimeErrors should be encountered during running: if another type of error makes it all the
  way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys
from dataclasses import dataclass

from termcolor import colored

from lox.core.tokens import TokenType


LEXICAL = "lexical"
SYNTAX = "syntax"
RESOLUTION = "resolution"
RUNTIME = "runtime"


@dataclass(frozen=True)
class Diagnostic:
    """One problem found in a run. where is "" for lexical errors, " at end" or " at '<lexeme>'" otherwise."""
    kind: str
    line: int
    message: str
    where: str = ""

    @classmethod
    def at(cls, kind, token, message):
        """Builds a Diagnostic located at token."""
        if token.type is TokenType.EOF:
            return cls(kind, token.line, message, " at end")
        return cls(kind, token.line, message, f" at '{token.lexeme}'")

    def __str__(self):
        if self.kind == RUNTIME:
            return f"{self.message}\n[line {self.line}]"
        return f"[line {self.line}] Error{self.where}: {self.message}"


class LoxException(Exception):
    """Templates an interpreter-level error message, with the offending snippets bolded."""

    def __init__(self, msg, exprs=None, internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))
        self.internal = internal
        super().__init__(self.msg)


class LoxRuntimeError(Exception):
    """Runtime error inside a Lox program. token locates the error for the report."""

    def __init__(self, token, message):
        super().__init__(message)
        self.token = token
        self.message = message

    def diagnostic(self):
        line = self.token.line if self.token is not None else 0
        return Diagnostic(RUNTIME, line, self.message)


class ErrorHandler:
    """Context manager that prints Lox diagnostics and turns stray Python errors into interpreter messages."""
    ERROR = "red"
    WARNING = "magenta"

    STATIC_EXIT = 65
    RUNTIME_EXIT = 70
    INTERNAL_EXIT = 1

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream

    def _print(self, msg):
        print(msg, file=self.stream if self.stream is not None else sys.stderr)

    def format(self, diagnostic):
        """Returns diagnostic rendered with a colored prefix. Resolution problems get the warning color."""
        color = ErrorHandler.WARNING if diagnostic.kind == RESOLUTION else ErrorHandler.ERROR
        prefix = colored(f"{diagnostic.kind} error: ", color, attrs=["bold"])
        return prefix + str(diagnostic)

    def report(self, report):
        """Prints every diagnostic in report. Returns whether report was clean; exits instead if fatal."""
        for diagnostic in report.errors:
            self._print(self.format(diagnostic))
        if report.runtime_error is not None:
            self._print(self.format(report.runtime_error))

        if self.fatal and report.had_error:
            sys.exit(ErrorHandler.STATIC_EXIT)
        if self.fatal and report.had_runtime_error:
            sys.exit(ErrorHandler.RUNTIME_EXIT)
        return not (report.had_error or report.had_runtime_error)

    def throw(self, error):
        """Prints a LoxException. Exits if fatal."""
        msg = ""
        if error.internal:
            msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        self._print(msg)

        if self.fatal:
            sys.exit(ErrorHandler.INTERNAL_EXIT)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(LoxException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(LoxException("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, LoxException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(LoxException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
