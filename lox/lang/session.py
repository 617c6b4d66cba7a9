"""Session control for Lox. A Session runs the whole pipeline on a source string, either a file's contents or one line
of the interactive shell:

    1. Scanner: source text -> tokens
    2. Parser: tokens -> statements
    3. Resolver: statements -> binding table
    4. Evaluator: statements + binding table -> output

Every stage runs to completion and collects its own diagnostics. If scanning, parsing or resolving reported anything,
evaluation is skipped entirely.
"""

from itertools import count

from lox.core.evaluator import Evaluator
from lox.core.parser import Parser
from lox.core.printer import AstPrinter
from lox.core.resolver import Resolver
from lox.core.scanner import Scanner
from lox.lang.error import LoxRuntimeError


class Report:
    """Outcome of one Session.run: static diagnostics in the order they were found, plus the runtime error, if any."""

    def __init__(self, errors=None, runtime_error=None):
        self.errors = errors if errors is not None else []
        self.runtime_error = runtime_error

    @property
    def had_error(self):
        return bool(self.errors)

    @property
    def had_runtime_error(self):
        return self.runtime_error is not None

    def __repr__(self):
        return f"Report(errors={self.errors!r}, runtime_error={self.runtime_error!r})"


class Session:
    """Governs a Lox session. Globals (and the binding table of everything run so far) persist between runs, so the
    shell can define a function on one line and call it on the next. Sessions never share state with each other.
    """

    def __init__(self, out=None):
        self.evaluator = Evaluator(out)
        self._ids = count()  # node ids stay unique across runs in this session

    def run(self, source):
        """Runs source through the pipeline and returns its Report."""
        statements, errors = self._front_end(source)
        if errors:
            return Report(errors)

        try:
            self.evaluator.interpret(statements)
        except LoxRuntimeError as error:
            return Report(runtime_error=error.diagnostic())
        return Report()

    def tokens(self, source):
        """Returns the tokens of source and the lexical errors found while scanning it."""
        scanner = Scanner(source)
        return scanner.scan_tokens(), scanner.errors

    def syntax(self, source):
        """Returns source's statements rendered by the AST printer, and any scanning/parsing errors."""
        tokens, errors = self.tokens(source)
        parser = Parser(tokens, self._ids)
        statements = parser.parse()
        return AstPrinter().show_all(statements), errors + parser.errors

    def _front_end(self, source):
        """Scans, parses and resolves source. The binding table is only kept if nothing went wrong."""
        tokens, errors = self.tokens(source)

        parser = Parser(tokens, self._ids)
        statements = parser.parse()
        errors = errors + parser.errors

        resolver = Resolver()
        locals_ = resolver.resolve(statements)
        errors = errors + resolver.errors

        if not errors:
            self.evaluator.resolve(locals_)
        return statements, errors

