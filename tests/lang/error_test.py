import io
import unittest

from lox.core.tokens import Token, TokenType
from lox.lang.error import RESOLUTION, RUNTIME, SYNTAX, Diagnostic, ErrorHandler, LoxException, LoxRuntimeError
from lox.lang.session import Report


class DiagnosticTestCase(unittest.TestCase):

    def test_str(self):
        cases = {
            Diagnostic(SYNTAX, 3, "Expect expression.", " at ';'"): "[line 3] Error at ';': Expect expression.",
            Diagnostic("lexical", 1, "Unexpected character."): "[line 1] Error: Unexpected character.",
            Diagnostic(RUNTIME, 7, "Operands must be numbers."): "Operands must be numbers.\n[line 7]",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, str(case))

    def test_at(self):
        eof = Diagnostic.at(SYNTAX, Token(TokenType.EOF, "", None, 5), "Expect ';' after value.")
        self.assertEqual(Diagnostic(SYNTAX, 5, "Expect ';' after value.", " at end"), eof)

        name = Diagnostic.at(RESOLUTION, Token(TokenType.IDENTIFIER, "a", None, 2), "Already declared.")
        self.assertEqual(" at 'a'", name.where)

    def test_runtime_error(self):
        error = LoxRuntimeError(Token(TokenType.MINUS, "-", None, 4), "Operand must be a number.")
        self.assertEqual(Diagnostic(RUNTIME, 4, "Operand must be a number."), error.diagnostic())


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        self.handler = ErrorHandler(fatal=False, stream=self.stream)

    def test_report(self):
        self.assertTrue(self.handler.report(Report()))
        self.assertEqual("", self.stream.getvalue())

        errors = [Diagnostic(SYNTAX, 1, "Expect expression.", " at ';'"),
                  Diagnostic(RESOLUTION, 2, "Can't return from top-level code.", " at 'return'")]
        self.assertFalse(self.handler.report(Report(errors)))
        written = self.stream.getvalue()
        self.assertIn("[line 1] Error at ';': Expect expression.", written)
        self.assertIn("[line 2] Error at 'return': Can't return from top-level code.", written)

    def test_report_runtime(self):
        self.assertFalse(self.handler.report(Report(runtime_error=Diagnostic(RUNTIME, 9, "Stack overflow."))))
        self.assertIn("Stack overflow.\n[line 9]", self.stream.getvalue())

    def test_fatal_exit_codes(self):
        handler = ErrorHandler(stream=self.stream)
        cases = [
            (Report([Diagnostic(SYNTAX, 1, "Expect expression.")]), ErrorHandler.STATIC_EXIT),
            (Report(runtime_error=Diagnostic(RUNTIME, 1, "Stack overflow.")), ErrorHandler.RUNTIME_EXIT),
        ]
        for report, code in cases:
            with self.assertRaises(SystemExit) as context:
                handler.report(report)
            self.assertEqual(code, context.exception.code)

    def test_lox_exception_is_handled(self):
        with self.handler:
            raise LoxException("'{}' could not be opened", "missing.lox")
        self.assertIn("could not be opened", self.stream.getvalue())
        self.assertIn("missing.lox", self.stream.getvalue())

    def test_internal_error_propagates(self):
        with self.assertRaises(ValueError):
            with self.handler:
                raise ValueError("{not a template}")
        self.assertIn("[internal]", self.stream.getvalue())
        self.assertIn("ValueError", self.stream.getvalue())

    def test_recursion_error_is_handled(self):
        with self.handler:
            raise RecursionError("maximum recursion depth exceeded")
        self.assertIn("maximum recursion depth exceeded", self.stream.getvalue())
        self.assertNotIn("[internal]", self.stream.getvalue())

    def test_runtime_error_without_token(self):
        error = LoxRuntimeError(None, "Stack overflow.")
        self.assertEqual(Diagnostic(RUNTIME, 0, "Stack overflow."), error.diagnostic())

    def test_fatal_lox_exception_exits(self):
        with self.assertRaises(SystemExit) as context:
            with ErrorHandler(stream=self.stream):
                raise LoxException("bad usage")
        self.assertEqual(ErrorHandler.INTERNAL_EXIT, context.exception.code)


if __name__ == '__main__':
    unittest.main()
