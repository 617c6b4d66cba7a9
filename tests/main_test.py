import contextlib
import io
import os
import tempfile
import unittest

from lox.lang.error import ErrorHandler
from lox.main import build_parser, main


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.dir.cleanup)

    def write(self, source):
        path = os.path.join(self.dir.name, "program.lox")
        with open(path, "w", encoding="utf-8") as file:
            file.write(source)
        return path

    def run_main(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            main(list(argv))
        return out.getvalue(), err.getvalue()

    def test_arguments(self):
        args = build_parser().parse_args([])
        self.assertIsNone(args.file)
        self.assertFalse(args.tokens or args.ast or args.no_color)

        args = build_parser().parse_args(["prog.lox", "--ast", "--no-color"])
        self.assertEqual("prog.lox", args.file)
        self.assertTrue(args.ast and args.no_color)

    def test_run_file(self):
        out, err = self.run_main(self.write('print "hi"; print 1 + 2;'))
        self.assertEqual("hi\n3\n", out)
        self.assertEqual("", err)

    def test_exit_codes(self):
        cases = {
            "print 1 +;": ErrorHandler.STATIC_EXIT,
            "print this;": ErrorHandler.STATIC_EXIT,
            "print -nil;": ErrorHandler.RUNTIME_EXIT,
        }
        for case, code in cases.items():
            with self.assertRaises(SystemExit, msg=case) as context:
                self.run_main(self.write(case))
            self.assertEqual(code, context.exception.code, case)

    def test_missing_file(self):
        with self.assertRaises(SystemExit) as context:
            self.run_main(os.path.join(self.dir.name, "missing.lox"))
        self.assertEqual(ErrorHandler.INTERNAL_EXIT, context.exception.code)

    def test_tokens(self):
        out, __ = self.run_main(self.write("var a;"), "--tokens")
        self.assertEqual(["VAR 'var' (line 1)", "IDENTIFIER 'a' (line 1)", "SEMICOLON ';' (line 1)", "EOF '' (line 1)"],
                         out.splitlines())

        out, __ = self.run_main(self.write('print 2.5 "s";'), "--tokens")
        self.assertEqual(["PRINT 'print' (line 1)", "NUMBER '2.5' 2.5 (line 1)", "STRING '\"s\"' s (line 1)"],
                         out.splitlines()[:3])

    def test_ast(self):
        out, __ = self.run_main(self.write("print 1 + 2; var x;"), "--ast")
        self.assertEqual("(print (+ 1 2))\n(var x)\n", out)


if __name__ == '__main__':
    unittest.main()
