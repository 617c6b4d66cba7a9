import unittest

from lox.core import syntax
from lox.core.parser import Parser
from lox.core.printer import AstPrinter
from lox.core.scanner import Scanner


def parse(source):
    parser = Parser(Scanner(source).scan_tokens())
    return parser.parse(), parser.errors


def show(source):
    statements, errors = parse(source)
    assert not errors, errors
    return AstPrinter().show_all(statements)


def messages(source):
    return [f"{error.line}{error.where}: {error.message}" for error in parse(source)[1]]


class ExpressionTestCase(unittest.TestCase):

    def test_precedence(self):
        cases = {
            "1 + 2 * 3;": "(; (+ 1 (* 2 3)))",
            "(1 + 2) * 3;": "(; (* (group (+ 1 2)) 3))",
            "1 - 2 - 3;": "(; (- (- 1 2) 3))",
            "8 / 4 / 2;": "(; (/ (/ 8 4) 2))",
            "-1 * 2;": "(; (* (- 1) 2))",
            "!!true;": "(; (! (! true)))",
            "1 < 2 == 3 >= 4;": "(; (== (< 1 2) (>= 3 4)))",
            "a || b && c;": "(; (|| a (&& b c)))",
            "a && b || c && d;": "(; (|| (&& a b) (&& c d)))",
            "a == b && c != d;": "(; (&& (== a b) (!= c d)))",
            "-a.b;": "(; (- (. b a)))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

    def test_assignment(self):
        cases = {
            "a = 1;": "(; (= a 1))",
            "a = b = c;": "(; (= a (= b c)))",
            "a.b = 1;": "(; (= . b a 1))",
            "a.b.c = d = 2;": "(; (= . c (. b a) (= d 2)))",
            "a = 1 + 2;": "(; (= a (+ 1 2)))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

    def test_calls(self):
        cases = {
            "f();": "(; (call f))",
            "f(1, 2)(3);": "(; (call (call f 1 2) 3))",
            "a.b.c(d);": "(; (call (. c (. b a)) d))",
            "a().b;": "(; (. b (call a)))",
            "super.m(1);": "(; (call (super m) 1))",
            "this.x;": "(; (. x this))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

    def test_literals(self):
        cases = {
            "1.5;": "(; 1.5)",
            '"str";': '(; "str")',
            "nil;": "(; nil)",
            "false;": "(; false)",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

    def test_parse_expression(self):
        expr = Parser(Scanner("1 + 2").scan_tokens()).parse_expression()
        self.assertEqual("(+ 1 2)", AstPrinter().show(expr))

        should_fail = ["1 +", "(1", "1 2", ""]
        for case in should_fail:
            self.assertIsNone(Parser(Scanner(case).scan_tokens()).parse_expression(), case)


class StatementTestCase(unittest.TestCase):

    def test_statements(self):
        cases = {
            "var a;": "(var a)",
            "let a = 1;": "(var a 1)",
            "print a;": "(print a)",
            "{ var a = 1; print a; }": "(block (var a 1) (print a))",
            "if (a) print 1;": "(if a (print 1))",
            "if (a) print 1; else print 2;": "(if-else a (print 1) (print 2))",
            "while (a) a = a - 1;": "(while a (; (= a (- a 1))))",
            "fun f(a, b) { return a; }": "(fun f (a b) (return a))",
            "fun f() { return; }": "(fun f () (return))",
            "class A { m() {} }": "(class A (fun m ()))",
            "class B < A { init(x) { this.x = x; } }": "(class B < A (fun init (x) (; (= . x this x))))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

    def test_dangling_else(self):
        self.assertEqual("(if a (if-else b (print 1) (print 2)))", show("if (a) if (b) print 1; else print 2;"))

    def test_for_desugaring(self):
        cases = {
            "for (var i = 0; i < 3; i = i + 1) print i;":
                "(block (var i 0) (while (< i 3) (block (print i) (; (= i (+ i 1))))))",
            "for (;;) print 1;": "(while true (print 1))",
            "for (i = 0; i < 3;) print i;": "(block (; (= i 0)) (while (< i 3) (print i)))",
            "for (; i < 3; i = i + 1) {}": "(while (< i 3) (block (block) (; (= i (+ i 1)))))",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, show(case), case)

    def test_node_ids_unique(self):
        statements, __ = parse("var a = 1; { print a + a; } fun f(x) { return x; }")
        ids = []

        def collect(value):
            if isinstance(value, syntax.SyntaxNode):
                ids.append(value.node_id)
                for child in vars(value).values():
                    collect(child)
            elif isinstance(value, list):
                for child in value:
                    collect(child)

        collect(statements)
        self.assertEqual(len(ids), len(set(ids)))

    def test_shared_id_source(self):
        ids = iter(range(100, 200))
        statements = Parser(Scanner("print 1;").scan_tokens(), ids).parse()
        self.assertTrue(all(100 <= stmt.node_id < 200 for stmt in statements))


class ErrorRecoveryTestCase(unittest.TestCase):

    def test_messages(self):
        cases = {
            "print 1": ["1 at end: Expect ';' after value."],
            "var 1 = 2;": ["1 at '1': Expect variable name."],
            "1 + ;": ["1 at ';': Expect expression."],
            "(1;": ["1 at ';': Expect ')' after expression."],
            "if 1) print 1;": ["1 at '1': Expect '(' after 'if'."],
            "fun (a) {}": ["1 at '(': Expect function name."],
            "class A < {}": ["1 at '{': Expect superclass name."],
            "a.;": ["1 at ';': Expect property name after '.'."],
            "super;": ["1 at ';': Expect '.' after 'super'."],
            "{ print 1;": ["1 at end: Expect '}' after block."],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, messages(case), case)

    def test_invalid_assignment_target(self):
        statements, errors = parse("1 + 2 = 3; print 4;")
        self.assertEqual(["Invalid assignment target."], [error.message for error in errors])
        self.assertEqual(" at '='", errors[0].where)
        # not a ParseError: both statements survive
        self.assertEqual(2, len(statements))

    def test_synchronize(self):
        source = "var = 1;\nprint 2;\nvar b = ;\nvar c = 1 2;\nprint 3;"
        statements, errors = parse(source)
        self.assertEqual([1, 3, 4], [error.line for error in errors])
        self.assertEqual("(print 2)\n(print 3)", AstPrinter().show_all(statements))

    def test_synchronize_on_keyword(self):
        statements, errors = parse("print 1 + * 2 class A {}")
        self.assertEqual(["Expect expression."], [error.message for error in errors])
        self.assertEqual("(class A)", AstPrinter().show_all(statements))

    def test_too_deeply_nested(self):
        source = "print " + "(" * 1000 + "1" + ")" * 1000 + ";\nprint 2;"
        statements, errors = parse(source)
        self.assertEqual(["Expression too deeply nested."], [error.message for error in errors])
        self.assertEqual("(print 2)", AstPrinter().show_all(statements))

    def test_no_cascade(self):
        self.assertEqual(1, len(messages("print (1 + ; print 2; print 3;")))


if __name__ == '__main__':
    unittest.main()
