"""Debug utility that renders the AST as parenthesized prefix notation, e.g. `1 + 2 * 3` becomes `(+ 1 (* 2 3))`.
Read-only: it never touches the binding table or the runtime.
"""

from lox.core.evaluator import stringify


class AstPrinter:
    """Formats statements and expressions. Statements nest the same way expressions do:

    ```
    var a = 1;          ->  (var a 1)
    fun f(x) { }        ->  (fun f (x))
    class B < A { }     ->  (class B < A)
    ```
    """

    def show(self, node):
        return node.accept(self)

    def show_all(self, statements):
        return "\n".join(self.show(stmt) for stmt in statements)

    def _parenthesize(self, name, *parts):
        result = f"({name}"
        for part in parts:
            result += " " + (part if isinstance(part, str) else self.show(part))
        return result + ")"

    # ==================== STATEMENTS ====================

    def visit_block(self, stmt):
        return self._parenthesize("block", *stmt.statements)

    def visit_class(self, stmt):
        name = stmt.name.lexeme
        if stmt.superclass is not None:
            name += f" < {stmt.superclass.name.lexeme}"
        return self._parenthesize(f"class {name}", *stmt.methods)

    def visit_expression(self, stmt):
        return self._parenthesize(";", stmt.expression)

    def visit_function(self, stmt):
        params = "(" + " ".join(param.lexeme for param in stmt.params) + ")"
        return self._parenthesize(f"fun {stmt.name.lexeme}", params, *stmt.body)

    def visit_if(self, stmt):
        if stmt.else_branch is None:
            return self._parenthesize("if", stmt.condition, stmt.then_branch)
        return self._parenthesize("if-else", stmt.condition, stmt.then_branch, stmt.else_branch)

    def visit_print(self, stmt):
        return self._parenthesize("print", stmt.expression)

    def visit_return(self, stmt):
        if stmt.value is None:
            return "(return)"
        return self._parenthesize("return", stmt.value)

    def visit_var(self, stmt):
        if stmt.initializer is None:
            return f"(var {stmt.name.lexeme})"
        return self._parenthesize(f"var {stmt.name.lexeme}", stmt.initializer)

    def visit_while(self, stmt):
        return self._parenthesize("while", stmt.condition, stmt.body)

    # ==================== EXPRESSIONS ====================

    def visit_assign(self, expr):
        return self._parenthesize(f"= {expr.name.lexeme}", expr.value)

    def visit_binary(self, expr):
        return self._parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_call(self, expr):
        return self._parenthesize("call", expr.callee, *expr.arguments)

    def visit_get(self, expr):
        return self._parenthesize(f". {expr.name.lexeme}", expr.object)

    def visit_grouping(self, expr):
        return self._parenthesize("group", expr.expression)

    def visit_literal(self, expr):
        if isinstance(expr.value, str):
            return f'"{expr.value}"'
        return stringify(expr.value)

    def visit_set(self, expr):
        return self._parenthesize(f"= . {expr.name.lexeme}", expr.object, expr.value)

    def visit_super(self, expr):
        return f"(super {expr.method.lexeme})"

    def visit_this(self, expr):
        return "this"

    def visit_unary(self, expr):
        return self._parenthesize(expr.operator.lexeme, expr.right)

    def visit_variable(self, expr):
        return expr.name.lexeme
