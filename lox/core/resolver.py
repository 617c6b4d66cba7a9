"""Static resolution pass. Walks the statement list once, before anything runs, and works out for every local variable
reference how many scopes lie between the use and the declaration. The evaluator trusts these distances blindly, so
the scopes pushed here must match, one for one, the environments the evaluator creates:

- a block statement                       -> one scope / one Environment per execution
- a function or method body               -> one scope holding the parameters / one Environment per call
- a class body                            -> one scope holding "this" / the Environment made by LoxFunction.bind
- a class with a superclass               -> one scope holding "super" / the Environment made in visit_class

The global scope is never pushed. References that resolve to no scope get no entry and are looked up dynamically in
the global Environment at run time.
"""

from enum import Enum, auto

from lox.core import syntax
from lox.lang.error import Diagnostic, RESOLUTION


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    """Builds the binding table (node_id -> distance) for a list of statements and collects resolution errors."""

    def __init__(self):
        self.locals = {}
        self.errors = []

        self._scopes = []  # each maps name -> whether its initializer has finished
        self._current_function = FunctionType.NONE
        self._current_class = ClassType.NONE

    def resolve(self, statements):
        """Resolves statements and returns the binding table. Keeps going after errors, including a statement nested too
        deeply to walk, which is reported and skipped.
        """
        for stmt in statements:
            try:
                self._resolve(stmt)
            except RecursionError:
                self._scopes = []
                self._current_function = FunctionType.NONE
                self._current_class = ClassType.NONE
                token = syntax.first_token(stmt)
                line = token.line if token is not None else 0
                self.errors.append(Diagnostic(RESOLUTION, line, "Expression too deeply nested."))
        return self.locals

    def _resolve(self, node):
        node.accept(self)

    def _begin_scope(self):
        self._scopes.append({})

    def _end_scope(self):
        self._scopes.pop()

    def _declare(self, name):
        if not self._scopes:
            return

        scope = self._scopes[-1]
        if name.lexeme in scope:
            self._error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def _define(self, name):
        if self._scopes:
            self._scopes[-1][name.lexeme] = True

    def _resolve_local(self, node, name):
        for distance, scope in enumerate(reversed(self._scopes)):
            if name.lexeme in scope:
                self.locals[node.node_id] = distance
                return

    def _resolve_function(self, function, function_type):
        enclosing_function = self._current_function
        self._current_function = function_type

        self._begin_scope()
        for param in function.params:
            self._declare(param)
            self._define(param)
        for stmt in function.body:
            self._resolve(stmt)
        self._end_scope()

        self._current_function = enclosing_function

    def _error(self, token, message):
        self.errors.append(Diagnostic.at(RESOLUTION, token, message))

    # ==================== STATEMENTS ====================

    def visit_block(self, stmt):
        self._begin_scope()
        for inner in stmt.statements:
            self._resolve(inner)
        self._end_scope()

    def visit_class(self, stmt):
        enclosing_class = self._current_class
        self._current_class = ClassType.CLASS

        self._declare(stmt.name)
        self._define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self._error(stmt.superclass.name, "A class can't inherit from itself.")
            self._current_class = ClassType.SUBCLASS
            self._resolve(stmt.superclass)

            self._begin_scope()
            self._scopes[-1]["super"] = True

        self._begin_scope()
        self._scopes[-1]["this"] = True

        for method in stmt.methods:
            function_type = FunctionType.INITIALIZER if method.name.lexeme == "init" else FunctionType.METHOD
            self._resolve_function(method, function_type)

        self._end_scope()
        if stmt.superclass is not None:
            self._end_scope()

        self._current_class = enclosing_class

    def visit_expression(self, stmt):
        self._resolve(stmt.expression)

    def visit_function(self, stmt):
        # defined before the body so the function can call itself
        self._declare(stmt.name)
        self._define(stmt.name)
        self._resolve_function(stmt, FunctionType.FUNCTION)

    def visit_if(self, stmt):
        self._resolve(stmt.condition)
        self._resolve(stmt.then_branch)
        if stmt.else_branch is not None:
            self._resolve(stmt.else_branch)

    def visit_print(self, stmt):
        self._resolve(stmt.expression)

    def visit_return(self, stmt):
        if self._current_function is FunctionType.NONE:
            self._error(stmt.keyword, "Can't return from top-level code.")
        if stmt.value is not None:
            self._resolve(stmt.value)

    def visit_var(self, stmt):
        self._declare(stmt.name)
        if stmt.initializer is not None:
            self._resolve(stmt.initializer)
        self._define(stmt.name)

    def visit_while(self, stmt):
        self._resolve(stmt.condition)
        self._resolve(stmt.body)

    # ==================== EXPRESSIONS ====================

    def visit_assign(self, expr):
        self._resolve(expr.value)
        self._resolve_local(expr, expr.name)

    def visit_binary(self, expr):
        self._resolve(expr.left)
        self._resolve(expr.right)

    def visit_call(self, expr):
        self._resolve(expr.callee)
        for argument in expr.arguments:
            self._resolve(argument)

    def visit_get(self, expr):
        self._resolve(expr.object)

    def visit_grouping(self, expr):
        self._resolve(expr.expression)

    def visit_literal(self, expr):
        pass

    def visit_set(self, expr):
        self._resolve(expr.value)
        self._resolve(expr.object)

    def visit_super(self, expr):
        if self._current_class is ClassType.NONE:
            self._error(expr.keyword, "Can't use 'super' outside of a class.")
        elif self._current_class is not ClassType.SUBCLASS:
            self._error(expr.keyword, "Can't use 'super' in a class with no superclass.")
        self._resolve_local(expr, expr.keyword)

    def visit_this(self, expr):
        if self._current_class is ClassType.NONE:
            self._error(expr.keyword, "Can't use 'this' outside of a class.")
            return
        self._resolve_local(expr, expr.keyword)

    def visit_unary(self, expr):
        self._resolve(expr.right)

    def visit_variable(self, expr):
        if self._scopes and self._scopes[-1].get(expr.name.lexeme) is False:
            self._error(expr.name, "Can't read local variable in its own initializer.")
        self._resolve_local(expr, expr.name)
