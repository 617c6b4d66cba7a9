"""Tree-walking evaluator for Lox.

Statements run one at a time against the current Environment. Variable reads and writes use the binding table filled
in by the Resolver: a node_id with a distance reads exactly that many frames up, a node_id without one goes to the
global frame. Runtime errors are LoxRuntimeErrors and are never caught here; a `return` is a ReturnSignal and is only
caught by LoxFunction.call.
"""

import math

from lox.core.runtime import Environment, LoxCallable, LoxClass, LoxFunction, LoxInstance, ReturnSignal
from lox.core.syntax import first_token
from lox.core.tokens import TokenType
from lox.lang.error import LoxRuntimeError


def is_truthy(value):
    """nil and false are falsy, everything else (0 and "" included) is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """Value equality without coercion: values of different kinds are never equal (so 1 != true). Unlike IEEE
    comparison, NaN equals NaN.
    """
    if type(left) is not type(right):
        return False
    if isinstance(left, float) and math.isnan(left) and math.isnan(right):
        return True
    return left == right


def stringify(value):
    """Canonical text of a runtime value, as written by print."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def divide(left, right):
    """IEEE-754 division: x/0 is a signed infinity and 0/0 is NaN, instead of a Python ZeroDivisionError."""
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)


class Evaluator:
    """Executes statements. One Evaluator owns one global Environment, so separate Evaluators share nothing.

    out is the stream print writes to (None means standard output).
    """

    def __init__(self, out=None):
        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}
        self.out = out

    def resolve(self, locals_):
        """Adds a Resolver's binding table (node_id -> distance) to the one this Evaluator uses."""
        self.locals.update(locals_)

    def interpret(self, statements):
        """Runs statements in order. A LoxRuntimeError propagates and stops the remaining statements. A statement too
        deeply nested to evaluate fails with "Stack overflow.", like runaway recursion does.
        """
        for stmt in statements:
            try:
                self.execute(stmt)
            except RecursionError:
                raise LoxRuntimeError(first_token(stmt), "Stack overflow.") from None

    def execute(self, stmt):
        stmt.accept(self)

    def evaluate(self, expr):
        return expr.accept(self)

    def execute_block(self, statements, environment):
        """Runs statements in environment, restoring the current environment however the block is left."""
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                self.execute(stmt)
        finally:
            self.environment = previous

    def _lookup_variable(self, name, expr):
        distance = self.locals.get(expr.node_id)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    # ==================== STATEMENTS ====================

    def visit_block(self, stmt):
        self.execute_block(stmt.statements, Environment(self.environment))

    def visit_class(self, stmt):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods = {}
        for method in stmt.methods:
            methods[method.name.lexeme] = LoxFunction(method, self.environment, method.name.lexeme == "init")

        klass = LoxClass(stmt.name.lexeme, superclass, methods)

        if superclass is not None:
            self.environment = self.environment.enclosing

        self.environment.assign(stmt.name, klass)

    def visit_expression(self, stmt):
        self.evaluate(stmt.expression)

    def visit_function(self, stmt):
        self.environment.define(stmt.name.lexeme, LoxFunction(stmt, self.environment))

    def visit_if(self, stmt):
        if is_truthy(self.evaluate(stmt.condition)):
            self.execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            self.execute(stmt.else_branch)

    def visit_print(self, stmt):
        print(stringify(self.evaluate(stmt.expression)), file=self.out)

    def visit_return(self, stmt):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        raise ReturnSignal(value)

    def visit_var(self, stmt):
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)
        self.environment.define(stmt.name.lexeme, value)

    def visit_while(self, stmt):
        while is_truthy(self.evaluate(stmt.condition)):
            self.execute(stmt.body)

    # ==================== EXPRESSIONS ====================

    def visit_assign(self, expr):
        value = self.evaluate(expr.value)

        distance = self.locals.get(expr.node_id)
        if distance is not None:
            self.environment.assign_at(distance, expr.name.lexeme, value)
        else:
            self.globals.assign(expr.name, value)
        return value

    def visit_binary(self, expr):
        operator = expr.operator
        left = self.evaluate(expr.left)

        # short-circuit: the right operand is only evaluated when it decides the result
        if operator.type is TokenType.AND_AND:
            return self.evaluate(expr.right) if is_truthy(left) else left
        if operator.type is TokenType.OR_OR:
            return left if is_truthy(left) else self.evaluate(expr.right)

        right = self.evaluate(expr.right)

        if operator.type is TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if operator.type is TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        if operator.type is TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

        Evaluator._check_number_operands(operator, left, right)
        if operator.type is TokenType.MINUS:
            return left - right
        if operator.type is TokenType.STAR:
            return left * right
        if operator.type is TokenType.SLASH:
            return divide(left, right)
        if operator.type is TokenType.GREATER:
            return left > right
        if operator.type is TokenType.GREATER_EQUAL:
            return left >= right
        if operator.type is TokenType.LESS:
            return left < right
        if operator.type is TokenType.LESS_EQUAL:
            return left <= right

        raise LoxRuntimeError(operator, f"Unexpected binary operator '{operator.lexeme}'.")

    def visit_call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity:
            raise LoxRuntimeError(expr.paren, f"Expected {callee.arity} arguments but got {len(arguments)}.")

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None

    def visit_get(self, expr):
        obj = self.evaluate(expr.object)
        if isinstance(obj, LoxInstance):
            return obj.get(expr.name)
        raise LoxRuntimeError(expr.name, "Only instances have properties.")

    def visit_grouping(self, expr):
        return self.evaluate(expr.expression)

    def visit_literal(self, expr):
        return expr.value

    def visit_set(self, expr):
        obj = self.evaluate(expr.object)
        if not isinstance(obj, LoxInstance):
            raise LoxRuntimeError(expr.name, "Only instances have fields.")

        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def visit_super(self, expr):
        # the "super" frame sits directly above the "this" frame made by LoxFunction.bind
        distance = self.locals[expr.node_id]
        superclass = self.environment.get_at(distance, "super")
        obj = self.environment.get_at(distance - 1, "this")

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")
        return method.bind(obj)

    def visit_this(self, expr):
        return self._lookup_variable(expr.keyword, expr)

    def visit_unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.type is TokenType.BANG:
            return not is_truthy(right)
        if expr.operator.type is TokenType.MINUS:
            Evaluator._check_number_operand(expr.operator, right)
            return -right

        raise LoxRuntimeError(expr.operator, f"Unexpected unary operator '{expr.operator.lexeme}'.")

    def visit_variable(self, expr):
        return self._lookup_variable(expr.name, expr)

    @staticmethod
    def _check_number_operand(operator, operand):
        if not isinstance(operand, float):
            raise LoxRuntimeError(operator, "Operand must be a number.")

    @staticmethod
    def _check_number_operands(operator, left, right):
        if not (isinstance(left, float) and isinstance(right, float)):
            raise LoxRuntimeError(operator, "Operands must be numbers.")
