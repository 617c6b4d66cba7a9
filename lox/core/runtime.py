"""Runtime object model: environments, functions, classes and instances.

Ownership is plain Python references. A LoxFunction keeps the Environment it was declared in alive for as long as the
function itself is reachable, and that Environment keeps its ancestors alive through `enclosing`; the host garbage
collector takes care of the rest (including cycles such as a function stored in its own closure).
"""

from abc import ABC, abstractmethod

from lox.lang.error import LoxRuntimeError


class ReturnSignal(Exception):
    """Non-local exit carrying a return value. Only ever caught by LoxFunction.call."""

    def __init__(self, value):
        super().__init__()
        self.value = value


class Environment:
    """One runtime scope frame: a name -> value mapping chained to its enclosing frame."""

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        """Binds name in this frame. Redefinition simply overwrites (the global frame allows it)."""
        self.values[name] = value

    def get(self, name):
        """Looks name (a Token) up through this frame and its ancestors."""
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        if self.enclosing is not None:
            return self.enclosing.get(name)
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name, value):
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
        elif self.enclosing is not None:
            self.enclosing.assign(name, value)
        else:
            raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance):
        environment = self
        for __ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        """Reads name (a str, unlike get) from the frame exactly distance hops up, as computed by the resolver."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name] = value

    def __repr__(self):
        return f"Environment({self.values}, enclosing={self.enclosing is not None})"


class LoxCallable(ABC):
    """Anything a Lox call expression can invoke."""

    @property
    @abstractmethod
    def arity(self):
        """Exact number of arguments a call must pass."""

    @abstractmethod
    def call(self, evaluator, arguments):
        """Invokes this callable. arguments has already been checked against arity."""


class LoxFunction(LoxCallable):
    """A function or method value: its declaration plus the Environment it closes over."""

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def arity(self):
        return len(self.declaration.params)

    def bind(self, instance):
        """Returns a copy of this method whose closure has "this" bound to instance."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def call(self, evaluator, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        try:
            evaluator.execute_block(self.declaration.body, environment)
        except ReturnSignal as ret:
            if self.is_initializer:
                return self.closure.get_at(0, "this")
            return ret.value

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        return None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"


class LoxClass(LoxCallable):
    """A class value. Calling it creates a LoxInstance and runs init, if the class (or an ancestor) has one."""

    def __init__(self, name, superclass, methods):
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name):
        """Looks name up in this class, then up the superclass chain. Returns None if no class defines it."""
        if name in self.methods:
            return self.methods[name]
        if self.superclass is not None:
            return self.superclass.find_method(name)
        return None

    @property
    def arity(self):
        initializer = self.find_method("init")
        return initializer.arity if initializer is not None else 0

    def call(self, evaluator, arguments):
        instance = LoxInstance(self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(evaluator, arguments)
        return instance

    def __str__(self):
        return self.name


class LoxInstance:
    """An object created by calling a LoxClass. Fields are created on first assignment."""

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Fields shadow methods; methods come back bound to this instance."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"
