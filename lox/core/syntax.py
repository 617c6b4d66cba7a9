"""Abstract syntax tree for Lox.

There are two closed families of nodes, expressions and statements. Every node carries a node_id handed out by the
parser: the resolver keys its binding table by these ids and the evaluator looks them up again, so two structurally
identical nodes (say, two uses of `x`) are still told apart. Nodes never compare equal unless they are the same object.

Passes over the tree (Resolver, Evaluator, AstPrinter) dispatch on the node's `kind`, calling a method named
`visit_<kind>`; every pass must provide one for each kind in EXPRESSIONS and STATEMENTS.
"""

from abc import ABC

from lox.core.tokens import Token


class SyntaxNode(ABC):
    """Superclass for every AST node."""
    kind = None

    def __init__(self, node_id):
        self.node_id = node_id

    def accept(self, visitor):
        return getattr(visitor, f"visit_{self.kind}")(self)

    def __repr__(self):
        return f"{type(self).__name__}#{self.node_id}"


class Expr(SyntaxNode):
    """Superclass for expression nodes."""


class Stmt(SyntaxNode):
    """Superclass for statement nodes."""


# ==================== EXPRESSIONS ====================

class Binary(Expr):
    kind = "binary"

    def __init__(self, node_id, left, operator, right):
        super().__init__(node_id)
        self.left = left
        self.operator = operator
        self.right = right


class Unary(Expr):
    kind = "unary"

    def __init__(self, node_id, operator, right):
        super().__init__(node_id)
        self.operator = operator
        self.right = right


class Grouping(Expr):
    kind = "grouping"

    def __init__(self, node_id, expression):
        super().__init__(node_id)
        self.expression = expression


class Literal(Expr):
    """A number, string, boolean or nil (None) constant."""
    kind = "literal"

    def __init__(self, node_id, value):
        super().__init__(node_id)
        self.value = value


class Variable(Expr):
    kind = "variable"

    def __init__(self, node_id, name):
        super().__init__(node_id)
        self.name = name


class Assign(Expr):
    kind = "assign"

    def __init__(self, node_id, name, value):
        super().__init__(node_id)
        self.name = name
        self.value = value


class Call(Expr):
    """paren is the closing parenthesis, kept to locate runtime errors."""
    kind = "call"

    def __init__(self, node_id, callee, paren, arguments):
        super().__init__(node_id)
        self.callee = callee
        self.paren = paren
        self.arguments = arguments


class Get(Expr):
    kind = "get"

    def __init__(self, node_id, obj, name):
        super().__init__(node_id)
        self.object = obj
        self.name = name


class Set(Expr):
    kind = "set"

    def __init__(self, node_id, obj, name, value):
        super().__init__(node_id)
        self.object = obj
        self.name = name
        self.value = value


class This(Expr):
    kind = "this"

    def __init__(self, node_id, keyword):
        super().__init__(node_id)
        self.keyword = keyword


class Super(Expr):
    kind = "super"

    def __init__(self, node_id, keyword, method):
        super().__init__(node_id)
        self.keyword = keyword
        self.method = method


# ==================== STATEMENTS ====================

class Expression(Stmt):
    kind = "expression"

    def __init__(self, node_id, expression):
        super().__init__(node_id)
        self.expression = expression


class Print(Stmt):
    kind = "print"

    def __init__(self, node_id, keyword, expression):
        super().__init__(node_id)
        self.keyword = keyword
        self.expression = expression


class Var(Stmt):
    """initializer is None when the declaration has none."""
    kind = "var"

    def __init__(self, node_id, name, initializer):
        super().__init__(node_id)
        self.name = name
        self.initializer = initializer


class Block(Stmt):
    kind = "block"

    def __init__(self, node_id, statements):
        super().__init__(node_id)
        self.statements = statements


class If(Stmt):
    kind = "if"

    def __init__(self, node_id, condition, then_branch, else_branch):
        super().__init__(node_id)
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch


class While(Stmt):
    kind = "while"

    def __init__(self, node_id, condition, body):
        super().__init__(node_id)
        self.condition = condition
        self.body = body


class Function(Stmt):
    """Function declaration, also used for class methods. params is a list of IDENTIFIER tokens."""
    kind = "function"

    def __init__(self, node_id, name, params, body):
        super().__init__(node_id)
        self.name = name
        self.params = params
        self.body = body


class Return(Stmt):
    kind = "return"

    def __init__(self, node_id, keyword, value):
        super().__init__(node_id)
        self.keyword = keyword
        self.value = value


class Class(Stmt):
    """superclass is a Variable expression, or None."""
    kind = "class"

    def __init__(self, node_id, name, superclass, methods):
        super().__init__(node_id)
        self.name = name
        self.superclass = superclass
        self.methods = methods


EXPRESSIONS = (Binary, Unary, Grouping, Literal, Variable, Assign, Call, Get, Set, This, Super)
STATEMENTS = (Expression, Print, Var, Block, If, While, Function, Return, Class)


def first_token(node):
    """Returns the shallowest Token found under node, or None. Walks the tree with an explicit queue, since it is used to
    locate nodes too deep to be visited recursively.
    """
    pending = [node]
    while pending:
        current = pending.pop(0)
        for value in vars(current).values():
            if isinstance(value, Token):
                return value
            if isinstance(value, SyntaxNode):
                pending.append(value)
            elif isinstance(value, list):
                pending.extend(child for child in value if isinstance(child, SyntaxNode))
    return None
