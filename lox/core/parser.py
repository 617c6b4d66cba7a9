"""Recursive-descent parser for Lox. Statements are parsed by one method per grammar rule; expressions below the
assignment level are parsed by precedence climbing over the tables below.

```
<program>     ::= <declaration>* EOF
<declaration> ::= <class_decl> | "fun" <function> | <var_decl> | <statement>
<class_decl>  ::= "class" IDENT ( "<" IDENT )? "{" <function>* "}"
<function>    ::= IDENT "(" ( IDENT ( "," IDENT )* )? ")" <block>
<var_decl>    ::= "var" IDENT ( "=" <expression> )? ";"
<statement>   ::= <expr_stmt> | <for_stmt> | <if_stmt> | <print_stmt> | <return_stmt> | <while_stmt> | <block>
<expression>  ::= <assignment>
<assignment>  ::= ( <call> "." )? IDENT "=" <assignment> | <binary>
<binary>      ::= ( "!" | "-" )* <call> ( <binary_op> <binary> )*   ; see UNARY / BINARY precedence tables
<call>        ::= <primary> ( "(" <arguments>? ")" | "." IDENT )*
<primary>     ::= "true" | "false" | "nil" | "this" | NUMBER | STRING | IDENT | "(" <expression> ")"
                | "super" "." IDENT
```

Errors never stop the parser. A failed declaration records a Diagnostic, raises ParseError back up to the
declaration that contains it and is thrown away whole, and the parser skips ahead to the next statement boundary.
"""

from itertools import count

from lox.core import syntax
from lox.core.tokens import TokenType
from lox.lang.error import Diagnostic, SYNTAX


class ParseError(Exception):
    """Unwinds a failed declaration. The Diagnostic has already been recorded when this is raised."""


class Parser:
    """Turns a token list into a list of statements. ids is the node id source; sessions pass their own so that ids
    stay unique across several parses.
    """
    UNARY = {TokenType.BANG: 7, TokenType.MINUS: 7}
    BINARY = {
        TokenType.STAR: 6,
        TokenType.SLASH: 6,
        TokenType.PLUS: 5,
        TokenType.MINUS: 5,
        TokenType.GREATER: 4,
        TokenType.GREATER_EQUAL: 4,
        TokenType.LESS: 4,
        TokenType.LESS_EQUAL: 4,
        TokenType.EQUAL_EQUAL: 3,
        TokenType.BANG_EQUAL: 3,
        TokenType.AND_AND: 2,
        TokenType.OR_OR: 1,
    }

    # tokens that start a declaration; synchronize stops in front of them
    BOUNDARIES = {
        TokenType.CLASS,
        TokenType.FUN,
        TokenType.VAR,
        TokenType.FOR,
        TokenType.IF,
        TokenType.WHILE,
        TokenType.RETURN,
    }

    def __init__(self, tokens, ids=None):
        self.tokens = tokens
        self.errors = []

        self._ids = ids if ids is not None else count()
        self._current = 0

    def parse(self):
        """Parses the whole token list. Declarations that failed to parse are left out of the result."""
        statements = []
        while not self._is_at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    def parse_expression(self):
        """Parses a single expression, or returns None if it has errors. Used by the AST printer and tests."""
        try:
            expr = self._expression()
            self._consume(TokenType.EOF, "Expect end of expression.")
            return expr
        except ParseError:
            return None

    def _node(self, cls, *args):
        return cls(next(self._ids), *args)

    # ==================== DECLARATIONS ====================

    def _declaration(self):
        try:
            if self._match(TokenType.CLASS):
                return self._class_declaration()
            if self._match(TokenType.FUN):
                return self._function("function")
            if self._match(TokenType.VAR):
                return self._var_declaration()
            return self._statement()
        except ParseError:
            self._synchronize()
            return None
        except RecursionError:
            self._error(self._peek(), "Expression too deeply nested.")
            self._synchronize()
            return None

    def _class_declaration(self):
        name = self._consume(TokenType.IDENTIFIER, "Expect class name.")

        superclass = None
        if self._match(TokenType.LESS):
            self._consume(TokenType.IDENTIFIER, "Expect superclass name.")
            superclass = self._node(syntax.Variable, self._previous())

        self._consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")
        methods = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            methods.append(self._function("method"))
        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")

        return self._node(syntax.Class, name, superclass, methods)

    def _function(self, kind):
        name = self._consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self._consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self._check(TokenType.RIGHT_PAREN):
            params.append(self._consume(TokenType.IDENTIFIER, "Expect parameter name."))
            while self._match(TokenType.COMMA):
                params.append(self._consume(TokenType.IDENTIFIER, "Expect parameter name."))
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self._consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        return self._node(syntax.Function, name, params, self._block())

    def _var_declaration(self):
        name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self._match(TokenType.EQUAL):
            initializer = self._expression()

        self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return self._node(syntax.Var, name, initializer)

    # ==================== STATEMENTS ====================

    def _statement(self):
        if self._match(TokenType.FOR):
            return self._for_statement()
        if self._match(TokenType.IF):
            return self._if_statement()
        if self._match(TokenType.PRINT):
            return self._print_statement()
        if self._match(TokenType.RETURN):
            return self._return_statement()
        if self._match(TokenType.WHILE):
            return self._while_statement()
        if self._match(TokenType.LEFT_BRACE):
            return self._node(syntax.Block, self._block())
        return self._expression_statement()

    def _for_statement(self):
        """Desugars `for (init; cond; incr) body` into `{ init; while (cond) { body; incr; } }`."""
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        condition = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self._check(TokenType.RIGHT_PAREN):
            increment = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._statement()

        if increment is not None:
            body = self._node(syntax.Block, [body, self._node(syntax.Expression, increment)])
        if condition is None:
            condition = self._node(syntax.Literal, True)
        body = self._node(syntax.While, condition, body)
        if initializer is not None:
            body = self._node(syntax.Block, [initializer, body])

        return body

    def _if_statement(self):
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self._statement()
        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._statement()

        return self._node(syntax.If, condition, then_branch, else_branch)

    def _print_statement(self):
        keyword = self._previous()
        value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return self._node(syntax.Print, keyword, value)

    def _return_statement(self):
        keyword = self._previous()
        value = None
        if not self._check(TokenType.SEMICOLON):
            value = self._expression()

        self._consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return self._node(syntax.Return, keyword, value)

    def _while_statement(self):
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return self._node(syntax.While, condition, self._statement())

    def _block(self):
        """Parses the statements of a block whose '{' was already consumed."""
        statements = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)

        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def _expression_statement(self):
        expr = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return self._node(syntax.Expression, expr)

    # ==================== EXPRESSIONS ====================

    def _expression(self):
        return self._assignment()

    def _assignment(self):
        expr = self._binary()

        if self._match(TokenType.EQUAL):
            equals = self._previous()
            value = self._assignment()

            if isinstance(expr, syntax.Variable):
                return self._node(syntax.Assign, expr.name, value)
            if isinstance(expr, syntax.Get):
                return self._node(syntax.Set, expr.object, expr.name, value)

            self._error(equals, "Invalid assignment target.")  # reported, but nothing to recover from

        return expr

    def _binary(self, parent_precedence=0):
        """Precedence climbing: parses operators binding tighter than parent_precedence, left-associatively."""
        unary_precedence = Parser.UNARY.get(self._peek().type, 0)
        if unary_precedence and unary_precedence >= parent_precedence:
            operator = self._advance()
            left = self._node(syntax.Unary, operator, self._binary(unary_precedence))
        else:
            left = self._call()

        while True:
            precedence = Parser.BINARY.get(self._peek().type, 0)
            if not precedence or precedence <= parent_precedence:
                break
            operator = self._advance()
            left = self._node(syntax.Binary, left, operator, self._binary(precedence))

        return left

    def _call(self):
        expr = self._primary()

        while True:
            if self._match(TokenType.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self._match(TokenType.DOT):
                name = self._consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = self._node(syntax.Get, expr, name)
            else:
                break

        return expr

    def _finish_call(self, callee):
        arguments = []
        if not self._check(TokenType.RIGHT_PAREN):
            arguments.append(self._expression())
            while self._match(TokenType.COMMA):
                arguments.append(self._expression())

        paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return self._node(syntax.Call, callee, paren, arguments)

    def _primary(self):
        if self._match(TokenType.FALSE):
            return self._node(syntax.Literal, False)
        if self._match(TokenType.TRUE):
            return self._node(syntax.Literal, True)
        if self._match(TokenType.NIL):
            return self._node(syntax.Literal, None)
        if self._match(TokenType.NUMBER, TokenType.STRING):
            return self._node(syntax.Literal, self._previous().literal)
        if self._match(TokenType.THIS):
            return self._node(syntax.This, self._previous())
        if self._match(TokenType.IDENTIFIER):
            return self._node(syntax.Variable, self._previous())
        if self._match(TokenType.SUPER):
            keyword = self._previous()
            self._consume(TokenType.DOT, "Expect '.' after 'super'.")
            method = self._consume(TokenType.IDENTIFIER, "Expect superclass method name.")
            return self._node(syntax.Super, keyword, method)
        if self._match(TokenType.LEFT_PAREN):
            expr = self._expression()
            self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return self._node(syntax.Grouping, expr)

        raise self._error(self._peek(), "Expect expression.")

    # ==================== HELPERS ====================

    def _match(self, *types):
        for token_type in types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    def _consume(self, token_type, message):
        if self._check(token_type):
            return self._advance()
        raise self._error(self._peek(), message)

    def _check(self, token_type):
        if self._is_at_end():
            return token_type is TokenType.EOF
        return self._peek().type is token_type

    def _advance(self):
        if not self._is_at_end():
            self._current += 1
        return self._previous()

    def _is_at_end(self):
        return self._peek().type is TokenType.EOF

    def _peek(self):
        return self.tokens[self._current]

    def _previous(self):
        return self.tokens[self._current - 1]

    def _error(self, token, message):
        """Records a Diagnostic at token and returns the ParseError for the caller to raise (or not)."""
        self.errors.append(Diagnostic.at(SYNTAX, token, message))
        return ParseError(message)

    def _synchronize(self):
        """Discards tokens until just after a ';' or just before a token that starts a declaration."""
        self._advance()

        while not self._is_at_end():
            if self._previous().type is TokenType.SEMICOLON:
                return
            if self._peek().type in Parser.BOUNDARIES:
                return
            self._advance()
