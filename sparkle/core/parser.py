"""Recursive-descent parser for Sparkle. See sparkle/core/syntax.py for the grammar.

Syntax errors are recorded in the Diagnostics object. After an error the parser discards tokens until a probable
statement boundary ("panic mode") and carries on, so that one pass reports as many errors as possible.
"""

from sparkle.lang.error import ParseError
from sparkle.core import syntax
from sparkle.core.tokens import TokenType


class Parser:
    """Converts a list of tokens into a list of statements."""
    MAX_ARGS = 8  # max number of call arguments and function parameters

    # tokens that start a new statement: panic mode stops before them
    BOUNDARIES = (
        TokenType.CLASS,
        TokenType.FN,
        TokenType.VAR,
        TokenType.FOR,
        TokenType.IF,
        TokenType.WHILE,
        TokenType.PRINT,
        TokenType.RETURN,
    )

    def __init__(self, tokens, diagnostics):
        self.tokens = tokens
        self.diagnostics = diagnostics
        self.current = 0

    def parse(self):
        """Parses every token. Returns the list of statements, which should be discarded if any error was recorded."""
        statements = []
        while not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    # declarations

    def declaration(self):
        """Parses a declaration. Returns None if a syntax error forced a resynchronization."""
        try:
            if self.match(TokenType.CLASS):
                return self.class_declaration()
            if self.match(TokenType.FN):
                return self.function("function")
            if self.match(TokenType.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expect class name.")

        superclass = None
        if self.match(TokenType.LESS):
            self.consume(TokenType.IDENTIFIER, "Expect superclass name.")
            superclass = syntax.Variable(self.previous())

        self.consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")

        methods = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            methods.append(self.function("method"))

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")
        self.consume_terminator(optional=True)
        return syntax.Class(name, superclass, methods)

    def function(self, kind):
        """kind is "function" or "method", and is only used for error messages."""
        name = self.consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self.consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Cannot have more than {Parser.MAX_ARGS} parameters.")
                params.append(self.consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenType.COMMA):
                    break

        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        return syntax.Function(name, params, self.block())

    def var_declaration(self, terminate=True):
        """If not terminate, the caller consumes the terminator (used by for clauses)."""
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.expression()

        if terminate:
            self.consume_terminator("Expect ';' after variable declaration.")
        return syntax.Var(name, initializer)

    # statements

    def statement(self):
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.LEFT_BRACE):
            return syntax.Block(self.block())
        return self.expression_statement()

    def for_statement(self):
        """Desugars `for (init; cond; incr) body` to `{ init; while (cond) { body; incr; } }`."""
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration(terminate=False)
            self.consume(TokenType.SEMICOLON, "Expect ';' after loop initializer.")
        else:
            initializer = syntax.Expression(self.expression())
            self.consume(TokenType.SEMICOLON, "Expect ';' after loop initializer.")

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = syntax.Block([body, syntax.Expression(increment)])
        if condition is None:
            condition = syntax.Literal(True)
        body = syntax.While(condition, body)
        if initializer is not None:
            body = syntax.Block([initializer, body])

        self.consume_terminator(optional=True)
        return body

    def if_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenType.ELSE):
            else_branch = self.statement()

        self.consume_terminator(optional=True)
        return syntax.If(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume_terminator("Expect ';' after value.")
        return syntax.Print(value)

    def return_statement(self):
        keyword = self.previous()

        value = None
        if not self.check(TokenType.SEMICOLON) and not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            value = self.expression()

        self.consume_terminator("Expect ';' after return value.")
        return syntax.Return(keyword, value)

    def while_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after while condition.")

        body = self.statement()
        self.consume_terminator(optional=True)
        return syntax.While(condition, body)

    def block(self):
        """Parses the statements of a block whose "{" was just consumed."""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        self.consume_terminator(optional=True)
        return statements

    def expression_statement(self):
        expr = self.expression()
        self.consume_terminator("Expect ';' after expression.")
        return syntax.Expression(expr)

    # expressions

    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.logic_or()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, syntax.Variable):
                return syntax.Assign(expr.name, value)
            elif isinstance(expr, syntax.Get):
                return syntax.Set(expr.object, expr.name, value)

            raise self.error(equals, "Invalid assignment target.")

        return expr

    def logic_or(self):
        expr = self.logic_and()
        while self.match(TokenType.OR):
            operator = self.previous()
            expr = syntax.Logical(expr, operator, self.logic_and())
        return expr

    def logic_and(self):
        expr = self.equality()
        while self.match(TokenType.AND):
            operator = self.previous()
            expr = syntax.Logical(expr, operator, self.equality())
        return expr

    def equality(self):
        return self.binary(self.comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def comparison(self):
        return self.binary(self.term, TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL)

    def term(self):
        return self.binary(self.factor, TokenType.MINUS, TokenType.PLUS)

    def factor(self):
        return self.binary(self.unary, TokenType.SLASH, TokenType.STAR)

    def binary(self, operand, *operators):
        """Parses a left-associative chain of operand separated by any of operators."""
        expr = operand()
        while self.match(*operators):
            operator = self.previous()
            expr = syntax.Binary(expr, operator, operand())
        return expr

    def unary(self):
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            return syntax.Unary(operator, self.unary())
        return self.call()

    def call(self):
        """Parses calls and property accesses chained in any order, e.g. `a.b(1)(2).c`."""
        expr = self.primary()

        while True:
            if self.match(TokenType.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TokenType.DOT):
                name = self.consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = syntax.Get(expr, name)
            else:
                return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Cannot have more than {Parser.MAX_ARGS} arguments.")
                arguments.append(self.expression())
                if not self.match(TokenType.COMMA):
                    break

        paren = self.consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return syntax.Call(callee, paren, arguments)

    def primary(self):
        if self.match(TokenType.FALSE):
            return syntax.Literal(False)
        if self.match(TokenType.TRUE):
            return syntax.Literal(True)
        if self.match(TokenType.NIL):
            return syntax.Literal(None)

        if self.match(TokenType.NUMBER, TokenType.STRING):
            return syntax.Literal(self.previous().literal)

        if self.match(TokenType.SUPER):
            keyword = self.previous()
            self.consume(TokenType.DOT, "Expect '.' after 'super'.")
            method = self.consume(TokenType.IDENTIFIER, "Expect superclass method name.")
            return syntax.Super(keyword, method)

        if self.match(TokenType.THIS):
            return syntax.This(self.previous())

        if self.match(TokenType.IDENTIFIER):
            return syntax.Variable(self.previous())

        if self.match(TokenType.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return syntax.Grouping(expr)

        raise self.error(self.peek(), "Expect expression.")

    # helpers

    def consume_terminator(self, message="", optional=False):
        """Consumes a run of ";" as one terminator. A terminator is never needed before "}" or at end of input, and
        is never needed after compound statements (optional).
        """
        if self.check(TokenType.RIGHT_BRACE) or self.is_at_end():
            return

        if self.match(TokenType.SEMICOLON):
            while self.match(TokenType.SEMICOLON):
                pass
        elif not optional:
            raise self.error(self.peek(), message)

    def synchronize(self):
        """Discards tokens until a probable statement boundary."""
        self.advance()

        while not self.is_at_end():
            if self.previous().type is TokenType.SEMICOLON:
                return
            if self.peek().type in Parser.BOUNDARIES:
                return
            self.advance()

    def error(self, token, message):
        """Records a syntax error at token. Returns it so that callers that cannot continue may raise it."""
        return self.diagnostics.token_error(token, message, ParseError)

    def consume(self, token_type, message):
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), message)

    def match(self, *token_types):
        for token_type in token_types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def check(self, token_type):
        if self.is_at_end():
            return False
        return self.peek().type is token_type

    def advance(self):
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self):
        return self.peek().type is TokenType.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]
