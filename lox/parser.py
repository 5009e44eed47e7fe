"""Lox recursive-descent parser producing an AST."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from lox.ast import (
    AssignExpr,
    BinaryExpr,
    BlockStmt,
    CallExpr,
    ClassStmt,
    Expr,
    ExpressionStmt,
    FunctionStmt,
    GetExpr,
    GroupingExpr,
    IfStmt,
    LiteralExpr,
    LogicalExpr,
    PrintStmt,
    ReturnStmt,
    SetExpr,
    Stmt,
    SuperExpr,
    ThisExpr,
    UnaryExpr,
    VarStmt,
    VariableExpr,
    WhileStmt,
)
from lox.errors import ParseError, where_for
from lox.tokens import STATEMENT_STARTS, Token, TokenType


MAX_ARGUMENTS = 255


@dataclass
class Parser:
    """Recursive-descent parser for Lox.

    Precedence, lowest to highest: assignment, or, and, equality, comparison,
    term, factor, unary, call, primary. A syntax error inside a declaration
    is recorded and the parser skips ahead to the next statement boundary.
    """

    tokens: list[Token]
    errors: list[ParseError] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.pos = 0

    def parse(self) -> list[Stmt]:
        """Parse the full token stream into a list of statements."""
        statements: list[Stmt] = []
        while not self._is_at_end():
            try:
                stmt = self._declaration()
            except RecursionError:
                # The host stack is gone mid-expression; there is no sound point to resume from.
                self._report(self._peek(), "Too much nesting.", "PAR005")
                break
            if stmt is not None:
                statements.append(stmt)
        return statements

    # -- declarations ---------------------------------------------------

    def _declaration(self) -> Stmt | None:
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

    def _class_declaration(self) -> ClassStmt:
        name = self._consume(TokenType.IDENTIFIER, "Expect class name.")

        superclass: VariableExpr | None = None
        if self._match(TokenType.LESS):
            self._consume(TokenType.IDENTIFIER, "Expect superclass name.")
            superclass = VariableExpr(name=self._previous())

        self._consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")
        methods: list[FunctionStmt] = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            methods.append(self._function("method"))
        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")

        return ClassStmt(name=name, superclass=superclass, methods=tuple(methods))

    def _function(self, kind: str) -> FunctionStmt:
        name = self._consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self._consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params: list[Token] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self._report(self._peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.", "PAR004")
                params.append(self._consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self._match(TokenType.COMMA):
                    break
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self._consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self._block()
        return FunctionStmt(name=name, params=tuple(params), body=tuple(body))

    def _var_declaration(self) -> VarStmt:
        name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")
        initializer: Expr | None = None
        if self._match(TokenType.EQUAL):
            initializer = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return VarStmt(name=name, initializer=initializer)

    # -- statements -----------------------------------------------------

    def _statement(self) -> Stmt:
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
            return BlockStmt(statements=tuple(self._block()))
        return self._expression_statement()

    def _for_statement(self) -> Stmt:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        initializer: Stmt | None
        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        condition: Expr | None = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment: Expr | None = None
        if not self._check(TokenType.RIGHT_PAREN):
            increment = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._statement()

        # for (init; cond; incr) body  =>  { init; while (cond) { body; incr; } }
        if increment is not None:
            body = BlockStmt(statements=(body, ExpressionStmt(expression=increment)))
        if condition is None:
            condition = LiteralExpr(value=True)
        loop: Stmt = WhileStmt(condition=condition, body=body)
        if initializer is not None:
            loop = BlockStmt(statements=(initializer, loop))
        return loop

    def _if_statement(self) -> IfStmt:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self._statement()
        else_branch: Stmt | None = None
        if self._match(TokenType.ELSE):
            else_branch = self._statement()
        return IfStmt(condition=condition, then_branch=then_branch, else_branch=else_branch)

    def _print_statement(self) -> PrintStmt:
        value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return PrintStmt(expression=value)

    def _return_statement(self) -> ReturnStmt:
        keyword = self._previous()
        value: Expr | None = None
        if not self._check(TokenType.SEMICOLON):
            value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ReturnStmt(keyword=keyword, value=value)

    def _while_statement(self) -> WhileStmt:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return WhileStmt(condition=condition, body=self._statement())

    def _expression_statement(self) -> ExpressionStmt:
        expr = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExpressionStmt(expression=expr)

    def _block(self) -> list[Stmt]:
        statements: list[Stmt] = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    # -- expressions ----------------------------------------------------

    def _expression(self) -> Expr:
        return self._assignment()

    def _assignment(self) -> Expr:
        expr = self._or()

        if self._match(TokenType.EQUAL):
            equals = self._previous()
            value = self._assignment()

            if isinstance(expr, VariableExpr):
                return AssignExpr(name=expr.name, value=value)
            if isinstance(expr, GetExpr):
                return SetExpr(obj=expr.obj, name=expr.name, value=value)

            # Reported but not raised: the rest of the statement still parses.
            self._report(equals, "Invalid assignment target.", "PAR003")

        return expr

    def _or(self) -> Expr:
        expr = self._and()
        while self._match(TokenType.OR):
            operator = self._previous()
            expr = LogicalExpr(left=expr, operator=operator, right=self._and())
        return expr

    def _and(self) -> Expr:
        expr = self._equality()
        while self._match(TokenType.AND):
            operator = self._previous()
            expr = LogicalExpr(left=expr, operator=operator, right=self._equality())
        return expr

    def _equality(self) -> Expr:
        return self._binary_level(self._comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def _comparison(self) -> Expr:
        return self._binary_level(
            self._term,
            TokenType.GREATER,
            TokenType.GREATER_EQUAL,
            TokenType.LESS,
            TokenType.LESS_EQUAL,
        )

    def _term(self) -> Expr:
        return self._binary_level(self._factor, TokenType.MINUS, TokenType.PLUS)

    def _factor(self) -> Expr:
        return self._binary_level(self._unary, TokenType.SLASH, TokenType.STAR)

    def _binary_level(self, operand: Callable[[], Expr], *operators: TokenType) -> Expr:
        expr = operand()
        while self._match(*operators):
            operator = self._previous()
            expr = BinaryExpr(left=expr, operator=operator, right=operand())
        return expr

    def _unary(self) -> Expr:
        if self._match(TokenType.BANG, TokenType.MINUS):
            operator = self._previous()
            return UnaryExpr(operator=operator, right=self._unary())
        return self._call()

    def _call(self) -> Expr:
        expr = self._primary()
        while True:
            if self._match(TokenType.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self._match(TokenType.DOT):
                name = self._consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = GetExpr(obj=expr, name=name)
            else:
                break
        return expr

    def _finish_call(self, callee: Expr) -> CallExpr:
        arguments: list[Expr] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self._report(self._peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.", "PAR004")
                arguments.append(self._expression())
                if not self._match(TokenType.COMMA):
                    break
        paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return CallExpr(callee=callee, paren=paren, arguments=tuple(arguments))

    def _primary(self) -> Expr:
        if self._match(TokenType.FALSE):
            return LiteralExpr(value=False)
        if self._match(TokenType.TRUE):
            return LiteralExpr(value=True)
        if self._match(TokenType.NIL):
            return LiteralExpr(value=None)

        if self._match(TokenType.NUMBER, TokenType.STRING):
            return LiteralExpr(value=self._previous().literal)

        if self._match(TokenType.SUPER):
            keyword = self._previous()
            self._consume(TokenType.DOT, "Expect '.' after 'super'.")
            method = self._consume(TokenType.IDENTIFIER, "Expect superclass method name.")
            return SuperExpr(keyword=keyword, method=method)

        if self._match(TokenType.THIS):
            return ThisExpr(keyword=self._previous())

        if self._match(TokenType.IDENTIFIER):
            return VariableExpr(name=self._previous())

        if self._match(TokenType.LEFT_PAREN):
            expr = self._expression()
            self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return GroupingExpr(expression=expr)

        raise self._report(self._peek(), "Expect expression.", "PAR001")

    # -- token helpers --------------------------------------------------

    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._check(token_type):
            return self._advance()
        raise self._report(self._peek(), message, "PAR002")

    def _report(self, token: Token, message: str, code: str) -> ParseError:
        err = ParseError(code=code, message=message, line=token.line, where=where_for(token))
        self.errors.append(err)
        return err

    def _match(self, *token_types: TokenType) -> bool:
        for token_type in token_types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    def _check(self, token_type: TokenType) -> bool:
        if self._is_at_end():
            return False
        return self._peek().token_type == token_type

    def _advance(self) -> Token:
        if not self._is_at_end():
            self.pos += 1
        return self._previous()

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def _is_at_end(self) -> bool:
        return self._peek().token_type == TokenType.EOF

    def _synchronize(self) -> None:
        self._advance()
        while not self._is_at_end():
            if self._previous().token_type == TokenType.SEMICOLON:
                return
            if self._peek().token_type in STATEMENT_STARTS:
                return
            self._advance()
