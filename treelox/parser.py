"""Recursive-descent parser for Lox.

Each grammar rule is one `parse_*` method and the parser never looks more
than one token ahead:

    program     -> declaration* EOF
    declaration -> varDecl | funDecl | statement
    statement   -> exprStmt | printStmt | block | ifStmt | whileStmt
                 | forStmt | returnStmt
    expression  -> assignment
    assignment  -> IDENT "=" assignment | logic_or
    logic_or    -> logic_and ( "or" logic_and )*
    logic_and   -> equality ( "and" equality )*
    equality    -> comparison ( ( "!=" | "==" ) comparison )*
    comparison  -> term ( ( ">" | ">=" | "<" | "<=" ) term )*
    term        -> factor ( ( "-" | "+" ) factor )*
    factor      -> unary ( ( "/" | "*" ) unary )*
    unary       -> ( "!" | "-" ) unary | call
    call        -> primary ( "(" arguments? ")" )*
    primary     -> NUMBER | STRING | "true" | "false" | "nil"
                 | "(" expression ")" | IDENT

Syntax errors are reported into a `Diagnostics` collector. Most of them
abandon the current declaration: the parser skips ahead to the next
statement boundary and carries on, so a single parse can report several
independent errors. A top-level declaration nested deeper than the host
stack allows is reported as `Too much nesting.` at its first token.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

from .ast import (
    Assign, Binary, Block, Call, Expr, Expression, Function, Grouping, If,
    Literal, Logical, Print, Return, Stmt, Unary, Var, Variable, While,
)
from .errors import Diagnostics
from .tokens import Token, TokenType

MAX_ARGUMENTS = 255

# Tokens that begin a statement; synchronization stops in front of them.
STATEMENT_STARTS = frozenset({
    TokenType.CLASS,
    TokenType.FUN,
    TokenType.VAR,
    TokenType.FOR,
    TokenType.IF,
    TokenType.WHILE,
    TokenType.PRINT,
    TokenType.RETURN,
})

LITERAL_TOKENS = frozenset({
    TokenType.NUMBER,
    TokenType.STRING,
    TokenType.TRUE,
    TokenType.FALSE,
    TokenType.NIL,
})


class ParseError(Exception):
    """Unwinds the parser to the enclosing declaration after a syntax error."""
    pass


class Parser:
    def __init__(self, tokens: Sequence[Token], diagnostics: Optional[Diagnostics] = None):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            line = self.tokens[-1].line if self.tokens else 1
            self.tokens.append(Token(TokenType.EOF, '', None, line))
        self.pos = 0
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.function_depth = 0

    # Token stream helpers

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def is_at_end(self) -> bool:
        return self.peek().type == TokenType.EOF

    def advance(self) -> Token:
        token = self.peek()
        if not self.is_at_end():
            self.pos += 1
        return token

    def match(self, expected: Union[TokenType, Sequence[TokenType]]) -> bool:
        """Return whether the next token has one of the expected types."""
        if isinstance(expected, TokenType):
            return self.peek().type == expected
        return self.peek().type in expected

    def consume(self, expected: TokenType, message: str) -> Token:
        if self.match(expected):
            return self.advance()
        raise self.error(self.peek(), message)

    def error(self, token: Token, message: str) -> ParseError:
        self.diagnostics.error_at(token, message)
        return ParseError(message)

    def synchronize(self) -> None:
        """Discard tokens until the start of the next statement."""
        self.advance()
        while not self.is_at_end():
            if self.previous().type == TokenType.SEMICOLON:
                return
            if self.peek().type in STATEMENT_STARTS:
                return
            self.advance()

    # Declarations and statements

    def parse_program(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.is_at_end():
            start = self.peek()
            try:
                stmt = self.parse_declaration()
            except RecursionError:
                # reported against the declaration so the location is stable
                self.error(start, 'Too much nesting.')
                self.synchronize()
                continue
            if stmt is not None:
                statements.append(stmt)
        return statements

    def parse_declaration(self) -> Optional[Stmt]:
        try:
            if self.match(TokenType.VAR):
                self.advance()
                return self.parse_var_decl()
            if self.match(TokenType.FUN):
                self.advance()
                return self.parse_func_decl()
            return self.parse_statement()
        except ParseError:
            self.synchronize()
            return None

    def parse_var_decl(self) -> Var:
        name = self.consume(TokenType.IDENTIFIER, 'Expect variable name.')
        initializer: Optional[Expr] = None
        if self.match(TokenType.EQUAL):
            self.advance()
            initializer = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return Var(name, initializer)

    def parse_func_decl(self) -> Function:
        name = self.consume(TokenType.IDENTIFIER, 'Expect function name.')
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after function name.")
        params = self.parse_param_list()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(TokenType.LEFT_BRACE, "Expect '{' before function body.")
        self.function_depth += 1
        try:
            body = self.parse_block_statements()
        finally:
            self.function_depth -= 1
        return Function(name, params, Block(body))

    def parse_param_list(self) -> List[Token]:
        params: List[Token] = []
        if self.match(TokenType.RIGHT_PAREN):
            return params
        while True:
            if len(params) >= MAX_ARGUMENTS:
                self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
            params.append(self.consume(TokenType.IDENTIFIER, 'Expect parameter name.'))
            if not self.match(TokenType.COMMA):
                break
            self.advance()
        return params

    def parse_statement(self) -> Stmt:
        token = self.peek()
        if token.type == TokenType.PRINT:
            self.advance()
            return self.parse_print_stmt()
        if token.type == TokenType.LEFT_BRACE:
            self.advance()
            return Block(self.parse_block_statements())
        if token.type == TokenType.IF:
            self.advance()
            return self.parse_if_stmt()
        if token.type == TokenType.WHILE:
            self.advance()
            return self.parse_while_stmt()
        if token.type == TokenType.FOR:
            self.advance()
            return self.parse_for_stmt()
        if token.type == TokenType.RETURN:
            return self.parse_return_stmt(self.advance())
        return self.parse_expr_stmt()

    def parse_print_stmt(self) -> Print:
        value = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return Print(value)

    def parse_expr_stmt(self) -> Expression:
        expr = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return Expression(expr)

    def parse_block_statements(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.match(TokenType.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def parse_if_stmt(self) -> If:
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.parse_expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")
        then_branch = self.parse_statement()
        else_branch: Optional[Stmt] = None
        if self.match(TokenType.ELSE):
            self.advance()
            else_branch = self.parse_statement()
        return If(condition, then_branch, else_branch)

    def parse_while_stmt(self) -> While:
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.parse_expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        body = self.parse_statement()
        return While(condition, body)

    def parse_for_stmt(self) -> Block:
        keyword = self.previous()
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")
        initializer: Optional[Stmt]
        if self.match(TokenType.SEMICOLON):
            self.advance()
            initializer = None
        elif self.match(TokenType.VAR):
            self.advance()
            initializer = self.parse_var_decl()
        else:
            initializer = self.parse_expr_stmt()

        condition: Optional[Expr] = None
        if not self.match(TokenType.SEMICOLON):
            condition = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment: Optional[Expr] = None
        if not self.match(TokenType.RIGHT_PAREN):
            increment = self.parse_expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")
        body = self.parse_statement()

        # for (init; cond; incr) body  =>  { init; while (cond) { body; incr; } }
        loop_body: List[Stmt] = [body]
        if increment is not None:
            loop_body.append(Expression(increment))
        if condition is None:
            condition = Literal(Token(TokenType.TRUE, 'true', None, keyword.line))
        outer: List[Stmt] = []
        if initializer is not None:
            outer.append(initializer)
        outer.append(While(condition, Block(loop_body)))
        return Block(outer)

    def parse_return_stmt(self, keyword: Token) -> Return:
        if self.function_depth == 0:
            self.error(keyword, "Can't return from top-level code.")
        value: Optional[Expr] = None
        if not self.match(TokenType.SEMICOLON):
            value = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return Return(keyword, value)

    # Expressions

    def parse_expression(self) -> Expr:
        return self.parse_assignment()

    def parse_assignment(self) -> Expr:
        expr = self.parse_logic_or()
        if self.match(TokenType.EQUAL):
            equals = self.advance()
            value = self.parse_assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            # reported without unwinding; the parse continues from here
            self.error(equals, 'Invalid assignment target.')
        return expr

    def parse_logic_or(self) -> Expr:
        expr = self.parse_logic_and()
        while self.match(TokenType.OR):
            operator = self.advance()
            right = self.parse_logic_and()
            expr = Logical(expr, operator, right)
        return expr

    def parse_logic_and(self) -> Expr:
        expr = self.parse_equality()
        while self.match(TokenType.AND):
            operator = self.advance()
            right = self.parse_equality()
            expr = Logical(expr, operator, right)
        return expr

    def parse_equality(self) -> Expr:
        expr = self.parse_comparison()
        while self.match((TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)):
            operator = self.advance()
            right = self.parse_comparison()
            expr = Binary(expr, operator, right)
        return expr

    def parse_comparison(self) -> Expr:
        expr = self.parse_term()
        while self.match((TokenType.GREATER, TokenType.GREATER_EQUAL,
                          TokenType.LESS, TokenType.LESS_EQUAL)):
            operator = self.advance()
            right = self.parse_term()
            expr = Binary(expr, operator, right)
        return expr

    def parse_term(self) -> Expr:
        expr = self.parse_factor()
        while self.match((TokenType.MINUS, TokenType.PLUS)):
            operator = self.advance()
            right = self.parse_factor()
            expr = Binary(expr, operator, right)
        return expr

    def parse_factor(self) -> Expr:
        expr = self.parse_unary()
        while self.match((TokenType.SLASH, TokenType.STAR)):
            operator = self.advance()
            right = self.parse_unary()
            expr = Binary(expr, operator, right)
        return expr

    def parse_unary(self) -> Expr:
        if self.match((TokenType.BANG, TokenType.MINUS)):
            operator = self.advance()
            right = self.parse_unary()
            return Unary(operator, right)
        return self.parse_call()

    def parse_call(self) -> Expr:
        expr = self.parse_primary()
        while self.match(TokenType.LEFT_PAREN):
            self.advance()
            expr = self.finish_call(expr)
        return expr

    def finish_call(self, callee: Expr) -> Call:
        arguments: List[Expr] = []
        if not self.match(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self.parse_expression())
                if not self.match(TokenType.COMMA):
                    break
                self.advance()
        paren = self.consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, arguments)

    def parse_primary(self) -> Expr:
        token = self.peek()
        if token.type in LITERAL_TOKENS:
            return Literal(self.advance())
        if token.type == TokenType.IDENTIFIER:
            return Variable(self.advance())
        if token.type == TokenType.LEFT_PAREN:
            self.advance()
            expr = self.parse_expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)
        raise self.error(token, 'Expect expression.')


def parse(tokens: Sequence[Token], diagnostics: Optional[Diagnostics] = None) -> Tuple[List[Stmt], Diagnostics]:
    """Parse a token sequence into a list of statements.

    The statements are only meaningful when the returned diagnostics hold
    no errors.
    """
    parser = Parser(tokens, diagnostics)
    statements = parser.parse_program()
    return statements, parser.diagnostics
