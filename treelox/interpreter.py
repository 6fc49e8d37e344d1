"""Tree-walking interpreter for Lox.

The interpreter walks the statement list produced by the parser. Expression
evaluation returns a Lox value or raises `LoxRuntimeError`. Statement
execution returns None for normal completion or a `ReturnSignal` carrying
the value of a `return`; blocks, conditionals and loops pass the signal
straight up so that the enclosing function call can pick it up. No host
exception is used for `return`.

`run_program` chains the whole pipeline for a source string and reports
failures as `ScanFailed`, `ParseFailed` or `RuntimeFailed`. It runs on a
deep-stack worker thread; exhausting even that stack is reported as the
runtime error `Stack overflow`.
"""

from __future__ import annotations

import math
import sys
from dataclasses import fields
from typing import Any, Callable, List, Optional, TextIO

from .ast import (
    Assign, Binary, Block, Call, Expr, Expression, Function, Grouping, If,
    Literal, Logical, Node, Print, Return, Stmt, Unary, Var, Variable, While,
)
from .deepstack import call_with_deep_stack
from .environment import Environment
from .errors import (
    LoxRuntimeError, ParseFailed, ReturnSignal, RuntimeFailed, ScanFailed,
    UndefinedVariable,
)
from .functions import NativeFunction, UserFunction
from .lexer import scan
from .parser import parse
from .std import populate_globals
from .tokens import Token, TokenType
from .types import NIL, is_number, is_truthy, to_string, type_name, values_equal


def ieee_divide(a: float, b: float) -> float:
    """Divide with IEEE-754 results for a zero divisor instead of raising."""
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def leading_token(node: Node) -> Optional[Token]:
    """Return the leftmost token under `node`, walking the tree without recursion."""
    pending: List[Any] = [node]
    while pending:
        item = pending.pop()
        if isinstance(item, Token):
            return item
        if isinstance(item, list):
            pending.extend(reversed(item))
        elif isinstance(item, Node):
            pending.extend(reversed([getattr(item, f.name) for f in fields(item)]))
    return None


class Interpreter:
    """Executes Lox statements against one environment."""
    def __init__(self, environment: Optional[Environment] = None, debug_level: int = 0,
                 debug_file: Optional[str] = None, stdout: Optional[TextIO] = None):
        self.environment = environment if environment is not None else Environment()
        self.stdout = stdout
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 and debug_file else None
        populate_globals(self.environment)

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def interpret(self, statements: List[Stmt]) -> None:
        """Run statements in order, stopping at the first runtime error."""
        self.debug(f"interpret {len(statements)} statements")
        for stmt in statements:
            try:
                signal = self.execute(stmt)
            except RecursionError:
                # deep nesting outside any call; calls map their own overflow
                token = leading_token(stmt) or Token(TokenType.EOF, '', None, 0)
                raise LoxRuntimeError(token, 'Stack overflow') from None
            if isinstance(signal, ReturnSignal):
                # only reachable for ASTs that did not come from the parser
                break
        self.debug('interpret finished')

    def execute_body(self, statements: List[Stmt], environment: Environment) -> Optional[ReturnSignal]:
        """Run a function body in its call environment, then restore the caller's."""
        previous = self.environment
        self.environment = environment
        try:
            return self.execute_block(statements)
        finally:
            self.environment = previous

    def execute_block(self, statements: List[Stmt]) -> Optional[ReturnSignal]:
        for stmt in statements:
            signal = self.execute(stmt)
            if isinstance(signal, ReturnSignal):
                return signal
        return None

    def execute(self, node: Stmt) -> Optional[ReturnSignal]:
        if isinstance(node, Expression):
            self.evaluate(node.expression)
            return None
        if isinstance(node, Print):
            value = self.evaluate(node.expression)
            print(to_string(value), file=self.stdout)
            return None
        if isinstance(node, Var):
            value = self.evaluate(node.initializer) if node.initializer is not None else NIL
            self.environment.define(node.name.lexeme, value)
            if self.debug_level >= 2:
                self.debug(f"declare {node.name.lexeme}: {type_name(value)} = {to_string(value)}")
            return None
        if isinstance(node, Block):
            with self.environment.scope():
                return self.execute_block(node.statements)
        if isinstance(node, If):
            cond = self.evaluate(node.condition)
            truthy = is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {to_string(cond)} -> {truthy}")
            if truthy:
                return self.execute(node.then_branch)
            if node.else_branch is not None:
                return self.execute(node.else_branch)
            return None
        if isinstance(node, While):
            while is_truthy(self.evaluate(node.condition)):
                signal = self.execute(node.body)
                if isinstance(signal, ReturnSignal):
                    return signal
            return None
        if isinstance(node, Function):
            func_value = UserFunction(node, self.environment.capture())
            self.environment.define(node.name.lexeme, func_value)
            if self.debug_level >= 2:
                self.debug(f"define function {node.name.lexeme}/{func_value.arity()}")
            return None
        if isinstance(node, Return):
            value = self.evaluate(node.value) if node.value is not None else NIL
            return ReturnSignal(value)
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def evaluate(self, node: Expr) -> Any:
        if isinstance(node, Literal):
            return self.literal_value(node.token)
        if isinstance(node, Grouping):
            return self.evaluate(node.expression)
        if isinstance(node, Variable):
            try:
                return self.environment.get(node.name.lexeme)
            except UndefinedVariable as e:
                raise LoxRuntimeError(node.name, str(e)) from None
        if isinstance(node, Assign):
            value = self.evaluate(node.value)
            try:
                self.environment.assign(node.name.lexeme, value)
            except UndefinedVariable as e:
                raise LoxRuntimeError(node.name, str(e)) from None
            return value
        if isinstance(node, Unary):
            operand = self.evaluate(node.right)
            if node.operator.type == TokenType.BANG:
                return not is_truthy(operand)
            if node.operator.type == TokenType.MINUS:
                if not is_number(operand):
                    raise LoxRuntimeError(node.operator, 'Operand must be a number')
                return -operand
            raise LoxRuntimeError(node.operator, f"Unsupported unary operator {node.operator.lexeme}")
        if isinstance(node, Logical):
            left = self.evaluate(node.left)
            # short-circuit: the deciding operand itself is the result
            if node.operator.type == TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(node.right)
        if isinstance(node, Binary):
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            return self.apply_binary_op(node.operator, left, right)
        if isinstance(node, Call):
            func = self.evaluate(node.callee)
            args = [self.evaluate(arg) for arg in node.arguments]
            return self.call_function(func, args, node.paren)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def literal_value(self, token: Token) -> Any:
        if token.type == TokenType.NUMBER or token.type == TokenType.STRING:
            return token.literal
        if token.type == TokenType.TRUE:
            return True
        if token.type == TokenType.FALSE:
            return False
        if token.type == TokenType.NIL:
            return NIL
        raise LoxRuntimeError(token, f"Unexpected literal '{token.lexeme}'")

    def call_function(self, func: Any, args: List[Any], paren: Token) -> Any:
        if not isinstance(func, (UserFunction, NativeFunction)):
            raise LoxRuntimeError(paren, 'Can only call functions and classes')
        if len(args) != func.arity():
            raise LoxRuntimeError(paren, f"Expected {func.arity()} arguments but got {len(args)}")
        if self.debug_level >= 3:
            self.debug(f"call {func!r} with {len(args)} arguments")
        try:
            return func.call(self, args)
        except RecursionError:
            raise LoxRuntimeError(paren, 'Stack overflow') from None

    def apply_binary_op(self, operator: Token, a: Any, b: Any) -> Any:
        op = operator.type
        if op == TokenType.EQUAL_EQUAL:
            return values_equal(a, b)
        if op == TokenType.BANG_EQUAL:
            return not values_equal(a, b)
        if op == TokenType.PLUS:
            if is_number(a) and is_number(b):
                return a + b
            if isinstance(a, str) and isinstance(b, str):
                return a + b
            raise LoxRuntimeError(operator, 'Operands must be two numbers or two strings')
        # everything left is numeric only
        if not (is_number(a) and is_number(b)):
            raise LoxRuntimeError(operator, 'Operands must be numbers')
        if op == TokenType.MINUS:
            return a - b
        if op == TokenType.STAR:
            return a * b
        if op == TokenType.SLASH:
            return ieee_divide(a, b)
        if op == TokenType.LESS:
            return a < b
        if op == TokenType.LESS_EQUAL:
            return a <= b
        if op == TokenType.GREATER:
            return a > b
        if op == TokenType.GREATER_EQUAL:
            return a >= b
        raise LoxRuntimeError(operator, f"Unknown operator {operator.lexeme}")


def interpret(statements: List[Stmt], environment: Optional[Environment] = None,
              stdout: Optional[TextIO] = None) -> None:
    """Run statements in `environment`, raising `LoxRuntimeError` on failure."""
    Interpreter(environment, stdout=stdout).interpret(statements)


def parse_program(source: str, trace: Optional[Callable[[str], None]] = None) -> List[Stmt]:
    """Scan and parse source text, raising `ScanFailed` or `ParseFailed`.

    `trace`, when given, receives one line per stage with its output size.
    """
    tokens, scan_diagnostics = scan(source)
    if trace is not None:
        trace(f"scanned {len(tokens)} tokens")
    if scan_diagnostics.fatal:
        raise ScanFailed(scan_diagnostics)
    statements, parse_diagnostics = parse(tokens)
    if trace is not None:
        trace(f"parsed {len(statements)} statements")
    if scan_diagnostics.has_errors:
        scan_diagnostics.extend(parse_diagnostics)
        raise ScanFailed(scan_diagnostics)
    if parse_diagnostics.has_errors:
        raise ParseFailed(parse_diagnostics)
    return statements


def run_program(source: str, interpreter: Optional[Interpreter] = None) -> Interpreter:
    """Scan, parse and run a Lox program.

    Pass an existing interpreter to keep global state between runs. The
    interpreter is returned so callers can inspect its environment.
    """
    if interpreter is None:
        interpreter = Interpreter()
    return call_with_deep_stack(run_source, source, interpreter)


def run_source(source: str, interpreter: Interpreter) -> Interpreter:
    statements = parse_program(source, trace=interpreter.debug)
    try:
        interpreter.interpret(statements)
    except LoxRuntimeError as e:
        raise RuntimeFailed(e) from e
    return interpreter
