# treelox package
# A tree-walking interpreter for the Lox scripting language.
from .lexer import scan
from .parser import parse
from .environment import Environment
from .errors import LoxError, LoxRuntimeError, ScanFailed, ParseFailed, RuntimeFailed
from .interpreter import Interpreter, interpret, parse_program, run_program

__all__ = [
    'scan',
    'parse',
    'interpret',
    'parse_program',
    'run_program',
    'Environment',
    'Interpreter',
    'LoxError',
    'LoxRuntimeError',
    'ScanFailed',
    'ParseFailed',
    'RuntimeFailed',
]
