# Sepia language package
# This package provides a lexer, Pratt parser and tree-walking interpreter for the Sepia language.
from .interpreter import lex, parse, evaluate, run_program, run_file, Interpreter
from .environment import Environment
from .errors import SepiaError, ParseFailure

__all__ = [
    'lex',
    'parse',
    'evaluate',
    'run_program',
    'run_file',
    'Interpreter',
    'Environment',
    'SepiaError',
    'ParseFailure',
]
