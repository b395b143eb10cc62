"""Session control for the Sparkle language. Runs source units (a whole file, or one shell line) through the pipeline:

    1. Scanner: source text to tokens
    2. Parser: tokens to statements
    3. Resolver: statements to a table of variable distances
    4. Interpreter: executes the statements

Steps 1-3 report their errors as a batch, and nothing is executed if there was any. A runtime error stops the unit
after whatever side effects already happened.
"""

import sys
from enum import Enum

from sparkle.core.interpreter import Interpreter
from sparkle.core.parser import Parser
from sparkle.core.resolver import Resolver
from sparkle.core.scanner import Scanner
from sparkle.lang.error import Diagnostics, SparkleError, SparkleRuntimeError


class Outcome(Enum):
    OK = 0
    STATIC_ERROR = SparkleError.EXIT_CODE
    RUNTIME_ERROR = SparkleRuntimeError.EXIT_CODE


class Session:
    """Governs a Sparkle session. The interpreter (and so every global) persists across units."""

    def __init__(self, error_handler, out=None):
        self.error_handler = error_handler
        self.interpreter = Interpreter(out if out is not None else sys.stdout)
        self.diagnostics = Diagnostics()

    def parse(self, source):
        """Scans and parses source. Returns the statements, or None if there were errors (already reported)."""
        self.diagnostics.clear()

        tokens = Scanner(source, self.diagnostics).scan_tokens()
        statements = Parser(tokens, self.diagnostics).parse()

        if self.diagnostics.had_error:
            self.error_handler.report(self.diagnostics)
            return None
        return statements

    def run(self, source, echo=False):
        """Runs one source unit. Returns its Outcome. If echo, a trailing expression statement has its value printed."""
        statements = self.parse(source)
        if statements is None:
            return Outcome.STATIC_ERROR

        locals = Resolver(self.diagnostics, self.interpreter.globals.values).resolve(statements)
        if self.diagnostics.had_error:
            self.error_handler.report(self.diagnostics)
            return Outcome.STATIC_ERROR

        try:
            self.interpreter.interpret(statements, locals, echo)
        except SparkleRuntimeError as error:
            self.error_handler.throw(error)
            return Outcome.RUNTIME_ERROR

        return Outcome.OK

    @staticmethod
    def read(path):
        """Returns the source text of the file at path."""
        try:
            with open(path, "r") as file:
                return file.read()
        except OSError:
            raise SparkleError(None, f"'{path}' could not be opened.")

    def run_file(self, path):
        """Runs the file at path as one unit."""
        return self.run(Session.read(path))
