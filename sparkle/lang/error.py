"""Error handling for the Sparkle language. Only SparkleErrors should be encountered during running: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Lexical, syntax and resolution errors are collected in a Diagnostics object and reported as a batch. Runtime errors are
raised as SparkleRuntimeError and abort the current run.
"""

import sys

from termcolor import colored

from sparkle.core.tokens import TokenType


class SparkleError(Exception):
    """Base class for every error the language itself can report. Formats as `[line N] Error<where>: message`."""
    EXIT_CODE = 65

    def __init__(self, line, message, where=""):
        super().__init__(message)
        self.line = line
        self.message = message
        self.where = where  # "", " at end" or " at 'lexeme'"

    @staticmethod
    def locate(token):
        """Returns the location suffix for token."""
        if token.type is TokenType.EOF:
            return " at end"
        return f" at '{token.lexeme}'"

    @classmethod
    def at(cls, token, message):
        """Builds an error of this type located at token."""
        return cls(token.line, message, cls.locate(token))

    def header(self):
        """Returns the part of the message before the colon. Errors without a line (e.g. unreadable files) omit it."""
        if self.line is None:
            return f"Error{self.where}"
        return f"[line {self.line}] Error{self.where}"

    def __str__(self):
        return f"{self.header()}: {self.message}"


class LexicalError(SparkleError):
    """Bad character, unterminated string or unterminated block comment."""


class ParseError(SparkleError):
    """Grammar violation. Also raised inside the parser to unwind to the nearest statement boundary."""


class ResolveError(SparkleError):
    """Static scope misuse."""


class SparkleRuntimeError(SparkleError):
    """Error raised while interpreting. Fail-fast: the first one aborts the run."""
    EXIT_CODE = 70

    def __init__(self, token, message):
        super().__init__(token.line, message, SparkleError.locate(token))
        self.token = token


class Diagnostics:
    """Collects the errors of one source unit across scanning, parsing and resolving."""

    def __init__(self):
        self.errors = []

    def error(self, line, message, cls=LexicalError):
        """Records an error that has a line but no token. Returns the recorded error."""
        error = cls(line, message)
        self.errors.append(error)
        return error

    def token_error(self, token, message, cls=ParseError):
        """Records an error located at token. Returns the recorded error so the caller may raise it."""
        error = cls.at(token, message)
        self.errors.append(error)
        return error

    @property
    def had_error(self):
        return bool(self.errors)

    def clear(self):
        self.errors = []

    def __iter__(self):
        return iter(self.errors)

    def __len__(self):
        return len(self.errors)


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report Sparkle errors instead."""
    ERROR = "red"
    INTERNAL_EXIT_CODE = 1

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream if stream is not None else sys.stderr

    def _print(self, msg):
        print(msg, file=self.stream)

    def throw(self, error, internal=False):
        """Prints error. If self.fatal, exits with the error's exit code afterwards."""
        error_msg = ""
        if internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        if isinstance(error, SparkleError):
            error_msg += colored(f"{error.header()}: ", ErrorHandler.ERROR, attrs=["bold"])
            error_msg += error.message
            exit_code = error.EXIT_CODE
        else:
            error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + str(error)
            exit_code = ErrorHandler.INTERNAL_EXIT_CODE

        self._print(error_msg)

        if self.fatal:
            sys.exit(exit_code)

    def report(self, diagnostics):
        """Prints a batch of static errors. If self.fatal, exits once the whole batch is printed."""
        fatal, self.fatal = self.fatal, False
        try:
            for error in diagnostics:
                self.throw(error)
        finally:
            self.fatal = fatal

        if self.fatal and diagnostics.had_error:
            sys.exit(SparkleError.EXIT_CODE)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(Exception("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(Exception("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, SparkleError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(Exception(f"unknown error: '{exc_type.__name__}: {exc_val}'"), internal=True)
            do_exit = True

        return not do_exit
