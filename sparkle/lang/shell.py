"""Handles interactive/command-line mode for the Sparkle interpreter. Uses cmd as backend."""

import cmd

from sparkle.core.scanner import Scanner
from sparkle.core.tokens import TokenType
from sparkle.lang.error import Diagnostics


class Shell(cmd.Cmd):
    """Sparkle interpreter shell."""
    intro = "Sparkle interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    @staticmethod
    def is_open(source):
        """Whether or not source has more '{' than '}' tokens, in which case the unit continues on the next line."""
        balance = 0
        for token in Scanner(source, Diagnostics()).scan_tokens():
            if token.type is TokenType.LEFT_BRACE:
                balance += 1
            elif token.type is TokenType.RIGHT_BRACE:
                balance -= 1
        return balance > 0

    def default(self, line):
        """Executes arbitrary Sparkle code."""
        line = self._tmp_line + line

        if Shell.is_open(line):
            self._tmp_line = line + "\n"
            self.prompt = self.secondary_prompt
            return

        self._tmp_line = ""
        self.prompt = self._tmp_prompt

        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.sess.run(line, echo=True)

    def onecmd(self, line):
        """Inside a continuation every line is code, even one that looks like a shell command."""
        if self._tmp_line:
            return self.default(line)
        return super().onecmd(line)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro. With an argument, e.g. `help(x);`, the line is code."""
        if arg:
            return self.default(f"help {arg}")

        print("Welcome to the Sparkle interpreter!\n\n"
              "Sparkle is a small dynamically-typed language with first-class functions, closures and classes.\n"
              "Each line is run as soon as it is complete; a line with an unclosed '{' continues on the next.\n\n"
              "Try it out by typing 'var greeting = \"hello\";', then 'greeting' to see its value, or\n"
              "'fn add(a, b) { return a + b; }' followed by 'print add(1, 2);'. Type 'exit' to quit.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        if arg:
            return self.default(f"EOF {arg}")

        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter. With an argument, e.g. `exit = exit + 1;`, the line is code."""
        if arg:
            return self.default(f"exit {arg}")
        return True
