import io
import unittest

from sparkle.lang.error import ErrorHandler
from sparkle.lang.session import Session
from sparkle.lang.shell import Shell


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.shell = Shell(Session(ErrorHandler(fatal=False, stream=self.err), self.out))

    def feed(self, *lines):
        for line in lines:
            self.shell.onecmd(line)
        return self.out.getvalue().splitlines()

    def test_is_open(self):
        cases = {
            "fn f() {": True,
            "class A { m() {": True,
            "fn f() {}": False,
            "print 1;": False,
            "}": False,
            "print \"{\";": False,
            "// {": False,
            "/* { */": False,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, Shell.is_open(case), case)

    def test_expressions_echo(self):
        self.assertEqual(["3", "hi"], self.feed("1 + 2", "\"hi\""))

    def test_state_persists(self):
        self.assertEqual(["10"], self.feed("var x = 5;", "x = x * 2;", "print x;"))

    def test_continuation(self):
        lines = self.feed("fn add(a, b) {", "  return a + b;")
        self.assertEqual([], lines)
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)

        lines = self.feed("}", "add(1, 2)")
        self.assertEqual(["3"], lines)
        self.assertEqual(Shell._tmp_prompt, self.shell.prompt)

    def test_commands_inside_continuation_are_code(self):
        # "help" is a shell command only outside of a continuation
        self.feed("{", "var help = 1;", "print help;", "}")
        self.assertEqual(["1"], self.out.getvalue().splitlines())

    def test_errors_do_not_stop_shell(self):
        lines = self.feed("print 1 / 0;", "print nope;", "var = ;", "print \"still here\";")
        self.assertEqual(["still here"], lines)
        self.assertIn("Divide by zero error.", self.err.getvalue())
        self.assertIn("Undefined variable 'nope'.", self.err.getvalue())

    def test_command_names_as_code(self):
        self.assertFalse(self.shell.onecmd("var exit = 1;"))
        self.assertFalse(self.shell.onecmd("exit = exit + 1;"))
        self.assertEqual(["2"], self.feed("print exit;"))

        lines = self.feed("fn help(x) { return x * 3; }", "help(2)", "var EOF = \"eof\";", "EOF + \"!\"")
        self.assertEqual(["2", "6", "eof!"], lines)

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))
        self.assertFalse(self.shell.emptyline())


if __name__ == '__main__':
    unittest.main()
