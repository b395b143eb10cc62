import io
import unittest

from sparkle.core.interpreter import Interpreter
from sparkle.core.parser import Parser
from sparkle.core.resolver import Resolver
from sparkle.core.scanner import Scanner
from sparkle.lang.error import Diagnostics, SparkleRuntimeError


def run(source, interpreter=None):
    """Runs source, returns its output lines. Raises SparkleRuntimeError on runtime errors."""
    diagnostics = Diagnostics()
    statements = Parser(Scanner(source, diagnostics).scan_tokens(), diagnostics).parse()
    locals = Resolver(diagnostics).resolve(statements)
    assert not diagnostics.had_error, [str(error) for error in diagnostics]

    if interpreter is None:
        interpreter = Interpreter(io.StringIO())
    interpreter.interpret(statements, locals)
    return interpreter.out.getvalue().splitlines()


class ExpressionTestCase(unittest.TestCase):

    def test_arithmetic(self):
        cases = {
            "print 1 + 2 * 3;": ["7"],
            "print (1 + 2) * 3;": ["9"],
            "print 10 - 4 - 3;": ["3"],
            "print 7 / 2;": ["3.5"],
            "print -(2 + 1);": ["-3"],
            "print 0.1 + 0.2;": ["0.30000000000000004"],
            "print \"foo\" + \"bar\";": ["foobar"],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_comparison_and_equality(self):
        cases = {
            "print 1 < 2; print 2 <= 2; print 3 > 4; print 3 >= 4;": ["true", "true", "false", "false"],
            "print 1 == 1; print 1 != 1; print \"a\" == \"a\";": ["true", "false", "true"],
            "print nil == nil; print nil == false; print true == 1; print 0 == \"0\";": ["true", "false", "false",
                                                                                        "false"],
            "fn f() {} print f == f;": ["true"],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_truthiness_and_logic(self):
        cases = {
            "print !nil; print !false; print !0; print !\"\";": ["true", "true", "false", "false"],
            "print nil or \"default\";": ["default"],
            "print 0 or \"default\";": ["0"],
            "print \"a\" and \"b\";": ["b"],
            "print false and undefined_name;": ["false"],  # right side never evaluated
            "print true or undefined_name;": ["true"],
            "if (0) print \"zero is truthy\";": ["zero is truthy"],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_type_errors(self):
        cases = {
            "print 1 + \"a\";": "Operands must be two numbers or two strings. Got number and string.",
            "print nil + nil;": "Operands must be two numbers or two strings. Got nil and nil.",
            "print 1 - \"a\";": "Operands must be numbers. Got number and string.",
            "print true < 1;": "Operands must be numbers. Got boolean and number.",
            "print -\"a\";": "Operand must be a number. Got string.",
            "print \"a\" / 2;": "Operands must be numbers. Got string and number.",
        }
        for case, expected in cases.items():
            with self.assertRaises(SparkleRuntimeError, msg=case) as context:
                run(case)
            self.assertEqual(expected, context.exception.message, case)

    def test_divide_by_zero(self):
        should_raise = ["print 1 / 0;", "print \"a\" / 0;", "print 1 / -0;"]
        for case in should_raise:
            with self.assertRaises(SparkleRuntimeError, msg=case) as context:
                run(case)
            self.assertEqual("Divide by zero error.", context.exception.message, case)

        # false is not a numeric zero
        with self.assertRaises(SparkleRuntimeError) as context:
            run("print 1 / false;")
        self.assertEqual("Operands must be numbers. Got number and boolean.", context.exception.message)

    def test_divide_by_zero_halts(self):
        interpreter = Interpreter(io.StringIO())
        with self.assertRaises(SparkleRuntimeError) as context:
            run("print \"before\";\nprint 1 / 0;\nprint \"after\";", interpreter)
        self.assertEqual(["before"], interpreter.out.getvalue().splitlines())
        self.assertEqual("[line 2] Error at '/': Divide by zero error.", str(context.exception))


class VariableTestCase(unittest.TestCase):

    def test_globals(self):
        cases = {
            "var a; print a;": ["nil"],
            "var a = 1; a = a + 1; print a;": ["2"],
            "var a = 1; fn get() { return a; } a = 2; print get();": ["2"],
            "fn get() { return later; } var later = \"late\"; print get();": ["late"],
            "var a = 1; var b = a = 3; print a; print b;": ["3", "3"],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_undefined(self):
        should_raise = {"print x;": "Undefined variable 'x'.", "x = 1;": "Undefined variable 'x'."}
        for case, expected in should_raise.items():
            with self.assertRaises(SparkleRuntimeError, msg=case) as context:
                run(case)
            self.assertEqual(expected, context.exception.message, case)

    def test_shadowing_self_reference(self):
        self.assertEqual(["2"], run("var a = 1; { var a = a + 1; print a; }"))
        self.assertEqual(["2", "1"], run("{ var a = 1; { var a = a + 1; print a; } print a; }"))

    def test_blocks_restore_scope(self):
        source = "var a = \"global\"; { var a = \"block\"; print a; } print a;"
        self.assertEqual(["block", "global"], run(source))

    def test_resolution_is_static(self):
        # the closure keeps reading the global even after a same-named local is declared
        source = ("var a = \"global\";\n"
                  "{\n"
                  "  fn show() { print a; }\n"
                  "  show();\n"
                  "  var a = \"block\";\n"
                  "  show();\n"
                  "}")
        self.assertEqual(["global", "global"], run(source))


class ControlFlowTestCase(unittest.TestCase):

    def test_if_else(self):
        cases = {
            "if (true) print 1; else print 2;": ["1"],
            "if (nil) print 1; else print 2;": ["2"],
            "if (false) print 1;": [],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_loops(self):
        cases = {
            "var i = 0; while (i < 3) { print i; i = i + 1; }": ["0", "1", "2"],
            "for (var i = 0; i < 3; i = i + 1) print i;": ["0", "1", "2"],
            "var i = 5; for (; i > 3;) i = i - 1; print i;": ["3"],
            "for (var i = 0; i < 2; i = i + 1) { fn f() { return i; } print f(); }": ["0", "1"],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_return_unwinds_loops_and_blocks(self):
        source = ("fn find() {\n"
                  "  for (var i = 0; ; i = i + 1) {\n"
                  "    { if (i == 3) return i; }\n"
                  "  }\n"
                  "}\n"
                  "print find();")
        self.assertEqual(["3"], run(source))

    def test_return_restores_environment(self):
        interpreter = Interpreter(io.StringIO())
        run("fn f() { { { return 1; } } } f();", interpreter)
        self.assertIs(interpreter.globals, interpreter.environment)

    def test_function_without_return(self):
        self.assertEqual(["nil", "nil"], run("fn f() {} fn g() { return; } print f(); print g();"))


class FunctionTestCase(unittest.TestCase):

    def test_calls(self):
        cases = {
            "fn add(a, b) { return a + b; } print add(1, 2);": ["3"],
            "fn f() {} print f;": ["<fn f>"],
            "print clock;": ["<fn clock>"],
            "print clock() > 0;": ["true"],
            "fn fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); } print fib(10);": ["55"],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_closure_counters(self):
        source = ("fn make_counter() {\n"
                  "  var count = 0;\n"
                  "  fn counter() { count = count + 1; return count; }\n"
                  "  return counter;\n"
                  "}\n"
                  "var a = make_counter();\n"
                  "var b = make_counter();\n"
                  "print a(); print a(); print b(); print a(); print b();")
        self.assertEqual(["1", "2", "1", "3", "2"], run(source))

    def test_closures_share_state(self):
        source = ("var get; var set;\n"
                  "{\n"
                  "  var value = \"first\";\n"
                  "  fn g() { return value; }\n"
                  "  fn s(v) { value = v; }\n"
                  "  get = g; set = s;\n"
                  "}\n"
                  "set(\"second\");\n"
                  "print get();")
        self.assertEqual(["second"], run(source))

    def test_call_errors(self):
        cases = {
            "fn f() {} f(1);": "Expected 0 arguments but got 1.",
            "fn f(a, b) {} f(1);": "Expected 2 arguments but got 1.",
            "class A { init(x) {} } A();": "Expected 1 arguments but got 0.",
            "\"text\"();": "Can only call functions and classes. Got string.",
            "var x = nil; x();": "Can only call functions and classes. Got nil.",
        }
        for case, expected in cases.items():
            with self.assertRaises(SparkleRuntimeError, msg=case) as context:
                run(case)
            self.assertEqual(expected, context.exception.message, case)

    def test_arity_error_location(self):
        with self.assertRaises(SparkleRuntimeError) as context:
            run("fn f() {}\nf(\n1);")
        self.assertEqual("[line 3] Error at ')': Expected 0 arguments but got 1.", str(context.exception))


class ClassTestCase(unittest.TestCase):

    def test_instances(self):
        cases = {
            "class A {} print A; print A();": ["A", "A Instance"],
            "class A {} var a = A(); a.x = 1; print a.x;": ["1"],
            "class A { init(n) { this.n = n; } get() { return this.n; } } print A(4).get();": ["4"],
            "class A { m() { return \"m\"; } } var m = A().m; print m();": ["m"],
            "class A { init() { this.x = 1; return; } } print A().x;": ["1"],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_initializer_returns_instance(self):
        source = "class A { init() { this.x = 1; } } var a = A(); print a.init(); print a.init() == a;"
        self.assertEqual(["A Instance", "true"], run(source))

    def test_bound_methods_keep_this(self):
        source = ("class Person {\n"
                  "  init(name) { this.name = name; }\n"
                  "  greet() { return \"hi \" + this.name; }\n"
                  "}\n"
                  "var greet = Person(\"ada\").greet;\n"
                  "print greet();")
        self.assertEqual(["hi ada"], run(source))

    def test_class_can_reference_itself(self):
        source = "class Node { make() { return Node(); } } print Node().make();"
        self.assertEqual(["Node Instance"], run(source))

    def test_inheritance(self):
        cases = {
            "class A { greet() { return \"A\"; } } class B < A {} print B().greet();": ["A"],
            "class A { m() { return \"A\"; } } class B < A { m() { return \"B\"; } } print B().m();": ["B"],
            ("class A { m() { return \"A\"; } }\n"
             "class B < A { m() { return \"B\" + super.m(); } }\n"
             "class C < B {}\n"
             "print C().m();"): ["BA"],
            ("class A { init(x) { this.x = x; } }\n"
             "class B < A { init(x) { super.init(x * 2); } }\n"
             "print B(2).x;"): ["4"],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_super_is_static(self):
        source = ("class A { m() { return \"A\"; } }\n"
                  "class B < A { m() { return super.m(); } }\n"
                  "class C < B { m() { return \"C\"; } }\n"
                  "print C().m(); print B().m();")
        self.assertEqual(["C", "A"], run(source))

    def test_errors(self):
        cases = {
            "var x = 1; x.y;": "Only instances have properties. Got number.",
            "\"s\".y = 1;": "Only instances have fields. Got string.",
            "class A {} A().missing;": "Undefined property 'missing'.",
            "var NotAClass = 1; class B < NotAClass {}": "Superclass must be a class.",
            "class A {} class B < A { m() { return super.nope; } } B().m();": "Undefined property 'nope'.",
        }
        for case, expected in cases.items():
            with self.assertRaises(SparkleRuntimeError, msg=case) as context:
                run(case)
            self.assertEqual(expected, context.exception.message, case)


class EchoTestCase(unittest.TestCase):

    def test_echo(self):
        cases = {
            "1 + 1": "2\n",
            "var x = 3; x * 2": "6\n",
            "print 1; 2": "1\n2\n",
            "3; print 4;": "4\n",
        }
        for case, expected in cases.items():
            interpreter = Interpreter(io.StringIO())
            diagnostics = Diagnostics()
            statements = Parser(Scanner(case, diagnostics).scan_tokens(), diagnostics).parse()
            interpreter.interpret(statements, Resolver(diagnostics).resolve(statements), echo=True)
            self.assertEqual(expected, interpreter.out.getvalue(), case)


if __name__ == '__main__':
    unittest.main()
