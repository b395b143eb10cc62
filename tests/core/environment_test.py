import unittest

from sparkle.core.environment import Environment
from sparkle.core.tokens import Token, TokenType
from sparkle.lang.error import SparkleRuntimeError


def name(lexeme):
    return Token(TokenType.IDENTIFIER, lexeme, None, 1)


class EnvironmentTestCase(unittest.TestCase):

    def setUp(self):
        self.globals = Environment()
        self.middle = Environment(self.globals)
        self.inner = Environment(self.middle)

        self.globals.define("a", 1.0)
        self.middle.define("a", 2.0)
        self.middle.define("b", "middle")

    def test_get_walks_the_chain(self):
        self.assertEqual(2.0, self.inner.get(name("a")))
        self.assertEqual("middle", self.inner.get(name("b")))
        self.assertEqual(1.0, self.globals.get(name("a")))

    def test_define_overwrites(self):
        self.globals.define("a", None)
        self.assertIsNone(self.globals.get(name("a")))

    def test_assign(self):
        self.inner.assign(name("b"), "changed")
        self.assertEqual("changed", self.middle.values["b"])
        self.assertNotIn("b", self.inner.values)

    def test_undefined(self):
        should_raise = [
            lambda: self.inner.get(name("missing")),
            lambda: self.inner.assign(name("missing"), 1.0),
        ]
        for case in should_raise:
            with self.assertRaises(SparkleRuntimeError) as context:
                case()
            self.assertEqual("Undefined variable 'missing'.", context.exception.message)

    def test_get_at_and_assign_at(self):
        self.assertIs(self.middle, self.inner.ancestor(1))
        self.assertIs(self.globals, self.inner.ancestor(2))
        self.assertIs(self.inner, self.inner.ancestor(0))

        # a distance jumps straight past shadowing bindings
        self.assertEqual(1.0, self.inner.get_at(2, "a"))
        self.assertEqual(2.0, self.inner.get_at(1, "a"))

        self.inner.assign_at(2, name("a"), 10.0)
        self.assertEqual(10.0, self.globals.values["a"])
        self.assertEqual(2.0, self.middle.values["a"])

    def test_distance_matches_chain_walk(self):
        self.assertEqual(self.inner.get(name("b")), self.inner.get_at(1, "b"))
        self.assertEqual(self.inner.get(name("a")), self.inner.get_at(1, "a"))


if __name__ == '__main__':
    unittest.main()
