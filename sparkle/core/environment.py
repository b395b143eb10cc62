"""Runtime scopes for Sparkle. An Environment maps names to values and links to the Environment enclosing it."""

from sparkle.lang.error import SparkleRuntimeError


class Environment:
    """One runtime scope. Only the global environment has no enclosing environment.

    The enclosing link is fixed at creation and is a strong reference: a closure holding this environment keeps the
    whole chain alive after the block or call that created it has returned.
    """

    def __init__(self, enclosing=None):
        self.enclosing = enclosing
        self.values = {}

    def define(self, name, value):
        """Binds name in this scope, overwriting any previous binding."""
        self.values[name] = value

    def get(self, name):
        """Looks name (a Token) up through the enclosing chain. Used for globals only."""
        env = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise SparkleRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name, value):
        """Assigns to the nearest scope that binds name (a Token). Used for globals only."""
        env = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise SparkleRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance):
        """Returns the environment distance enclosing links away."""
        env = self
        for __ in range(distance):
            env = env.enclosing
        return env

    def get_at(self, distance, name):
        """Reads name (a str) from the environment distance links away. The resolver guarantees it is bound there."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        """Writes name (a Token) in the environment distance links away."""
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self):
        return f"Environment({list(self.values)}, enclosing={self.enclosing!r})"
