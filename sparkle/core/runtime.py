"""Runtime values for Sparkle.

Values are a closed set, matched explicitly wherever behaviour depends on the kind of a value:

| Sparkle  | Python                                               |
|----------|------------------------------------------------------|
| nil      | None                                                 |
| boolean  | bool                                                 |
| number   | float                                                |
| string   | str                                                  |
| callable | NativeFunction, SparkleFunction, SparkleClass        |
| instance | SparkleInstance                                      |
"""

import time
from abc import ABC, abstractmethod

from sparkle.lang.error import SparkleRuntimeError
from sparkle.core.environment import Environment


class Uninitialized:
    """Placeholder bound to a class name while its class body is being built."""

    def __repr__(self):
        return "<uninitialized>"


UNINITIALIZED = Uninitialized()


class SparkleCallable(ABC):
    """Anything that can be called with parentheses."""

    @abstractmethod
    def arity(self):
        """Number of arguments this callable requires."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Calls this callable. arguments has already been checked against arity."""


class NativeFunction(SparkleCallable):
    """Function implemented by the host, e.g. clock."""

    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(*arguments)

    def __str__(self):
        return f"<fn {self.name}>"


class SparkleFunction(SparkleCallable):
    """User function: a declaration plus the environment that was active where it was declared."""

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        result = interpreter.execute_block(self.declaration.body, environment)

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if result is not None:
            return result.value
        return None

    def bind(self, instance):
        """Returns a copy of this method whose closure binds `this` to instance."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return SparkleFunction(self.declaration, environment, self.is_initializer)

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"


class SparkleClass(SparkleCallable):
    """Class value. Calling it constructs an instance and runs `init` on it, if there is one."""
    INITIALIZER = "init"

    def __init__(self, name, superclass, methods):
        self.name = name
        self.superclass = superclass
        self.methods = methods  # dict of name: unbound SparkleFunction

    def find_method(self, name):
        """Looks name up in this class, then in its superclass chain. Returns None if not found."""
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self):
        initializer = self.find_method(SparkleClass.INITIALIZER)
        return 0 if initializer is None else initializer.arity()

    def call(self, interpreter, arguments):
        instance = SparkleInstance(self)
        initializer = self.find_method(SparkleClass.INITIALIZER)
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self):
        return self.name


class SparkleInstance:
    """Instance of a SparkleClass. Fields are created on first assignment."""

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Fields shadow methods. Methods are bound freshly on every access."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise SparkleRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} Instance"


def clock():
    """Seconds since the epoch."""
    return time.time()


NATIVES = [
    NativeFunction("clock", 0, clock),
]


def type_name(value):
    """Returns the Sparkle name of value's kind, used in runtime error messages."""
    if value is None:
        return "nil"
    elif isinstance(value, bool):
        return "boolean"
    elif isinstance(value, float):
        return "number"
    elif isinstance(value, str):
        return "string"
    elif isinstance(value, SparkleClass):
        return "class"
    elif isinstance(value, SparkleCallable):
        return "function"
    elif isinstance(value, SparkleInstance):
        return "instance"
    return type(value).__name__


def is_truthy(value):
    """nil and false are falsy, everything else (including 0 and "") is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """Equality never fails. Values of different kinds are never equal, so `true == 1` is false."""
    if left is None or right is None:
        return left is right
    if type_name(left) != type_name(right):
        return False
    if isinstance(left, (bool, float, str)):
        return left == right
    return left is right


def stringify(value):
    """Text used by print: integral numbers are written in full without a fraction, e.g. 1e16 as 10000000000000000."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return f"{value:.0f}"
        return repr(value)
    return str(value)
