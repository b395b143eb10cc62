"""Tree-walking interpreter for Sparkle.

Statements are executed against a chain of Environments. Every statement returns a control-flow result: None when it
completed normally, or a ReturnValue while a `return` unwinds to the nearest function call. Blocks stop at the first
statement that returns a ReturnValue and hand it upward.

Runtime errors are raised as SparkleRuntimeError and abort the rest of the run.
"""

import sys
from dataclasses import dataclass
from typing import Any

from sparkle.lang.error import SparkleRuntimeError
from sparkle.core import syntax
from sparkle.core.environment import Environment
from sparkle.core.runtime import (NATIVES, UNINITIALIZED, SparkleCallable, SparkleClass, SparkleFunction,
                                  SparkleInstance, is_equal, is_truthy, stringify, type_name)
from sparkle.core.tokens import TokenType


@dataclass
class ReturnValue:
    """Result of a statement that is returning from the enclosing function."""
    value: Any = None


class Interpreter:
    """Executes resolved statements. State (globals, resolved distances) persists across calls to interpret."""

    def __init__(self, out=None):
        self.out = out if out is not None else sys.stdout

        self.globals = Environment()
        for native in NATIVES:
            self.globals.define(native.name, native)

        self.environment = self.globals
        self.locals = {}  # dict of expr: distance, filled by the Resolver

    def interpret(self, statements, locals=None, echo=False):
        """Executes statements in order. If echo and the last statement is an expression statement, its value is
        written out (used by the shell).
        """
        if locals:
            self.locals.update(locals)

        echoed = None
        if echo and statements and isinstance(statements[-1], syntax.Expression):
            echoed = statements[-1]

        for stmt in statements:
            if stmt is echoed:
                self.write(stringify(self.evaluate(stmt.expression)))
            else:
                self.execute(stmt)

    def write(self, text):
        print(text, file=self.out)

    # statements

    def execute(self, stmt):
        """Executes stmt. Returns None, or a ReturnValue if stmt is returning from a function."""
        match stmt:
            case syntax.Expression(expression=expr):
                self.evaluate(expr)

            case syntax.Print(expression=expr):
                self.write(stringify(self.evaluate(expr)))

            case syntax.Var(name=name, initializer=initializer):
                value = None if initializer is None else self.evaluate(initializer)
                self.environment.define(name.lexeme, value)

            case syntax.Block(statements=statements):
                return self.execute_block(statements, Environment(self.environment))

            case syntax.If(condition=condition, then_branch=then_branch, else_branch=else_branch):
                if is_truthy(self.evaluate(condition)):
                    return self.execute(then_branch)
                elif else_branch is not None:
                    return self.execute(else_branch)

            case syntax.While(condition=condition, body=body):
                while is_truthy(self.evaluate(condition)):
                    result = self.execute(body)
                    if result is not None:
                        return result

            case syntax.Function(name=name):
                self.environment.define(name.lexeme, SparkleFunction(stmt, self.environment))

            case syntax.Return(value=value):
                return ReturnValue(None if value is None else self.evaluate(value))

            case syntax.Class():
                self.execute_class(stmt)

            case _:
                raise TypeError(f"unknown statement: {stmt!r}")

        return None

    def execute_block(self, statements, environment):
        """Executes statements in environment, restoring the current environment on every exit path."""
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                result = self.execute(stmt)
                if result is not None:
                    return result
        finally:
            self.environment = previous
        return None

    def execute_class(self, stmt):
        self.environment.define(stmt.name.lexeme, UNINITIALIZED)

        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, SparkleClass):
                raise SparkleRuntimeError(stmt.superclass.name, "Superclass must be a class.")

            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods = {}
        for method in stmt.methods:
            is_initializer = method.name.lexeme == SparkleClass.INITIALIZER
            methods[method.name.lexeme] = SparkleFunction(method, self.environment, is_initializer)

        klass = SparkleClass(stmt.name.lexeme, superclass, methods)

        if superclass is not None:
            self.environment = self.environment.enclosing
        self.environment.define(stmt.name.lexeme, klass)

    # expressions

    def evaluate(self, expr):
        match expr:
            case syntax.Literal(value=value):
                return value

            case syntax.Grouping(expression=inner):
                return self.evaluate(inner)

            case syntax.Variable(name=name):
                value = self.look_up_variable(name, expr)
                if value is UNINITIALIZED:
                    raise SparkleRuntimeError(name, f"Cannot access uninitialized variable '{name.lexeme}'.")
                return value

            case syntax.Assign(name=name, value=value_expr):
                value = self.evaluate(value_expr)
                distance = self.locals.get(expr)
                if distance is not None:
                    self.environment.assign_at(distance, name, value)
                else:
                    self.globals.assign(name, value)
                return value

            case syntax.Logical(left=left, operator=operator, right=right):
                value = self.evaluate(left)
                if operator.type is TokenType.OR:
                    if is_truthy(value):
                        return value
                elif not is_truthy(value):
                    return value
                return self.evaluate(right)

            case syntax.Unary(operator=operator, right=right):
                return self.evaluate_unary(operator, self.evaluate(right))

            case syntax.Binary(left=left, operator=operator, right=right):
                return self.evaluate_binary(operator, self.evaluate(left), self.evaluate(right))

            case syntax.Call():
                return self.evaluate_call(expr)

            case syntax.Get(object=obj, name=name):
                instance = self.evaluate(obj)
                if isinstance(instance, SparkleInstance):
                    return instance.get(name)
                raise SparkleRuntimeError(name, f"Only instances have properties. Got {type_name(instance)}.")

            case syntax.Set(object=obj, name=name, value=value_expr):
                instance = self.evaluate(obj)
                if not isinstance(instance, SparkleInstance):
                    raise SparkleRuntimeError(name, f"Only instances have fields. Got {type_name(instance)}.")
                value = self.evaluate(value_expr)
                instance.set(name, value)
                return value

            case syntax.This(keyword=keyword):
                return self.look_up_variable(keyword, expr)

            case syntax.Super(method=method):
                distance = self.locals[expr]
                superclass = self.environment.get_at(distance, "super")
                instance = self.environment.get_at(distance - 1, "this")  # "this" is always one scope inside "super"

                function = superclass.find_method(method.lexeme)
                if function is None:
                    raise SparkleRuntimeError(method, f"Undefined property '{method.lexeme}'.")
                return function.bind(instance)

            case _:
                raise TypeError(f"unknown expression: {expr!r}")

    def evaluate_unary(self, operator, right):
        if operator.type is TokenType.BANG:
            return not is_truthy(right)

        Interpreter.check_number_operand(operator, right)
        return -right

    def evaluate_binary(self, operator, left, right):
        match operator.type:
            case TokenType.EQUAL_EQUAL:
                return is_equal(left, right)
            case TokenType.BANG_EQUAL:
                return not is_equal(left, right)
            case TokenType.PLUS:
                if isinstance(left, float) and isinstance(right, float):
                    return left + right
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                msg = f"Operands must be two numbers or two strings. Got {type_name(left)} and {type_name(right)}."
                raise SparkleRuntimeError(operator, msg)
            case TokenType.SLASH:
                if isinstance(right, float) and right == 0:
                    raise SparkleRuntimeError(operator, "Divide by zero error.")
                Interpreter.check_number_operands(operator, left, right)
                return left / right

        Interpreter.check_number_operands(operator, left, right)
        match operator.type:
            case TokenType.MINUS:
                return left - right
            case TokenType.STAR:
                return left * right
            case TokenType.GREATER:
                return left > right
            case TokenType.GREATER_EQUAL:
                return left >= right
            case TokenType.LESS:
                return left < right
            case TokenType.LESS_EQUAL:
                return left <= right

        raise TypeError(f"unknown binary operator: {operator!r}")

    def evaluate_call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, SparkleCallable):
            raise SparkleRuntimeError(expr.paren, f"Can only call functions and classes. Got {type_name(callee)}.")

        if len(arguments) != callee.arity():
            msg = f"Expected {callee.arity()} arguments but got {len(arguments)}."
            raise SparkleRuntimeError(expr.paren, msg)

        return callee.call(self, arguments)

    def look_up_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    @staticmethod
    def check_number_operand(operator, operand):
        if isinstance(operand, float):
            return
        raise SparkleRuntimeError(operator, f"Operand must be a number. Got {type_name(operand)}.")

    @staticmethod
    def check_number_operands(operator, left, right):
        if isinstance(left, float) and isinstance(right, float):
            return
        raise SparkleRuntimeError(operator, f"Operands must be numbers. Got {type_name(left)} and {type_name(right)}.")
