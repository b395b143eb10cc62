"""Static scope resolution for Sparkle.

A single pass over the parsed statements that, for every variable reference (including `this` and `super`), records how
many scopes separate the reference from the scope that declares it. The top level is a scope too, so redeclaring a
global in the same unit is an error. References that are not found in any scope are assumed to be globals declared
later (or by an earlier unit) and are left out of the table. The pass also reports scope misuse, such as reading
a local variable in its own initializer or returning from top-level code.

The runtime creates exactly one Environment per scope pushed here, in the same order, which is what makes the recorded
distances valid at runtime.
"""

from enum import Enum, auto

from sparkle.lang.error import ResolveError
from sparkle.core import syntax


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    """Resolves a list of statements. Errors are recorded in diagnostics."""
    INITIALIZER = "init"

    def __init__(self, diagnostics, known_globals=()):
        self.diagnostics = diagnostics
        self.known_globals = known_globals  # names already bound at runtime, e.g. natives and earlier shell lines
        self.scopes = [{}]  # stack of dicts of name: whether or not the name is initialized, starting at the top level
        self.locals = {}  # dict of expr: distance
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, statements):
        """Resolves statements. Returns the distance table."""
        for stmt in statements:
            self.resolve_stmt(stmt)
        return self.locals

    def resolve_stmt(self, stmt):
        match stmt:
            case syntax.Block(statements=statements):
                self.begin_scope()
                self.resolve(statements)
                self.end_scope()

            case syntax.Class():
                self.resolve_class(stmt)

            case syntax.Expression(expression=expr) | syntax.Print(expression=expr):
                self.resolve_expr(expr)

            case syntax.Function(name=name):
                self.declare(name)
                self.define(name)  # defined before the body so the function can recurse
                self.resolve_function(stmt, FunctionType.FUNCTION)

            case syntax.If(condition=condition, then_branch=then_branch, else_branch=else_branch):
                self.resolve_expr(condition)
                self.resolve_stmt(then_branch)
                if else_branch is not None:
                    self.resolve_stmt(else_branch)

            case syntax.Return(keyword=keyword, value=value):
                if self.current_function is FunctionType.NONE:
                    self.error(keyword, "Cannot return from top-level code.")
                if value is not None:
                    if self.current_function is FunctionType.INITIALIZER:
                        self.error(keyword, "Cannot return a value from an initializer.")
                    self.resolve_expr(value)

            case syntax.Var(name=name, initializer=initializer):
                self.declare(name)
                if initializer is not None:
                    self.resolve_expr(initializer)
                self.define(name)

            case syntax.While(condition=condition, body=body):
                self.resolve_expr(condition)
                self.resolve_stmt(body)

            case _:
                raise TypeError(f"unknown statement: {stmt!r}")

    def resolve_expr(self, expr):
        match expr:
            case syntax.Variable(name=name):
                if self.scopes[-1].get(name.lexeme) is False:
                    self.resolve_shadowed(expr, name)
                else:
                    self.resolve_local(expr, name)

            case syntax.Assign(name=name, value=value):
                self.resolve_expr(value)
                self.resolve_local(expr, name)

            case syntax.Binary(left=left, right=right) | syntax.Logical(left=left, right=right):
                self.resolve_expr(left)
                self.resolve_expr(right)

            case syntax.Call(callee=callee, arguments=arguments):
                self.resolve_expr(callee)
                for argument in arguments:
                    self.resolve_expr(argument)

            case syntax.Get(object=obj):
                self.resolve_expr(obj)

            case syntax.Set(object=obj, value=value):
                self.resolve_expr(value)
                self.resolve_expr(obj)

            case syntax.Grouping(expression=inner) | syntax.Unary(right=inner):
                self.resolve_expr(inner)

            case syntax.Literal():
                pass

            case syntax.This(keyword=keyword):
                if self.current_class is ClassType.NONE:
                    self.error(keyword, "Cannot use 'this' outside of a class.")
                    return
                self.resolve_local(expr, keyword)

            case syntax.Super(keyword=keyword):
                if self.current_class is ClassType.NONE:
                    self.error(keyword, "Cannot use 'super' outside of a class.")
                    return
                elif self.current_class is not ClassType.SUBCLASS:
                    self.error(keyword, "Cannot use 'super' in a class with no superclass.")
                    return
                self.resolve_local(expr, keyword)

            case _:
                raise TypeError(f"unknown expression: {expr!r}")

    def resolve_class(self, stmt):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self.error(stmt.superclass.name, "A class cannot inherit from itself.")
            self.current_class = ClassType.SUBCLASS
            self.resolve_expr(stmt.superclass)

            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True

        for method in stmt.methods:
            if method.name.lexeme == Resolver.INITIALIZER:
                declaration = FunctionType.INITIALIZER
            else:
                declaration = FunctionType.METHOD
            self.resolve_function(method, declaration)

        self.end_scope()
        if stmt.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    def resolve_function(self, function, function_type):
        enclosing_function = self.current_function
        self.current_function = function_type

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    def resolve_local(self, expr, name):
        """Records the distance from the innermost scope to the one declaring name. Not found: assumed global."""
        for distance, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = distance
                return

    def resolve_shadowed(self, expr, name):
        """name is read in its own initializer. The read refers to an enclosing declaration of name, if there is one."""
        for distance, scope in enumerate(reversed(self.scopes[:-1]), start=1):
            if name.lexeme in scope:
                self.locals[expr] = distance
                return

        if name.lexeme not in self.known_globals:
            self.error(name, "Cannot read local variable in its own initializer.")

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error(name, f"Variable '{name.lexeme}' already declared in this scope.")
        scope[name.lexeme] = False

    def define(self, name):
        self.scopes[-1][name.lexeme] = True

    def error(self, token, message):
        self.diagnostics.token_error(token, message, ResolveError)
