"""Debug printer that renders a Sparkle syntax tree as a lisp-style string, e.g. `1 + 2 * 3` is `(+ 1 (* 2 3))`."""

from sparkle.core import syntax
from sparkle.core.runtime import stringify


class AstPrinter:

    def print(self, node):
        """node may be an Expr, a Stmt or a list of Stmts (printed one per line)."""
        if isinstance(node, list):
            return "\n".join(self.print(stmt) for stmt in node)
        elif isinstance(node, syntax.Stmt):
            return self.print_stmt(node)
        return self.print_expr(node)

    def print_stmt(self, stmt):
        match stmt:
            case syntax.Expression(expression=expr):
                return self.parenthesize(";", expr)
            case syntax.Print(expression=expr):
                return self.parenthesize("print", expr)
            case syntax.Var(name=name, initializer=None):
                return self.parenthesize("var", name)
            case syntax.Var(name=name, initializer=initializer):
                return self.parenthesize("var", name, "=", initializer)
            case syntax.Block(statements=statements):
                return self.parenthesize("block", *statements)
            case syntax.If(condition=condition, then_branch=then_branch, else_branch=None):
                return self.parenthesize("if", condition, then_branch)
            case syntax.If(condition=condition, then_branch=then_branch, else_branch=else_branch):
                return self.parenthesize("if-else", condition, then_branch, else_branch)
            case syntax.While(condition=condition, body=body):
                return self.parenthesize("while", condition, body)
            case syntax.Function(name=name, params=params, body=body):
                params = "(" + " ".join(param.lexeme for param in params) + ")"
                return self.parenthesize("fn", name, params, *body)
            case syntax.Return(value=None):
                return "(return)"
            case syntax.Return(value=value):
                return self.parenthesize("return", value)
            case syntax.Class(name=name, superclass=None, methods=methods):
                return self.parenthesize("class", name, *methods)
            case syntax.Class(name=name, superclass=superclass, methods=methods):
                return self.parenthesize("class", name, "<", superclass, *methods)

    def print_expr(self, expr):
        match expr:
            case syntax.Literal(value=str() as value):
                return f"\"{value}\""
            case syntax.Literal(value=value):
                return stringify(value)
            case syntax.Variable(name=name):
                return name.lexeme
            case syntax.Assign(name=name, value=value):
                return self.parenthesize("=", name, value)
            case syntax.Binary(left=left, operator=operator, right=right):
                return self.parenthesize(operator.lexeme, left, right)
            case syntax.Logical(left=left, operator=operator, right=right):
                return self.parenthesize(operator.lexeme, left, right)
            case syntax.Unary(operator=operator, right=right):
                return self.parenthesize(operator.lexeme, right)
            case syntax.Grouping(expression=inner):
                return self.parenthesize("group", inner)
            case syntax.Call(callee=callee, arguments=arguments):
                return self.parenthesize("call", callee, *arguments)
            case syntax.Get(object=obj, name=name):
                return self.parenthesize(".", obj, name)
            case syntax.Set(object=obj, name=name, value=value):
                return self.parenthesize("=", obj, name, value)
            case syntax.This():
                return "this"
            case syntax.Super(method=method):
                return self.parenthesize("super", method)

    def parenthesize(self, name, *parts):
        """Recursively prints nodes in parts; tokens are printed as their lexeme, anything else as is."""
        result = f"({name}"
        for part in parts:
            if isinstance(part, (syntax.Expr, syntax.Stmt)):
                result += " " + self.print(part)
            elif hasattr(part, "lexeme"):
                result += " " + part.lexeme
            else:
                result += f" {part}"
        return result + ")"
