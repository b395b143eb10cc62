"""Abstract syntax tree for Sparkle.

Formally, the grammar the Parser accepts can be defined as

```
<program>     ::= <declaration>* EOF
<declaration> ::= <class_decl> | <fn_decl> | <var_decl> | <statement>
<class_decl>  ::= "class" IDENTIFIER ( "<" IDENTIFIER )? "{" <function>* "}"
<fn_decl>     ::= "fn" <function>
<function>    ::= IDENTIFIER "(" ( IDENTIFIER ( "," IDENTIFIER )* )? ")" <block>
<var_decl>    ::= "var" IDENTIFIER ( "=" <expression> )? ";"
<statement>   ::= <expr_stmt> | <print_stmt> | <block> | <if_stmt> | <while_stmt> | <for_stmt> | <return_stmt>

<expression>  ::= ( <call> "." )? IDENTIFIER "=" <expression> | <or>
<or>          ::= <and> ( "or" <and> )*
<and>         ::= <equality> ( "and" <equality> )*
<equality>    ::= <comparison> ( ( "!=" | "==" ) <comparison> )*
<comparison>  ::= <term> ( ( ">" | ">=" | "<" | "<=" ) <term> )*
<term>        ::= <factor> ( ( "-" | "+" ) <factor> )*
<factor>      ::= <unary> ( ( "/" | "*" ) <unary> )*
<unary>       ::= ( "!" | "-" ) <unary> | <call>
<call>        ::= <primary> ( "(" <arguments>? ")" | "." IDENTIFIER )*
<primary>     ::= "true" | "false" | "nil" | "this" | NUMBER | STRING | IDENTIFIER | "(" <expression> ")"
                | "super" "." IDENTIFIER
```

Nodes only hold their own data and children. They compare and hash by identity (eq=False), which lets the resolver
key its distance table by the node itself. Consumers dispatch on the node class with `match`.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from sparkle.core.tokens import Token


class Expr:
    """Superclass of every expression node."""


class Stmt:
    """Superclass of every statement node."""


# expressions

@dataclass(eq=False)
class Literal(Expr):
    value: Any


@dataclass(eq=False)
class Variable(Expr):
    name: Token


@dataclass(eq=False)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(eq=False)
class Grouping(Expr):
    expression: Expr


@dataclass(eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to locate runtime errors
    arguments: List[Expr]


@dataclass(eq=False)
class Get(Expr):
    object: Expr
    name: Token


@dataclass(eq=False)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass(eq=False)
class This(Expr):
    keyword: Token


@dataclass(eq=False)
class Super(Expr):
    keyword: Token
    method: Token


# statements

@dataclass(eq=False)
class Expression(Stmt):
    expression: Expr


@dataclass(eq=False)
class Print(Stmt):
    expression: Expr


@dataclass(eq=False)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass(eq=False)
class Block(Stmt):
    statements: List[Stmt]


@dataclass(eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt


@dataclass(eq=False)
class Function(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]


@dataclass(eq=False)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass(eq=False)
class Class(Stmt):
    name: Token
    superclass: Optional[Variable]
    methods: List[Function]
