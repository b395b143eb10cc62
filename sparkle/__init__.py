"""Sparkle: a small dynamically-typed, class-based scripting language, run by a tree-walking interpreter.

For reference:
- "core": the execution pipeline, in sparkle/core
- "lang": everything around it (diagnostics, sessions, the shell, the debug printer), in sparkle/lang

Basic program flow:
    1. Scanner: source text to tokens
    2. Parser: produces an AST by recursive descent, see sparkle/core/syntax.py for the grammar
    3. Resolver: walks the AST to compute the scope distance of every local variable reference
        - Will fail if a scope is misused, e.g. `return` outside of a function
    4. Interpreter: not a compiler, so walks the AST and executes it on the fly
"""

__version__ = "0.1.0"
