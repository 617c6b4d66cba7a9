"""Lox: a small dynamically-typed scripting language with closures and classes, run by a tree-walking interpreter.

For reference:
- `lox.core`: the language itself (scanner, parser, resolver, evaluator and runtime objects)
- `lox.lang`: everything around it (sessions, error handling, the interactive shell)
"""

__version__ = "1.0.0"
