"""
Static Analysis Package.

Utilities consulted by the classifier while it walks a module.

Modules:
    - ``symbol_table``: Lexical scopes and free-name lookup.
    - ``evaluator``: Constant folding of branch guards.
"""
