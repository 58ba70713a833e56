"""
Rewriter Package.

Modules:
    - ``classifier``: The scope-aware traversal that schedules edits.
    - ``patcher``: The position-addressed edit plan it schedules into.
"""
