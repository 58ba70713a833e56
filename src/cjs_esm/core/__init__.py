"""
Core Package.

Contains the per-module transformation logic:
- Parser frontend (tree-sitter)
- Reference classifier and text patch plan
- Export/import planner and code emitter
- Engine, legacy registry and trace logger
"""
