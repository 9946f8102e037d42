"""Core pieces of a Lua 5.2 runtime: opcodes, strings, patterns and libraries."""

__version__ = "0.1.0"
__all__ = ["opcodes", "strtable", "objects", "patterns", "strlib", "oslib"]