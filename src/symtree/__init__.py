"""symtree: lazy call and inheritance hierarchies over a code-intelligence server."""

__version__ = "0.1.0"
