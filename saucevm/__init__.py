"""Values, stack, object and thread pools, class data and opcode handlers for a bytecode interpreter."""

__version__ = "0.1.0"

__all__ = [
    "types",
    "stack",
    "objects",
    "threads",
    "program",
    "ops_arith",
    "ops_vars",
]