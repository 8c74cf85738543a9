"""
unsafe-lines - How much of a Rust crate lives inside ``unsafe``.

Computes a single static metric for one compilation unit:
- Tree-sitter based parsing of the crate root and its out-of-line modules
- Classification of unsafe functions, traits, impls and blocks
- Line-level rollup into a count / total / percentage report

Macro invocations are treated as opaque: unsafe code that only appears inside
a macro's arguments or body is not counted.
"""

__version__ = "0.1.0"
