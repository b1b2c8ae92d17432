"""
jbst - JsonML+BST template compiler

Compiles markup templates with embedded code blocks into client-side
JavaScript that builds and data-binds JsonML trees.
"""

__version__ = "1.0.0"

from .lib import JbstCompiler, MarkupTokenizer, ExtensionRegistry, TokenError, LOG, state_connectToLogger

__all__ = [
    "JbstCompiler",
    "MarkupTokenizer",
    "ExtensionRegistry",
    "TokenError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
