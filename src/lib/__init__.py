"""
jbst compiler library

Tokenizer, code block and template command rendering, and the compiler
driver that ties them together.
"""

__version__ = "1.0.0"

from .compiler import JbstCompiler
from .tokenizer import MarkupTokenizer
from .extensions import ExtensionRegistry
from .errors import TokenError
from .log import LOG, WARN, state_connectToLogger

__all__ = [
    "JbstCompiler",
    "MarkupTokenizer",
    "ExtensionRegistry",
    "TokenError",
    "LOG",
    "WARN",
    "state_connectToLogger",
    "__version__",
]
