"""
Models package for jbst

Contains data structures and type definitions for the compilation pipeline.
"""

from .state import ProgramState, pipeline, CompilationState, DeclarationBlock
from .tokens import MarkupTokenType, DataName, Token, TokenStream, UnparsedBlock
from .blocks import CodeBlock, CodeBlockKind, CommandKind, TemplateCommand, AutoMarkupType
from .extensions import ExtensionInvocation, ExtensionSpec

__all__ = [
    "ProgramState",
    "pipeline",
    "CompilationState",
    "DeclarationBlock",
    "MarkupTokenType",
    "DataName",
    "Token",
    "TokenStream",
    "UnparsedBlock",
    "CodeBlock",
    "CodeBlockKind",
    "CommandKind",
    "TemplateCommand",
    "AutoMarkupType",
    "ExtensionInvocation",
    "ExtensionSpec",
]
