"""
Extension specification models

An extension block '<%$ Prefix: value %>' is resolved by its prefix
through the ExtensionRegistry. Each registered prefix is described by an
ExtensionSpec carrying its renderer.
"""

from dataclasses import dataclass, field
from typing import Callable, List


@dataclass(frozen=True)
class ExtensionInvocation:
    """
    Parsed '<%$ prefix: value %>' block

    Attributes:
        prefix: Text before the first ':' (trimmed), empty if there is none
        value: Text after the first ':' (trimmed)
        raw_text: Whole interior of the block
        file_path: Path of the template that contains the block
    """
    prefix: str
    value: str
    raw_text: str
    file_path: str = ""

    @classmethod
    def text_parse(cls, raw_text: str, file_path: str = "") -> "ExtensionInvocation":
        """
        Split extension text on its first colon.

        Example:
            >>> ExtensionInvocation.text_parse(' Resources: greeting ')
            ExtensionInvocation(prefix='Resources', value='greeting', raw_text=' Resources: greeting ', file_path='')
        """
        prefix, sep, value = raw_text.partition(":")
        if not sep:
            return cls(prefix="", value=raw_text.strip(), raw_text=raw_text, file_path=file_path)
        return cls(prefix=prefix.strip(), value=value.strip(), raw_text=raw_text, file_path=file_path)


@dataclass
class ExtensionSpec:
    """
    Specification for an extension prefix

    Attributes:
        name: Prefix the extension answers to (matched case-insensitively)
        description: Human-readable description
        handler: Renderer (invocation, registry) -> JavaScript text
        aliases: Alternative prefixes
        examples: Example usage strings
    """
    name: str
    description: str
    handler: Callable
    aliases: List[str] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)
