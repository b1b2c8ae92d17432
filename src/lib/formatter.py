"""
EcmaScript literal formatter

Serializes JsonML values into pretty-printed JavaScript literal text:
tab indentation, one item per line, object keys quoted only when they
are not plain identifiers. Code blocks and template commands are not
data; their rendered script is spliced in verbatim.

Example:
    ["span", {"style": "color:red"}, <expression this.data>]

    [
    	"span",
    	{
    		style : "color:red"
    	},
    	function() {
    	return this.data;
    }
    ]
"""

from typing import Any, Dict, List, Optional

from ..models.blocks import CodeBlock, TemplateCommand
from ..models.tokens import Token
from .codeblocks import CodeBlockFormatter
from .commands import CommandRenderer
from .ecmascript import key_format, scalar_format
from .jsonml import jsonml_build

NULL = "null"


class EcmaScriptFormatter:
    """
    Pretty-printing serializer for JsonML values

    Args:
        blocks: Code block renderer (carries the extension registry)
    """

    def __init__(self, blocks: Optional[CodeBlockFormatter] = None) -> None:
        self.blocks = blocks or CodeBlockFormatter()
        self.commands = CommandRenderer(self)

    def value_format(self, value: Any, depth: int = 0) -> str:
        """
        Format any JsonML value at the given indentation depth.

        Args:
            value: None, scalar, str, list, dict, CodeBlock or TemplateCommand
            depth: Indentation depth of the value's own line

        Returns:
            Literal text
        """
        if isinstance(value, CodeBlock):
            return self.blocks.block_render(value) or NULL
        if isinstance(value, TemplateCommand):
            return self.commands.command_render(value)
        if isinstance(value, list):
            return self.array_format(value, depth)
        if isinstance(value, dict):
            return self.object_format(value, depth)
        return scalar_format(value)

    def array_format(self, items: List[Any], depth: int) -> str:
        if not items:
            return "[]"
        indent = "\t" * (depth + 1)
        body = ",".join(f"\n{indent}{self.value_format(item, depth + 1)}" for item in items)
        return "[" + body + "\n" + "\t" * depth + "]"

    def object_format(self, members: Dict[str, Any], depth: int) -> str:
        if not members:
            return "{}"
        indent = "\t" * (depth + 1)
        body = ",".join(
            f"\n{indent}{key_format(key)} : {self.value_format(value, depth + 1)}"
            for key, value in members.items()
        )
        return "{" + body + "\n" + "\t" * depth + "}"

    def markup_format(self, tokens: Optional[List[Token]], depth: int = 0) -> str:
        """Format processed template tokens as a JsonML literal ('null' if empty)"""
        return self.value_format(jsonml_build(tokens), depth)
