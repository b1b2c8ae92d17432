"""
Delimiter classification and code block rendering

The opening delimiter alone decides what a code block is:

    delimiter   kind             output
    ---------   --------------   -------------------------------------
    %@          DIRECTIVE        none (compiler settings)
    %!          DECLARATION      none (appended to initialization code)
    %#          UNPARSED         expression bound as raw markup
    %=          EXPRESSION       value of the expression
    %$          EXTENSION        resolved by prefix (ExtensionRegistry)
    %           STATEMENT        function run on each bind
    %--         SERVER_COMMENT   none (discarded)
    !--         COMMENT          inert "" followed by a script comment

Any other delimiter is not a code block: its original markup is kept as
literal text.
"""

from typing import Any, Callable, Dict, Optional

from ..models.blocks import CodeBlock, CodeBlockKind
from ..models.extensions import ExtensionInvocation
from ..models.tokens import UnparsedBlock
from .ecmascript import scalar_format
from .extensions import ExtensionRegistry

DELIMITER_KINDS: Dict[str, CodeBlockKind] = {
    "%@": CodeBlockKind.DIRECTIVE,
    "%!": CodeBlockKind.DECLARATION,
    "%#": CodeBlockKind.UNPARSED,
    "%=": CodeBlockKind.EXPRESSION,
    "%$": CodeBlockKind.EXTENSION,
    "%": CodeBlockKind.STATEMENT,
    "%--": CodeBlockKind.SERVER_COMMENT,
    "!--": CodeBlockKind.COMMENT,
}

COMMENT_FORMAT = '""/* {code} */'
EXPRESSION_FORMAT = "function() {{\n\treturn {code};\n}}"
STATEMENT_FORMAT = "function() {{\n\t\t\t\t{code}\n\t\t\t}}"
UNPARSED_FORMAT = "function() {{\n\treturn JsonML.raw({code});\n}}"
CALL_FORMAT = "({code}).call(this)"


def delimiter_classify(block: UnparsedBlock, file_path: str = "") -> Optional[CodeBlock]:
    """
    Classify an unparsed block by its opening delimiter.

    Args:
        block: Block from the tokenizer
        file_path: Template path (resolves resource keys of extensions)

    Returns:
        CodeBlock, or None when the delimiter is not a code block

    Example:
        >>> delimiter_classify(UnparsedBlock('%=', '%', ' this.data '))
        CodeBlock(kind=<CodeBlockKind.EXPRESSION: 'expression'>, raw_text=' this.data ', extension=None)
    """
    kind = DELIMITER_KINDS.get(block.begin)
    if kind is None:
        return None
    extension = None
    if kind is CodeBlockKind.EXTENSION:
        extension = ExtensionInvocation.text_parse(block.value, file_path)
    return CodeBlock(kind=kind, raw_text=block.value, extension=extension)


class CodeBlockFormatter:
    """
    Renders code blocks to JavaScript text

    One renderer per output-producing kind; DIRECTIVE, DECLARATION and
    SERVER_COMMENT blocks are consumed by the compiler and render nothing.
    """

    def __init__(self, registry: Optional[ExtensionRegistry] = None) -> None:
        self.registry = registry or ExtensionRegistry()
        self.renderers: Dict[CodeBlockKind, Callable[[CodeBlock], Optional[str]]] = {
            CodeBlockKind.COMMENT: self.comment_render,
            CodeBlockKind.EXPRESSION: self.expression_render,
            CodeBlockKind.STATEMENT: self.statement_render,
            CodeBlockKind.UNPARSED: self.unparsed_render,
            CodeBlockKind.EXTENSION: self.extension_render,
        }

    def block_render(self, block: CodeBlock) -> Optional[str]:
        """
        Render a code block.

        Returns:
            Script text, or None for blocks that produce no value
        """
        renderer = self.renderers.get(block.kind)
        if renderer is None:
            return None
        return renderer(block)

    def comment_render(self, block: CodeBlock) -> Optional[str]:
        code = block.code
        if not code:
            return None
        return COMMENT_FORMAT.format(code=code.replace("*/", "*\\/"))

    def expression_render(self, block: CodeBlock) -> Optional[str]:
        code = block.code
        if not code:
            return None
        return EXPRESSION_FORMAT.format(code=code)

    def statement_render(self, block: CodeBlock) -> Optional[str]:
        code = block.code
        if not code:
            return None
        return STATEMENT_FORMAT.format(code=code)

    def unparsed_render(self, block: CodeBlock) -> Optional[str]:
        if not block.code:
            return None
        return UNPARSED_FORMAT.format(code=block.code)

    def extension_render(self, block: CodeBlock) -> Optional[str]:
        invocation = block.extension or ExtensionInvocation.text_parse(block.raw_text)
        return self.registry.extension_render(invocation)

    def argument_render(self, arg: Any, default: str) -> str:
        """
        Render a command argument as a script expression.

        Plain text is used as script (trimmed), an expression block
        contributes its code, other blocks are invoked in place.

        Example:
            'this.data.items'          -> this.data.items
            <%= this.data.items %>     -> this.data.items
            <% return this.items; %>   -> (function() {...}).call(this)
        """
        if arg is None:
            return default
        if isinstance(arg, str):
            return arg.strip() or default
        if isinstance(arg, CodeBlock):
            if arg.kind is CodeBlockKind.EXPRESSION:
                return arg.code or default
            rendered = self.block_render(arg)
            if rendered is None:
                return default
            return CALL_FORMAT.format(code=rendered)
        return scalar_format(arg)
