"""
Markup token models

Defines the token vocabulary shared by the tokenizer, the compiler and the
JsonML builder, plus a small peekable stream over a token list.

A template is flattened into a sequence of tokens in document order:

    <li class="item">Hi</li>

    ELEMENT_BEGIN  li
    ATTRIBUTE      class
    PRIMITIVE      "item"
    PRIMITIVE      "Hi"
    ELEMENT_END
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, List, Optional


class MarkupTokenType(Enum):
    """Kinds of markup tokens"""
    ELEMENT_BEGIN = "element_begin"  # <div>
    ELEMENT_VOID = "element_void"    # <br />
    ELEMENT_END = "element_end"      # </div>
    ATTRIBUTE = "attribute"          # name="..." (value follows as PRIMITIVE)
    PRIMITIVE = "primitive"          # text, code blocks, commands


@dataclass(frozen=True)
class DataName:
    """
    Qualified element or attribute name

    Attributes:
        local_name: Name without prefix (e.g., 'control')
        prefix: Namespace prefix (e.g., 'jbst'), empty if none
    """
    local_name: str = ""
    prefix: str = ""

    @property
    def prefixed_name(self) -> str:
        if self.prefix:
            return f"{self.prefix}:{self.local_name}"
        return self.local_name

    @classmethod
    def name_parse(cls, qualified: str) -> "DataName":
        """
        Split a qualified name on its first colon.

        Example:
            >>> DataName.name_parse('jbst:control')
            DataName(local_name='control', prefix='jbst')
        """
        prefix, sep, local = qualified.partition(":")
        if not sep:
            return cls(local_name=qualified)
        return cls(local_name=local, prefix=prefix)

    def __str__(self) -> str:
        return self.prefixed_name


@dataclass(frozen=True)
class UnparsedBlock:
    """
    Delimited region the tokenizer does not interpret.

    For '<%= this.data %>' the block is begin='%=', end='%',
    value=' this.data '.
    """
    begin: str
    end: str
    value: str

    def markup_get(self) -> str:
        """Original markup text of the block"""
        return f"<{self.begin}{self.value}{self.end}>"


@dataclass(frozen=True)
class Token:
    """
    Single markup token

    Position (line, column) is informational and ignored by equality, so a
    test can compare against Token(MarkupTokenType.PRIMITIVE, value="bar").

    Attributes:
        token_type: Kind of token
        name: Element or attribute name (None for primitives and ends)
        value: Primitive payload (str, UnparsedBlock, CodeBlock, TemplateCommand)
        line: 1-based line of the token in its source
        column: 1-based column of the token in its source
    """
    token_type: MarkupTokenType
    name: Optional[DataName] = None
    value: Any = None
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def value_asString(self) -> str:
        if self.value is None:
            return ""
        if isinstance(self.value, UnparsedBlock):
            return self.value.markup_get()
        return str(self.value)


class TokenStream:
    """
    Peekable cursor over a token list

    Example:
        stream = TokenStream(tokens)
        while not stream.completed:
            token = stream.peek()
            ...
            stream.pop()
    """

    def __init__(self, tokens: List[Token]) -> None:
        self.tokens: List[Token] = list(tokens)
        self.index: int = 0

    @property
    def completed(self) -> bool:
        return self.index >= len(self.tokens)

    def peek(self) -> Optional[Token]:
        if self.completed:
            return None
        return self.tokens[self.index]

    def pop(self) -> Optional[Token]:
        token = self.peek()
        if token is not None:
            self.index += 1
        return token
