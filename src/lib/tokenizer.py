"""
Markup tokenizer for JBST templates

Folds the JbstLexer lexeme stream into markup tokens (see
models/tokens.py). Code delimiters come out as opaque UnparsedBlock
primitives; text and attribute values are entity-decoded, while
<script>/<style> content is kept raw.

With auto_balance enabled (the default for templates) the token stream
is well-formed: stray closing tags are dropped, elements left open by a
closing tag further out are closed implicitly, and anything still open at
end of input is closed. Directive parsing turns balancing off so a
synthetic '<Control ...>' tag yields only its begin and attribute tokens.
"""

import html
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from pygments.token import Comment, Name, Operator, Other, Punctuation, String, Whitespace

from ..models.tokens import DataName, MarkupTokenType, Token, UnparsedBlock
from .lexer import JbstLexer, get_lexer
from .log import LOG

VOID_ELEMENTS: frozenset = frozenset([
    "area", "base", "basefont", "br", "col", "embed", "frame", "hr", "img",
    "input", "isindex", "keygen", "link", "meta", "param", "source", "track",
    "wbr",
])

# Lexeme types that become UnparsedBlock values
BLOCK_TYPES = (
    Comment.Special,
    Comment.Preproc,
    Comment.Multiline,
    Comment.Single,
    Comment.Hashbang,
)

# Characters after '<%' that select a distinct code block kind
BLOCK_MARKERS = "@!#=$:"


def block_split(lexeme: str) -> UnparsedBlock:
    """
    Split a delimited lexeme into begin/end markers and interior.

    Example:
        >>> block_split('<%= this.data %>')
        UnparsedBlock(begin='%=', end='%', value=' this.data ')
        >>> block_split('<!-- note -->')
        UnparsedBlock(begin='!--', end='--', value=' note ')
    """
    inner = lexeme[1:-1]
    if inner.startswith("%--") and inner.endswith("--%") and len(inner) >= 6:
        return UnparsedBlock("%--", "--%", inner[3:-3])
    if inner.startswith("%"):
        if len(inner) > 2 and inner[1] in BLOCK_MARKERS:
            return UnparsedBlock("%" + inner[1], "%", inner[2:-1])
        return UnparsedBlock("%", "%", inner[1:-1])
    if inner.startswith("!--") and inner.endswith("--") and len(inner) >= 5:
        return UnparsedBlock("!--", "--", inner[3:-2])
    if inner.startswith("?"):
        return UnparsedBlock("?", "?", inner[1:-1] if inner.endswith("?") else inner[1:])
    return UnparsedBlock("!", "", inner[1:])


@dataclass
class PendingTag:
    """Tag under construction while its lexemes are consumed"""
    closing: bool
    index: int
    name: str = ""
    attributes: List[Tuple[DataName, Any, int]] = field(default_factory=list)


class MarkupTokenizer:
    """
    Tokenizer producing markup tokens from JBST template text

    Example:
        >>> tokens = MarkupTokenizer().tokens_get('<p class="x">Hi</p>')
        >>> [t.token_type.name for t in tokens]
        ['ELEMENT_BEGIN', 'ATTRIBUTE', 'PRIMITIVE', 'PRIMITIVE', 'ELEMENT_END']
    """

    def __init__(self, auto_balance: bool = True, lexer: Optional[JbstLexer] = None) -> None:
        self.auto_balance = auto_balance
        self.lexer = lexer or get_lexer()
        self.text_reset("")

    def text_reset(self, text: str) -> None:
        self.tokens: List[Token] = []
        self.openElements: List[DataName] = []
        self.lineStarts: List[int] = [0] + [i + 1 for i, ch in enumerate(text) if ch == "\n"]
        self.textParts: List[Tuple[str, bool]] = []
        self.textIndex = 0
        self.tag: Optional[PendingTag] = None
        self.attrName: Optional[Tuple[str, int]] = None
        self.attrValue: Optional[List[Any]] = None

    def tokens_get(self, text: str) -> List[Token]:
        """
        Tokenize template text.

        Args:
            text: Template source

        Returns:
            Markup tokens in document order
        """
        self.text_reset(text)
        for index, ttype, value in self.lexer.get_tokens_unprocessed(text):
            self.lexeme_consume(index, ttype, value)
        self.text_flush()
        if self.tag is not None:
            self.tag_emit(void=False)
        if self.auto_balance:
            while self.openElements:
                self.openElements.pop()
                self.token_add(MarkupTokenType.ELEMENT_END, index=len(text))
        LOG(f"Tokenized {len(text)} characters into {len(self.tokens)} tokens", level=3)
        return self.tokens

    def position_get(self, index: int) -> Tuple[int, int]:
        """1-based (line, column) of a character offset"""
        line = bisect_right(self.lineStarts, index)
        return line, index - self.lineStarts[line - 1] + 1

    def token_add(
        self,
        token_type: MarkupTokenType,
        name: Optional[DataName] = None,
        value: Any = None,
        index: int = 0,
    ) -> None:
        line, column = self.position_get(index)
        self.tokens.append(Token(token_type, name, value, line, column))

    def lexeme_consume(self, index: int, ttype: Any, value: str) -> None:
        """Advance the tokenizer by one lexeme"""
        if self.tag is not None:
            self.tagLexeme_consume(index, ttype, value)
            return

        if ttype in BLOCK_TYPES:
            self.text_flush()
            self.token_add(MarkupTokenType.PRIMITIVE, value=block_split(value), index=index)
        elif ttype is String.Other:
            # CDATA content is literal text
            self.text_append(index, value[len("<![CDATA["):-len("]]>")], raw=True)
        elif ttype is Punctuation and value in ("<", "</"):
            self.text_flush()
            self.tag = PendingTag(closing=(value == "</"), index=index)
        elif ttype is Other:
            self.text_append(index, value, raw=True)
        else:
            self.text_append(index, value, raw=False)

    def tagLexeme_consume(self, index: int, ttype: Any, value: str) -> None:
        tag = self.tag
        if ttype is Name.Tag:
            tag.name = value
        elif ttype is Name.Attribute:
            self.attribute_flush()
            self.attrName = (value, index)
        elif ttype is Operator:
            self.attrValue = []
        elif ttype is String.Delimiter or ttype is Whitespace:
            pass
        elif ttype in String:
            if self.attrValue is not None:
                self.attrValue.append(value)
        elif ttype in BLOCK_TYPES:
            if self.attrValue is not None:
                self.attrValue.append(block_split(value))
            else:
                LOG(f"Ignoring code block inside tag <{tag.name}>: {value}", level=3)
        elif ttype is Punctuation:
            self.tag_emit(void=value.startswith("/"))
        else:
            LOG(f"Ignoring unexpected text inside tag <{tag.name}>: {value!r}", level=3)

    def attribute_flush(self) -> None:
        if self.attrName is None:
            return
        name, index = self.attrName
        if self.attrValue is None:
            # boolean attribute
            value: Any = name
        else:
            value = self.attrValue_combine(self.attrValue)
        self.tag.attributes.append((DataName.name_parse(name), value, index))
        self.attrName = None
        self.attrValue = None

    @staticmethod
    def attrValue_combine(parts: List[Any]) -> Any:
        """A lone code block stays a block; anything else becomes text"""
        if len(parts) == 1 and isinstance(parts[0], UnparsedBlock):
            return parts[0]
        return "".join(
            part.markup_get() if isinstance(part, UnparsedBlock) else html.unescape(part)
            for part in parts
        )

    def tag_emit(self, void: bool) -> None:
        self.attribute_flush()
        tag, self.tag = self.tag, None
        name = DataName.name_parse(tag.name)

        if tag.closing:
            self.elementEnd_emit(name, tag.index)
            return

        if void or name.prefixed_name.lower() in VOID_ELEMENTS:
            self.token_add(MarkupTokenType.ELEMENT_VOID, name, index=tag.index)
        else:
            self.token_add(MarkupTokenType.ELEMENT_BEGIN, name, index=tag.index)
            self.openElements.append(name)

        for attr_name, attr_value, index in tag.attributes:
            self.token_add(MarkupTokenType.ATTRIBUTE, attr_name, index=index)
            self.token_add(MarkupTokenType.PRIMITIVE, value=attr_value, index=index)

    def elementEnd_emit(self, name: DataName, index: int) -> None:
        if not self.auto_balance:
            self.token_add(MarkupTokenType.ELEMENT_END, index=index)
            return

        key = name.prefixed_name.lower()
        for depth in range(len(self.openElements) - 1, -1, -1):
            if self.openElements[depth].prefixed_name.lower() == key:
                break
        else:
            LOG(f"Dropping unmatched closing tag </{name}>", level=3)
            return

        # implicitly close anything opened inside the matched element
        while len(self.openElements) > depth:
            self.openElements.pop()
            self.token_add(MarkupTokenType.ELEMENT_END, index=index)

    def text_append(self, index: int, value: str, raw: bool) -> None:
        if not self.textParts:
            self.textIndex = index
        self.textParts.append((value, raw))

    def text_flush(self) -> None:
        if not self.textParts:
            return
        text = "".join(value if raw else html.unescape(value) for value, raw in self.textParts)
        self.textParts = []
        if text:
            self.token_add(MarkupTokenType.PRIMITIVE, value=text, index=self.textIndex)
