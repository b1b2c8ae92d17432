"""
Directive processing for '<%@ ... %>' blocks

A directive reads like a tag, so its interior is re-tokenized as one:

    <%@ Control Name="Foo.MyList" AutoMarkup="Data" Import="Bar, Baz" %>
        → <Control Name="Foo.MyList" AutoMarkup="Data" Import="Bar, Baz">

Supported directives:
    page / control / view   name, automarkup, import (other attributes ignored)
    import                  namespace

Unrecognized directives are ignored.
"""

import re
from dataclasses import replace
from typing import Callable, Dict, Iterator, Optional, Tuple

from ..models.blocks import AutoMarkupType
from ..models.state import CompilationState
from ..models.tokens import MarkupTokenType, Token, TokenStream
from .errors import TokenError
from .log import LOG
from .tokenizer import MarkupTokenizer

IMPORT_DELIMITERS = re.compile(r"[\s,]+")


class DirectiveProcessor:
    """
    Applies directive settings to a CompilationState

    Handlers are looked up by directive name (case-insensitive) and receive
    the state plus (name-token, value-token) attribute pairs.
    """

    def __init__(self) -> None:
        self.tokenizer = MarkupTokenizer(auto_balance=False)
        self.handlers: Dict[str, Callable[[CompilationState, TokenStream], None]] = {
            "page": self.templateDirective_process,
            "control": self.templateDirective_process,
            "view": self.templateDirective_process,
            "import": self.importDirective_process,
        }

    def directive_process(self, state: CompilationState, text: str, origin: Optional[Token] = None) -> None:
        """
        Parse a directive and apply it to the state.

        Args:
            state: Compilation state to update
            text: Directive interior (text between '<%@' and '%>')
            origin: Token of the directive block, used to position errors

        Raises:
            TokenError: Malformed directive or invalid setting value
        """
        if not text or not text.strip():
            return

        as_tag = "<" + text.lstrip() + ">"
        stream = TokenStream(self.tokenizer.tokens_get(as_tag))
        if stream.completed:
            return

        token = stream.pop()
        if token.token_type not in (MarkupTokenType.ELEMENT_BEGIN, MarkupTokenType.ELEMENT_VOID):
            raise self.error(token, origin, f"Unexpected directive element start: {token.token_type.name}")

        directive = token.name.local_name.lower()
        handler = self.handlers.get(directive)
        if handler is None:
            LOG(f"Ignoring unrecognized directive '{token.name.local_name}'", level=2)
            return

        try:
            handler(state, stream)
        except TokenError as e:
            raise self.error(e.token, origin, e.msg) from e

    @staticmethod
    def error(token: Optional[Token], origin: Optional[Token], message: str) -> TokenError:
        """Report at the directive's position in the template"""
        if token is not None and origin is not None:
            token = replace(token, line=origin.line, column=origin.column)
        return TokenError(token, message)

    @staticmethod
    def attributes_iterate(stream: TokenStream) -> Iterator[Tuple[Token, Token]]:
        """Yield (attribute, value) token pairs until the stream ends"""
        while not stream.completed:
            token = stream.pop()
            if token.token_type is not MarkupTokenType.ATTRIBUTE:
                raise TokenError(token, f"Unexpected directive attribute name: {token.token_type.name}")
            if stream.completed:
                return
            value = stream.pop()
            if value.token_type is not MarkupTokenType.PRIMITIVE:
                raise TokenError(value, f"Unexpected directive attribute value: {value.token_type.name}")
            yield token, value

    def templateDirective_process(self, state: CompilationState, stream: TokenStream) -> None:
        """page/control/view: name, automarkup and import settings"""
        for attr, value in self.attributes_iterate(stream):
            setting = attr.name.local_name.lower()
            text = value.value_asString()

            if setting == "name":
                try:
                    state.name = text
                except ValueError as e:
                    raise TokenError(value, str(e))
                LOG(f"Template name set to '{text}'", level=2)

            elif setting == "automarkup":
                try:
                    state.auto_markup = AutoMarkupType.value_parse(text)
                except ValueError as e:
                    raise TokenError(value, str(e))

            elif setting == "import":
                for namespace in IMPORT_DELIMITERS.split(text):
                    state.import_add(namespace)

    def importDirective_process(self, state: CompilationState, stream: TokenStream) -> None:
        """import: namespace setting"""
        for attr, value in self.attributes_iterate(stream):
            if attr.name.local_name.lower() == "namespace":
                state.import_add(value.value_asString())
