"""
JsonML tree construction and whitespace normalization

Converts a processed markup token list into the JsonML value tree that
the formatter serializes:

    ["ul", {"class": "items"}, " ", <code block>, " "]

Elements become lists (name, optional attribute dict, children); text
stays str; code blocks and template commands stay as their model objects
and are rendered verbatim by the formatter.
"""

import re
from dataclasses import replace
from typing import Any, Dict, List, Optional

from ..models.tokens import MarkupTokenType, Token
from .errors import TokenError

# HTML whitespace only: non-breaking space is content
WHITESPACE_RUN = re.compile(r"[ \t\n\r\f]+")


def whitespace_is(text: Any) -> bool:
    """True for a str made only of HTML whitespace (or empty)"""
    return isinstance(text, str) and not WHITESPACE_RUN.sub("", text)


def text_normalize(text: str) -> str:
    """
    Collapse each run of HTML whitespace to a single space.

    Idempotent: text_normalize(text_normalize(s)) == text_normalize(s)
    """
    return WHITESPACE_RUN.sub(" ", text)


def whitespace_normalize(token: Token) -> Token:
    """
    Normalize a literal text token.

    Returns the same token object when nothing changed, a new one otherwise.
    """
    if token.token_type is not MarkupTokenType.PRIMITIVE or not isinstance(token.value, str):
        return token
    text = text_normalize(token.value)
    if text == token.value:
        return token
    return replace(token, value=text)


def text_coalesce(tokens: List[Token]) -> List[Token]:
    """
    Merge adjacent literal text tokens.

    Removing server comments, directives and declaration scripts leaves
    neighbouring text runs; merging them lets normalization see one run.
    Attribute values are never merged with following text.
    """
    result: List[Token] = []
    mergeable = False
    for token in tokens:
        is_text = token.token_type is MarkupTokenType.PRIMITIVE and isinstance(token.value, str)
        if is_text and mergeable:
            last = result[-1]
            result[-1] = replace(last, value=last.value + token.value)
            continue
        result.append(token)
        # the primitive following an ATTRIBUTE is that attribute's value
        follows_attribute = len(result) > 1 and result[-2].token_type is MarkupTokenType.ATTRIBUTE
        mergeable = is_text and not follows_attribute
    return result


def tokens_normalize(tokens: List[Token]) -> List[Token]:
    """Coalesce then whitespace-normalize every literal text token"""
    result: List[Token] = []
    previous: Optional[Token] = None
    for token in text_coalesce(tokens):
        if previous is None or previous.token_type is not MarkupTokenType.ATTRIBUTE:
            token = whitespace_normalize(token)
        result.append(token)
        previous = token
    return result


def jsonml_build(tokens: Optional[List[Token]]) -> Any:
    """
    Build the JsonML value for a token list.

    Args:
        tokens: Processed tokens with a single root (element, text,
            code block or command), or None

    Returns:
        JsonML value, or None for empty content

    Raises:
        TokenError: On unbalanced element tokens
    """
    if not tokens:
        return None

    roots: List[Any] = []
    stack: List[List[Any]] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        kind = token.token_type

        if kind in (MarkupTokenType.ELEMENT_BEGIN, MarkupTokenType.ELEMENT_VOID):
            element: List[Any] = [token.name.prefixed_name if token.name else ""]
            attributes: Dict[str, Any] = {}
            while index < len(tokens) and tokens[index].token_type is MarkupTokenType.ATTRIBUTE:
                attr = tokens[index]
                value = tokens[index + 1].value if index + 1 < len(tokens) else None
                attributes[attr.name.prefixed_name] = value
                index += 2
            if attributes:
                element.append(attributes)
            (stack[-1] if stack else roots).append(element)
            if kind is MarkupTokenType.ELEMENT_BEGIN:
                stack.append(element)

        elif kind is MarkupTokenType.ELEMENT_END:
            if not stack:
                raise TokenError(token, "Unexpected element end")
            stack.pop()

        elif kind is MarkupTokenType.PRIMITIVE:
            (stack[-1] if stack else roots).append(token.value)

        else:
            raise TokenError(token, f"Unexpected token: {kind.name}")

    if stack:
        raise TokenError(tokens[-1], f"Unclosed element <{stack[-1][0]}>")
    if len(roots) == 1:
        return roots[0]
    # multiple roots only reach here from slot content; keep them together
    return [""] + roots
