"""
EcmaScript lexical helpers

Identifier verification/sanitizing for template names and object keys,
plus literal quoting for strings and scalars embedded in generated script.
"""

import re
import json
from typing import Any

RESERVED_WORDS: frozenset = frozenset("""
    break case catch class const continue debugger default delete do else
    enum export extends false finally for function if implements import in
    instanceof interface let new null package private protected public
    return static super switch this throw true try typeof var void while
    with yield
""".split())

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
INVALID_CHAR_PATTERN = re.compile(r"[^A-Za-z0-9_$]")


def identifier_is(name: str) -> bool:
    """True if name can be written as a bare identifier"""
    return bool(name) and bool(IDENTIFIER_PATTERN.match(name)) and name not in RESERVED_WORDS


def segment_sanitize(segment: str) -> str:
    """
    Coerce one identifier segment into a valid identifier.

    Invalid characters become '_'; a leading digit or a reserved word
    gets a '_' prefix.

    Example:
        >>> segment_sanitize('my-list')
        'my_list'
        >>> segment_sanitize('2col')
        '_2col'
    """
    clean = INVALID_CHAR_PATTERN.sub("_", segment.strip())
    if not clean:
        return "_"
    if clean[0].isdigit() or clean in RESERVED_WORDS:
        clean = "_" + clean
    return clean


def identifier_ensure(name: str, nested: bool = True) -> str:
    """
    Sanitize a (possibly dot-qualified) identifier.

    Args:
        name: Candidate identifier, e.g. 'Foo.my-list'
        nested: Treat '.' as a namespace separator

    Returns:
        Sanitized identifier, or '' for empty input
    """
    name = (name or "").strip()
    if not name:
        return ""
    if not nested:
        return segment_sanitize(name)
    return ".".join(segment_sanitize(part) for part in name.split("."))


def string_quote(text: str) -> str:
    """
    Render text as a double-quoted string literal.

    Line/paragraph separators are escaped because they terminate
    lines in script source even though JSON allows them raw.
    """
    quoted = json.dumps(text, ensure_ascii=False)
    return quoted.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")


def scalar_format(value: Any) -> str:
    """Render None, bool, number or string as a literal"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    return string_quote(str(value))


def key_format(key: str) -> str:
    """Object literal key: bare where legal, quoted otherwise"""
    if identifier_is(key):
        return key
    return string_quote(key)
