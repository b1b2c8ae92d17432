"""
Pygments lexer for JBST templates

Drives both syntax highlighting of .jbst sources and the MarkupTokenizer,
which folds these lexemes into markup tokens.

Token types:
- Comment.Special: Server comments <%-- --%>
- Comment.Preproc: Code blocks <%@ %>, <%= %>, <% %>, ...
- Comment.Multiline: Markup comments <!-- -->
- Comment.Single: Declarations such as <!DOCTYPE html>
- Comment.Hashbang: Processing instructions <?xml ?>
- String.Other: CDATA sections
- Punctuation: Tag delimiters '<', '</', '>', '/>'
- Name.Tag: Element names
- Name.Attribute: Attribute names
- Operator: '=' between attribute name and value
- String.Delimiter: Quotes around attribute values
- String.Double / String.Single / String: Attribute value text
- Other: Raw <script>/<style> content
- Text: Everything else
"""

import re

from pygments.lexer import RegexLexer, bygroups, default, include
from pygments.token import (
    Text,
    Whitespace,
    Punctuation,
    Operator,
    Name,
    String,
    Comment,
    Other,
)

NAME = r"[\w:.$-]+"


class JbstLexer(RegexLexer):
    """
    Lexer for JBST markup

    Example:
        <li class="<%= this.data.css %>"><%= this.data.label %></li>

    Tokens:
        <                     → Punctuation
        li                    → Name.Tag
        class                 → Name.Attribute
        =                     → Operator
        "                     → String.Delimiter
        <%= this.data.css %>  → Comment.Preproc
        >                     → Punctuation
    """

    name = 'JBST'
    aliases = ['jbst']
    filenames = ['*.jbst']
    mimetypes = ['text/x-jbst']

    flags = re.IGNORECASE | re.DOTALL

    tokens = {
        'root': [
            include('blocks'),
            (r'<!\[CDATA\[.*?\]\]>', String.Other),
            (r'<![^>]*>', Comment.Single),
            (r'<\?.*?\?>', Comment.Hashbang),

            # Closing tags
            (r'(</)(\s*)(' + NAME + r')(\s*)(>)',
             bygroups(Punctuation, Whitespace, Name.Tag, Whitespace, Punctuation)),

            # Raw-content elements
            (r'(<)(script)\b', bygroups(Punctuation, Name.Tag), 'script-tag'),
            (r'(<)(style)\b', bygroups(Punctuation, Name.Tag), 'style-tag'),

            # Opening tags
            (r'(<)(' + NAME + r')', bygroups(Punctuation, Name.Tag), 'tag'),

            (r'[^<]+', Text),
            (r'<', Text),
        ],

        'blocks': [
            (r'<%--.*?--%>', Comment.Special),
            (r'<%.*?%>', Comment.Preproc),
            (r'<!--.*?-->', Comment.Multiline),
        ],

        'attributes': [
            (r'\s+', Whitespace),
            include('blocks'),
            (r'(' + NAME + r')(\s*)(=)(\s*)',
             bygroups(Name.Attribute, Whitespace, Operator, Whitespace), 'attr-value'),
            (NAME, Name.Attribute),
        ],

        'tag': [
            include('attributes'),
            (r'/\s*>', Punctuation, '#pop'),
            (r'>', Punctuation, '#pop'),
        ],

        'script-tag': [
            include('attributes'),
            (r'/\s*>', Punctuation, '#pop'),
            (r'>', Punctuation, ('#pop', 'script-content')),
        ],

        'style-tag': [
            include('attributes'),
            (r'/\s*>', Punctuation, '#pop'),
            (r'>', Punctuation, ('#pop', 'style-content')),
        ],

        'script-content': [
            (r'(</)(\s*)(script)(\s*)(>)',
             bygroups(Punctuation, Whitespace, Name.Tag, Whitespace, Punctuation), '#pop'),
            (r'.+?(?=</\s*script\s*>)', Other),
            (r'.+', Other),
        ],

        'style-content': [
            (r'(</)(\s*)(style)(\s*)(>)',
             bygroups(Punctuation, Whitespace, Name.Tag, Whitespace, Punctuation), '#pop'),
            (r'.+?(?=</\s*style\s*>)', Other),
            (r'.+', Other),
        ],

        'attr-value': [
            (r'"', String.Delimiter, ('#pop', 'double-quoted')),
            (r"'", String.Delimiter, ('#pop', 'single-quoted')),
            (r'<%--.*?--%>', Comment.Special, '#pop'),
            (r'<%.*?%>', Comment.Preproc, '#pop'),
            (r'[^\s>"\']+', String, '#pop'),
            default('#pop'),
        ],

        'double-quoted': [
            (r'"', String.Delimiter, '#pop'),
            include('blocks'),
            (r'[^"<]+', String.Double),
            (r'<', String.Double),
        ],

        'single-quoted': [
            (r"'", String.Delimiter, '#pop'),
            include('blocks'),
            (r"[^'<]+", String.Single),
            (r'<', String.Single),
        ],
    }


def get_lexer() -> JbstLexer:
    """
    Get the JbstLexer instance

    Returns:
        JbstLexer instance ready for use with Pygments
    """
    return JbstLexer()
