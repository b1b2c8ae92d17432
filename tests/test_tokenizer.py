"""
Tokenizer tests

Tests MarkupTokenizer: element/attribute tokens, code block splitting,
text decoding, positions and auto-balancing.
"""

from jbst.lib.tokenizer import MarkupTokenizer, block_split
from jbst.models.tokens import DataName, MarkupTokenType, Token, UnparsedBlock

BEGIN = MarkupTokenType.ELEMENT_BEGIN
VOID = MarkupTokenType.ELEMENT_VOID
END = MarkupTokenType.ELEMENT_END
ATTR = MarkupTokenType.ATTRIBUTE
PRIM = MarkupTokenType.PRIMITIVE


def tokenize(text: str, auto_balance: bool = True):
    return MarkupTokenizer(auto_balance=auto_balance).tokens_get(text)


class TestElements:
    """Element and attribute tokens"""

    def test_empty_source(self):
        """Empty source has no tokens"""
        assert tokenize("") == []

    def test_element_with_attribute_and_text(self):
        """Attributes are followed by their values"""
        tokens = tokenize('<p class="x">Hi</p>')

        assert tokens == [
            Token(BEGIN, DataName("p")),
            Token(ATTR, DataName("class")),
            Token(PRIM, value="x"),
            Token(PRIM, value="Hi"),
            Token(END),
        ]

    def test_prefixed_names(self):
        """Prefixes are split from local names"""
        tokens = tokenize('<jbst:control jbst:visible="a" />')

        assert tokens[0] == Token(VOID, DataName("control", "jbst"))
        assert tokens[1] == Token(ATTR, DataName("visible", "jbst"))

    def test_self_closing_and_void_elements(self):
        """'/>' and HTML void elements produce void tokens"""
        tokens = tokenize("<br><hr/><span/>")

        assert [t.token_type for t in tokens] == [VOID, VOID, VOID]

    def test_boolean_attribute(self):
        """Attributes without a value take their own name"""
        tokens = tokenize("<input disabled>")

        assert tokens[1:] == [Token(ATTR, DataName("disabled")), Token(PRIM, value="disabled")]

    def test_unquoted_and_single_quoted_values(self):
        """Attribute values need not be double-quoted"""
        tokens = tokenize("<a href=x.html title='it'>")

        values = [t.value for t in tokens if t.token_type is PRIM]
        assert values == ["x.html", "it"]

    def test_empty_attribute_value(self):
        """Empty quoted values stay empty strings"""
        tokens = tokenize('<a title="">')

        assert tokens[2] == Token(PRIM, value="")

    def test_attribute_entities_decoded(self):
        """Character references in attribute values are decoded"""
        tokens = tokenize('<a title="a &amp; b">')

        assert tokens[2] == Token(PRIM, value="a & b")


class TestCodeBlocks:
    """Delimited blocks become UnparsedBlock primitives"""

    def test_block_in_text(self):
        """Code blocks split the surrounding text"""
        tokens = tokenize("a<%= x %>b")

        assert tokens == [
            Token(PRIM, value="a"),
            Token(PRIM, value=UnparsedBlock("%=", "%", " x ")),
            Token(PRIM, value="b"),
        ]

    def test_lone_block_attribute_value(self):
        """A block filling an attribute value stays a block"""
        tokens = tokenize('<a href="<%= this.url %>">')

        assert tokens[2] == Token(PRIM, value=UnparsedBlock("%=", "%", " this.url "))

    def test_mixed_attribute_value(self):
        """A block mixed with text becomes its markup text"""
        tokens = tokenize('<a href="/x/<%= id %>">')

        assert tokens[2] == Token(PRIM, value="/x/<%= id %>")

    def test_block_with_markup_inside(self):
        """Markup inside a code block is not tokenized"""
        tokens = tokenize("<% if (a < b) { %><i/><% } %>")

        assert tokens[0] == Token(PRIM, value=UnparsedBlock("%", "%", " if (a < b) { "))
        assert tokens[1] == Token(VOID, DataName("i"))


class TestBlockSplit:
    """Delimiter splitting"""

    def test_block_split(self):
        """Each delimiter form yields its begin/end markers"""
        cases = {
            "<%= a %>": UnparsedBlock("%=", "%", " a "),
            "<%@ Page %>": UnparsedBlock("%@", "%", " Page "),
            "<%! var x; %>": UnparsedBlock("%!", "%", " var x; "),
            "<%# raw %>": UnparsedBlock("%#", "%", " raw "),
            "<%$ A: b %>": UnparsedBlock("%$", "%", " A: b "),
            "<% x(); %>": UnparsedBlock("%", "%", " x(); "),
            "<%-- c --%>": UnparsedBlock("%--", "--%", " c "),
            "<!-- c -->": UnparsedBlock("!--", "--", " c "),
            "<?xml v?>": UnparsedBlock("?", "?", "xml v"),
            "<!DOCTYPE html>": UnparsedBlock("!", "", "DOCTYPE html"),
        }
        for lexeme, expected in cases.items():
            assert block_split(lexeme) == expected, lexeme

    def test_markup_get_restores_text(self):
        """markup_get() reproduces the original lexeme"""
        for lexeme in ("<%= a %>", "<%-- c --%>", "<!-- c -->", "<!DOCTYPE html>"):
            assert block_split(lexeme).markup_get() == lexeme


class TestRawContent:
    """Script, style and CDATA content"""

    def test_script_content_raw(self):
        """Script content is neither tokenized nor decoded"""
        tokens = tokenize("<script>if (a < b && c) { x = '&amp;'; }</script>")

        assert tokens[1] == Token(PRIM, value="if (a < b && c) { x = '&amp;'; }")
        assert tokens[2] == Token(END)

    def test_style_content_raw(self):
        """Style content is kept as text"""
        tokens = tokenize("<style>p > i { color: red }</style>")

        assert tokens[1] == Token(PRIM, value="p > i { color: red }")

    def test_cdata_is_text(self):
        """CDATA sections are literal text"""
        tokens = tokenize("<p><![CDATA[a <b> &amp;]]></p>")

        assert tokens[1] == Token(PRIM, value="a <b> &amp;")


class TestBalancing:
    """Auto-balancing of element tokens"""

    def test_unclosed_closed_at_end(self):
        """Open elements are closed at end of input"""
        tokens = tokenize("<div><p>x")

        assert [t.token_type for t in tokens] == [BEGIN, BEGIN, PRIM, END, END]

    def test_stray_end_dropped(self):
        """Closing tags without an open element are dropped"""
        tokens = tokenize("x</p>y")

        assert [t.value for t in tokens] == ["x", "y"]

    def test_implicit_close(self):
        """Closing an outer element closes inner ones"""
        tokens = tokenize("<ul><li>a</ul>")

        assert [t.token_type for t in tokens] == [BEGIN, BEGIN, PRIM, END, END]

    def test_end_tag_case_insensitive(self):
        """End tags match regardless of case"""
        tokens = tokenize("<DIV>x</div>")

        assert [t.token_type for t in tokens] == [BEGIN, PRIM, END]

    def test_balancing_off(self):
        """Without balancing nothing is added or dropped"""
        tokens = tokenize('<Control Name="x">', auto_balance=False)

        assert [t.token_type for t in tokens] == [BEGIN, ATTR, PRIM]


class TestPositions:
    """Token line/column tracking"""

    def test_positions(self):
        """Tokens carry 1-based line and column"""
        tokens = tokenize("<p>\n  <b>x</b></p>")

        bold = tokens[2]
        assert bold.name == DataName("b")
        assert (bold.line, bold.column) == (2, 3)
        assert (tokens[0].line, tokens[0].column) == (1, 1)

    def test_positions_ignored_by_equality(self):
        """Equality compares type, name and value only"""
        assert Token(PRIM, value="a", line=3, column=9) == Token(PRIM, value="a")
