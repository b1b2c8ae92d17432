"""
Code block tests

Tests delimiter classification and CodeBlockFormatter rendering.
"""

import pytest

from jbst.lib.codeblocks import CodeBlockFormatter, delimiter_classify
from jbst.lib.extensions import ExtensionRegistry
from jbst.models.blocks import CodeBlock, CodeBlockKind
from jbst.models.tokens import UnparsedBlock


@pytest.fixture
def formatter():
    return CodeBlockFormatter(ExtensionRegistry(app_settings={"title": "Hi", "count": 3}))


class TestDelimiterClassify:
    """The opening delimiter selects the kind"""

    @pytest.mark.parametrize("begin,end,kind", [
        ("%@", "%", CodeBlockKind.DIRECTIVE),
        ("%!", "%", CodeBlockKind.DECLARATION),
        ("%#", "%", CodeBlockKind.UNPARSED),
        ("%=", "%", CodeBlockKind.EXPRESSION),
        ("%$", "%", CodeBlockKind.EXTENSION),
        ("%", "%", CodeBlockKind.STATEMENT),
        ("%--", "--%", CodeBlockKind.SERVER_COMMENT),
        ("!--", "--", CodeBlockKind.COMMENT),
    ])
    def test_known_delimiters(self, begin, end, kind):
        block = delimiter_classify(UnparsedBlock(begin, end, " x "))

        assert block.kind is kind
        assert block.raw_text == " x "

    @pytest.mark.parametrize("begin,end", [("!", ""), ("?", "?"), ("%:", "%")])
    def test_other_delimiters_not_code(self, begin, end):
        """Declarations, processing instructions and unknown markers stay markup"""
        assert delimiter_classify(UnparsedBlock(begin, end, "x")) is None

    def test_extension_parsed(self):
        """Extension blocks carry their prefix, value and template path"""
        block = delimiter_classify(UnparsedBlock("%$", "%", " Resources: key "), "~/Foo.jbst")

        assert block.extension.prefix == "Resources"
        assert block.extension.value == "key"
        assert block.extension.file_path == "~/Foo.jbst"


class TestBlockRender:
    """Rendering per kind"""

    def test_expression(self, formatter):
        block = CodeBlock(CodeBlockKind.EXPRESSION, " this.data.name ")

        assert formatter.block_render(block) == "function() {\n\treturn this.data.name;\n}"

    def test_statement(self, formatter):
        block = CodeBlock(CodeBlockKind.STATEMENT, "\nthis.x = 1;\n")

        assert formatter.block_render(block) == "function() {\n\t\t\t\tthis.x = 1;\n\t\t\t}"

    def test_comment(self, formatter):
        block = CodeBlock(CodeBlockKind.COMMENT, " note ")

        assert formatter.block_render(block) == '""/* note */'

    def test_comment_terminator_escaped(self, formatter):
        """A comment cannot close the script comment early"""
        block = CodeBlock(CodeBlockKind.COMMENT, " a */ b ")

        assert formatter.block_render(block) == '""/* a *\\/ b */'

    def test_unparsed_bound(self, formatter):
        """Unparsed blocks evaluate their code and hand the result to JsonML.raw"""
        block = CodeBlock(CodeBlockKind.UNPARSED, " this.data.html ")

        assert formatter.block_render(block) == (
            "function() {\n\treturn JsonML.raw(this.data.html);\n}"
        )

    def test_extension(self, formatter):
        block = delimiter_classify(UnparsedBlock("%$", "%", " AppSettings: count "))

        assert formatter.block_render(block) == "3"

    @pytest.mark.parametrize("kind", [
        CodeBlockKind.DIRECTIVE,
        CodeBlockKind.DECLARATION,
        CodeBlockKind.SERVER_COMMENT,
    ])
    def test_no_output_kinds(self, formatter, kind):
        """Compiler-consumed kinds render nothing"""
        assert formatter.block_render(CodeBlock(kind, " x ")) is None

    @pytest.mark.parametrize("kind", [
        CodeBlockKind.COMMENT,
        CodeBlockKind.EXPRESSION,
        CodeBlockKind.STATEMENT,
        CodeBlockKind.UNPARSED,
    ])
    def test_empty_blocks_render_nothing(self, formatter, kind):
        """Whitespace-only blocks produce no value"""
        assert formatter.block_render(CodeBlock(kind, "  \n ")) is None


class TestArgumentRender:
    """Command arguments as script expressions"""

    def test_default(self, formatter):
        assert formatter.argument_render(None, "this.data") == "this.data"

    def test_plain_text_is_script(self, formatter):
        assert formatter.argument_render(" this.data.items ", "this.data") == "this.data.items"

    def test_blank_text_uses_default(self, formatter):
        assert formatter.argument_render("   ", "this.index") == "this.index"

    def test_expression_contributes_code(self, formatter):
        block = CodeBlock(CodeBlockKind.EXPRESSION, " this.data.items ")

        assert formatter.argument_render(block, "this.data") == "this.data.items"

    def test_statement_invoked_in_place(self, formatter):
        block = CodeBlock(CodeBlockKind.STATEMENT, " return 1; ")

        assert formatter.argument_render(block, "this.data") == (
            "(function() {\n\t\t\t\treturn 1;\n\t\t\t}).call(this)"
        )

    def test_server_comment_uses_default(self, formatter):
        block = CodeBlock(CodeBlockKind.SERVER_COMMENT, " gone ")

        assert formatter.argument_render(block, "this.count") == "this.count"
