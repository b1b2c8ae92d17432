"""
Directive tests

Tests DirectiveProcessor against CompilationState.
"""

import pytest

from jbst.lib.directives import DirectiveProcessor
from jbst.lib.errors import TokenError
from jbst.models.blocks import AutoMarkupType
from jbst.models.state import CompilationState
from jbst.models.tokens import MarkupTokenType, Token


@pytest.fixture
def state():
    return CompilationState("~/Foo.jbst")


@pytest.fixture
def processor():
    return DirectiveProcessor()


class TestTemplateDirective:
    """page / control / view directives"""

    @pytest.mark.parametrize("directive", ["Page", "Control", "view", "CONTROL"])
    def test_name(self, state, processor, directive):
        processor.directive_process(state, f' {directive} Name="App.List" ')

        assert state.name == "App.List"

    def test_settings_case_insensitive(self, state, processor):
        processor.directive_process(state, ' Control NAME="A.B" automarkup="auto" ')

        assert state.name == "A.B"
        assert state.auto_markup is AutoMarkupType.AUTO

    def test_import_list(self, state, processor):
        processor.directive_process(state, ' Control Import="Foo.Bar,Baz  Qux" ')

        assert state.imports == ["Foo.Bar", "Baz", "Qux"]

    def test_other_attributes_ignored(self, state, processor):
        processor.directive_process(state, ' Control Language="JavaScript" Inherits="X" ')

        assert state.name == "Foo"

    def test_invalid_automarkup(self, state, processor):
        origin = Token(MarkupTokenType.PRIMITIVE, value="directive", line=7, column=3)

        with pytest.raises(TokenError) as excinfo:
            processor.directive_process(state, ' Page AutoMarkup="never" ', origin)

        assert excinfo.value.lineno == 7
        assert excinfo.value.offset == 3

    def test_name_after_use(self, state, processor):
        """A name that has been used cannot change"""
        assert state.name == "Foo"

        with pytest.raises(TokenError):
            processor.directive_process(state, ' Control Name="Other" ')


class TestImportDirective:
    """import directive"""

    def test_namespace(self, state, processor):
        processor.directive_process(state, ' Import Namespace="Lib.Util" ')
        processor.directive_process(state, ' Import Namespace="Lib.Util" ')

        assert state.imports == ["Lib.Util"]

    def test_shared_with_nested_states(self, state, processor):
        """Imports made in a nested body belong to the whole template"""
        child = state.child_create()

        processor.directive_process(child, ' Import Namespace="Shared" ')

        assert state.imports == ["Shared"]


class TestMalformed:
    """Unusual directive text"""

    def test_empty(self, state, processor):
        processor.directive_process(state, "   ")

        assert state.imports == []

    def test_unknown_directive(self, state, processor):
        processor.directive_process(state, ' Register TagPrefix="x" ')

        assert state.imports == []

    def test_not_a_tag(self, state, processor):
        with pytest.raises(TokenError):
            processor.directive_process(state, ' "Name" ')
