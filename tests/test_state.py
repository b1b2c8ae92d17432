"""
Compilation state tests

Tests template naming, nested state sharing and declaration rendering.
"""

import pytest

from jbst.models.state import CompilationState, DeclarationBlock


class TestNaming:
    """Default and explicit template names"""

    @pytest.mark.parametrize("file_path,namespace,expected", [
        ("~/Foo.jbst", None, "Foo"),
        ("A/B/C.jbst", "NS", "NS.C"),
        ("A\\B\\my list.jbst", None, "my_list"),
        ("~/2col.jbst", "app-ns", "app_ns._2col"),
        ("~/noext", None, "noext"),
        ("A/B/my-list.v2.jbst", "NS", "NS.my_list_v2"),
        ("", None, "Template"),
    ])
    def test_derived(self, file_path, namespace, expected):
        assert CompilationState(file_path, namespace).name == expected

    def test_explicit_name_sanitized(self):
        state = CompilationState("~/Foo.jbst")
        state.name = "My.new.my-list"

        assert state.name == "My._new.my_list"

    def test_name_frozen_after_read(self):
        state = CompilationState("~/Foo.jbst")
        assert state.name == "Foo"

        with pytest.raises(ValueError):
            state.name = "Bar"

    def test_name_settable_until_read(self):
        state = CompilationState("~/Foo.jbst")
        state.name = "A"
        state.name = "B"

        assert state.name == "B"

    def test_child_uses_parent_name(self):
        state = CompilationState("~/Foo.jbst", "NS")
        child = state.child_create().child_create()

        assert child.name == "NS.Foo"


class TestNestedStates:
    """Sharing between a template and its nested bodies"""

    def test_shared_lists(self):
        state = CompilationState("~/Foo.jbst")
        child = state.child_create()

        child.import_add("Lib")
        child.references.append("Other")

        assert state.imports == ["Lib"]
        assert state.references == ["Other"]

    def test_own_declarations_and_slots(self):
        state = CompilationState("~/Foo.jbst")
        child = state.child_create()

        child.declarations.append("var x;")
        child.namedTemplate_add("header", None)

        assert state.declarations.is_empty()
        assert state.named_templates == {}

    def test_descendants_in_document_order(self):
        state = CompilationState("~/Foo.jbst")
        first = state.child_create()
        grandchild = first.child_create()
        second = state.child_create()

        assert state.descendants_walk() == [first, grandchild, second]


class TestDeclarationBlock:
    """Initialization IIFE"""

    def test_empty_renders_nothing(self):
        block = DeclarationBlock()
        block.append("")
        block.append("  \n ")

        assert block.render("Foo") == ""

    def test_render(self):
        block = DeclarationBlock()
        block.append("\n  var a = 1;")
        block.append("\nvar b = 2;\n")

        assert block.render("App.Foo") == (
            '// initialize template in the context of "this"\n'
            "(function() {\n"
            "\tvar a = 1;\n"
            "var b = 2;\n"
            "}).call(App.Foo);"
        )

    def test_default_owner(self):
        block = DeclarationBlock(["x();"])

        assert block.render().endswith("}).call(this);")
